from __future__ import annotations

import json
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import execute, query_all
from ..payroll.model import RateSegment
from ..timer.model import BreakInterval, FinalizedShift
from .repository import HistoryStore


class MySQLHistoryRepository(HistoryStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, shift: FinalizedShift) -> None:
        execute(
            self._conn_factory,
            """
            INSERT INTO shift_history
                (shift_id, start_time, end_time, base_rate_at_start, total_earnings,
                 unused_break_seconds, breaks_json, rate_segments_json)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            """,
            (
                shift.shift_id,
                shift.start_time,
                shift.end_time,
                shift.base_rate_at_start,
                shift.total_earnings,
                shift.unused_automatic_break_seconds,
                json.dumps([br.to_dict() for br in shift.breaks]),
                json.dumps([s.to_dict() for s in shift.rate_segments]),
            ),
        )

    def list_recent(self, limit: int) -> Sequence[FinalizedShift]:
        rows = query_all(
            self._conn_factory,
            """
            SELECT shift_id, start_time, end_time, base_rate_at_start, total_earnings,
                   unused_break_seconds, breaks_json, rate_segments_json
            FROM shift_history
            ORDER BY start_time DESC
            LIMIT %s
            """,
            (int(limit),),
        )
        return [self._to_shift(r) for r in rows]

    def delete(self, shift_id: str) -> bool:
        return execute(self._conn_factory, "DELETE FROM shift_history WHERE shift_id=%s", (shift_id,)) > 0

    def clear(self) -> int:
        return execute(self._conn_factory, "DELETE FROM shift_history")

    @staticmethod
    def _to_shift(r: dict) -> FinalizedShift:
        unused = r.get("unused_break_seconds")
        return FinalizedShift(
            shift_id=r["shift_id"],
            start_time=r["start_time"],
            end_time=r["end_time"],
            base_rate_at_start=float(r["base_rate_at_start"]),
            breaks=tuple(BreakInterval.from_dict(b) for b in json.loads(r["breaks_json"] or "[]")),
            total_earnings=float(r["total_earnings"]),
            rate_segments=tuple(RateSegment.from_dict(s) for s in json.loads(r["rate_segments_json"] or "[]")),
            unused_automatic_break_seconds=int(unused) if unused is not None else None,
        )
