"""Run the shift timer in the foreground.

The active shift is persisted after every change, so stopping this process
(Ctrl-C) and starting it again resumes the shift where the clock now is.
"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.shift_pay.shift_pay.compensation.repository import KeyValueConfigProvider
from src.shift_pay.shift_pay.core.enums import TimerState
from src.shift_pay.shift_pay.database.connection import DBConfig, DatabaseConnection
from src.shift_pay.shift_pay.history.mysql_history_repository import MySQLHistoryRepository
from src.shift_pay.shift_pay.storage.mysql_key_value_store import MySQLKeyValueStore
from src.shift_pay.shift_pay.timer.key_value_snapshot_store import KeyValueSnapshotStore
from src.shift_pay.shift_pay.timer.state_machine import ShiftStateMachine
from src.shift_pay.shift_pay.timer.tick import AsyncioTickScheduler

logger = logging.getLogger("run_timer")


def _status_line(timer: ShiftStateMachine) -> str:
    r = timer.readout
    parts = [
        f"state={timer.state.value}",
        f"worked={r.elapsed_work_seconds}s",
        f"earnings={r.live_earnings:.2f}",
        f"rate={r.effective_rate:.2f} ({r.effective_percent:g}%)",
    ]
    if timer.state is TimerState.ON_MANUAL_BREAK:
        parts.append(f"break={r.elapsed_break_seconds}s")
    if r.automatic_break_countdown is not None:
        parts.append(f"countdown={r.automatic_break_countdown}s")
    if timer.unused_automatic_break_seconds:
        parts.append(f"unused={timer.unused_automatic_break_seconds}s")
    return " ".join(parts)


async def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the shift timer")
    parser.add_argument("--start", action="store_true", help="Start a shift if none is active")
    parser.add_argument("--end", action="store_true", help="End the active shift and exit")
    parser.add_argument("--reset", action="store_true", help="Discard the active shift and exit")
    parser.add_argument("--interval", type=float, default=None, help="Seconds between ticks")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    interval = args.interval or float(getattr(settings, "TICK_INTERVAL_SECONDS", 1))

    conn = DatabaseConnection.get_instance(DBConfig.from_dict(settings.DB_CONFIG))
    kv_store = MySQLKeyValueStore(conn)
    timer = ShiftStateMachine(
        KeyValueConfigProvider(kv_store),
        MySQLHistoryRepository(conn),
        KeyValueSnapshotStore(kv_store),
        scheduler=AsyncioTickScheduler(interval),
    )

    try:
        timer.recover()

        if args.reset:
            timer.reset_active_shift()
            return
        if args.end:
            finalized = timer.end_shift()
            if finalized:
                logger.info("Finalized %s: %.2f", finalized.shift_id, finalized.total_earnings)
            return
        if args.start:
            timer.start_shift()

        while timer.state is not TimerState.IDLE:
            logger.info(_status_line(timer))
            await asyncio.sleep(interval)
        logger.info("No active shift (use --start)")
    finally:
        timer.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
