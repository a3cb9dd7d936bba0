from __future__ import annotations

from dataclasses import dataclass

from .common.datetime_utils import Clock, SystemClock
from .compensation.repository import ConfigProvider, KeyValueConfigProvider
from .core.constants import DEFAULT_HISTORY_LIMIT
from .database.connection import DBConfig, DatabaseConnection
from .history.mysql_history_repository import MySQLHistoryRepository
from .history.repository import HistoryStore
from .storage.mysql_key_value_store import MySQLKeyValueStore
from .timer.key_value_snapshot_store import KeyValueSnapshotStore
from .timer.repository import SnapshotStore
from .timer.state_machine import ShiftStateMachine
from .timer.tick import RequestTickScheduler


@dataclass(frozen=True)
class Container:
    config_provider: ConfigProvider
    history: HistoryStore
    snapshots: SnapshotStore
    tick_scheduler: RequestTickScheduler
    timer: ShiftStateMachine
    history_limit: int = DEFAULT_HISTORY_LIMIT


def build_timer_container(
    *,
    config_provider: ConfigProvider,
    history: HistoryStore,
    snapshots: SnapshotStore,
    clock: Clock | None = None,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
) -> Container:
    tick_scheduler = RequestTickScheduler()
    timer = ShiftStateMachine(
        config_provider,
        history,
        snapshots,
        clock=clock or SystemClock(),
        scheduler=tick_scheduler,
    )
    return Container(
        config_provider=config_provider,
        history=history,
        snapshots=snapshots,
        tick_scheduler=tick_scheduler,
        timer=timer,
        history_limit=history_limit,
    )


def build_container(*, db_config: dict, history_limit: int = DEFAULT_HISTORY_LIMIT) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    kv_store = MySQLKeyValueStore(conn)
    return build_timer_container(
        config_provider=KeyValueConfigProvider(kv_store),
        history=MySQLHistoryRepository(conn),
        snapshots=KeyValueSnapshotStore(kv_store),
        history_limit=history_limit,
    )
