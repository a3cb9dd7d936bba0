"""Example: drive the shift timer through the service layer (no Flask).

Controllers are a thin layer; the state machine holds the business rules.
"""

import importlib

from config import get_settings_module

from src.shift_pay.shift_pay.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    timer = container.timer
    timer.recover()
    timer.tick()
    print(timer.state.value, timer.readout)
    for shift in container.history.list_recent(5):
        print(shift.shift_id, shift.total_earnings, [s.to_dict() for s in shift.rate_segments])
    timer.close()


if __name__ == "__main__":
    main()
