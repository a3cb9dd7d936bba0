"""Store compensation settings from a JSON file.

Usage: python scripts/seed_config.py [path/to/compensation.json]
Defaults to examples/compensation.example.json.
"""

from __future__ import annotations

import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.shift_pay.shift_pay.compensation.model import CompensationConfig
from src.shift_pay.shift_pay.compensation.repository import KeyValueConfigProvider
from src.shift_pay.shift_pay.core.exceptions import ValidationError
from src.shift_pay.shift_pay.database.connection import DBConfig, DatabaseConnection
from src.shift_pay.shift_pay.storage.mysql_key_value_store import MySQLKeyValueStore


def main(argv: list[str]) -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))

    path = Path(argv[1]) if len(argv) > 1 else REPO_ROOT / "examples" / "compensation.example.json"
    config = CompensationConfig.from_dict(json.loads(path.read_text(encoding="utf-8")))

    conn = DatabaseConnection.get_instance(DBConfig.from_dict(settings.DB_CONFIG))
    provider = KeyValueConfigProvider(MySQLKeyValueStore(conn))
    try:
        provider.save(config)
    except ValidationError as e:
        raise SystemExit(f"Invalid compensation settings in {path}: {e}")

    print(
        f"OK: Stored compensation settings from {path} "
        f"(bonuses={len(config.time_bonuses)}, scheduled_breaks={len(config.scheduled_breaks)})"
    )


if __name__ == "__main__":
    main(sys.argv)
