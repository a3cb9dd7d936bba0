"""Defaults, validation limits and storage keys."""

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
DEFAULT_TICK_INTERVAL_SECONDS = 1.0

DEFAULT_BASE_RATE = 10.0
DEFAULT_DAY_PERCENT = 100
DEFAULT_HISTORY_LIMIT = 30

MAX_BASE_RATE = 10000
MAX_DAY_PERCENT = 500
MAX_BONUS_PERCENT = 200

# Key-value storage keys
COMPENSATION_CONFIG_KEY = "compensation_config"
ACTIVE_SHIFT_KEY = "active_shift"
ACTIVE_STATE_KEY = "active_state"
UNUSED_BREAK_SECONDS_KEY = "unused_break_seconds"
