from __future__ import annotations

import logging
from typing import Protocol

from ..common.validators import validate_compensation
from ..core.constants import COMPENSATION_CONFIG_KEY
from ..storage.repository import KeyValueStore
from .model import CompensationConfig

logger = logging.getLogger(__name__)


class ConfigProvider(Protocol):
    def get(self) -> CompensationConfig:
        raise NotImplementedError

    def save(self, config: CompensationConfig) -> CompensationConfig:
        raise NotImplementedError


class StaticConfigProvider(ConfigProvider):
    """Keeps the configuration in memory (tests, examples)."""

    def __init__(self, config: CompensationConfig):
        self._config = config

    def get(self) -> CompensationConfig:
        return self._config

    def save(self, config: CompensationConfig) -> CompensationConfig:
        self._config = validate_compensation(config)
        return self._config


class KeyValueConfigProvider(ConfigProvider):
    """Compensation settings stored as one JSON document."""

    def __init__(self, store: KeyValueStore, *, key: str = COMPENSATION_CONFIG_KEY):
        self._store = store
        self._key = key

    def get(self) -> CompensationConfig:
        data = self._store.get(self._key)
        if not data:
            return CompensationConfig()
        return CompensationConfig.from_dict(data)

    def save(self, config: CompensationConfig) -> CompensationConfig:
        validate_compensation(config)
        self._store.set(self._key, config.to_dict())
        logger.info(
            "Saved compensation config (base_rate=%s, bonuses=%d, scheduled_breaks=%d)",
            config.base_rate,
            len(config.time_bonuses),
            len(config.scheduled_breaks),
        )
        return config
