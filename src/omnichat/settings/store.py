"""Settings persistence on top of key-value storage."""

import json
import logging

from pydantic import ValidationError

from ..storage import KeyValueStorage
from .models import AppSettings

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"


class SettingsStore:
    """Load and save :class:`AppSettings` as one JSON document."""

    def __init__(self, storage: KeyValueStorage, key: str = SETTINGS_KEY):
        self._storage = storage
        self._key = key

    def load(self) -> AppSettings:
        """Return defaults merged under whatever partial value is persisted."""
        try:
            raw = self._storage.get(self._key)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read settings: %s", e)
            return AppSettings()
        if not raw:
            return AppSettings()

        try:
            stored = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Settings document is not valid JSON, using defaults")
            return AppSettings()
        if not isinstance(stored, dict):
            return AppSettings()

        merged = AppSettings().model_dump(by_alias=True)
        merged.update({k: v for k, v in stored.items() if v is not None})
        if not isinstance(merged.get("keyMap"), dict):
            merged["keyMap"] = {}
        try:
            return AppSettings.model_validate(merged)
        except ValidationError as e:
            logger.warning("Invalid stored settings, using defaults: %s", e.errors()[0]["msg"])
            return AppSettings()

    def save(self, settings: AppSettings) -> None:
        """Persist ``settings`` as a whole document."""
        self._storage.set(self._key, settings.model_dump_json(by_alias=True))
