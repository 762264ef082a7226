"""Application settings, presets and persistence."""

from .models import AppSettings, apply_settings_change, resolve_api_key
from .presets import (
    API_PRESETS,
    AVAILABLE_MODELS,
    DEFAULT_API_URL,
    DEFAULT_SYSTEM_PROMPT,
    FALLBACK_SYSTEM_PROMPT,
)
from .store import SETTINGS_KEY, SettingsStore

__all__ = [
    "API_PRESETS",
    "AVAILABLE_MODELS",
    "DEFAULT_API_URL",
    "DEFAULT_SYSTEM_PROMPT",
    "FALLBACK_SYSTEM_PROMPT",
    "SETTINGS_KEY",
    "AppSettings",
    "SettingsStore",
    "apply_settings_change",
    "resolve_api_key",
]
