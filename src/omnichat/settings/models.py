"""Application settings model and pure update helpers."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .presets import DEFAULT_API_URL, DEFAULT_MODEL, DEFAULT_SYSTEM_PROMPT, DEFAULT_TEMPERATURE


class AppSettings(BaseModel):
    """Process-wide connection settings.

    Instances are immutable; use :func:`apply_settings_change` to derive a
    new value. ``key_map`` remembers the last key used for each endpoint URL.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    api_key: str = Field(default="", description="Key for the current endpoint")
    api_url: str = Field(default=DEFAULT_API_URL, description="Endpoint or base URL")
    model: str = Field(default=DEFAULT_MODEL, description="Model identifier")
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT)
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    key_map: dict[str, str] = Field(default_factory=dict, description="API key per endpoint URL")


def resolve_api_key(key_map: dict[str, str], url: str) -> str:
    """Return the key last used with ``url``, or an empty string."""
    return key_map.get(url, "")


def apply_settings_change(settings: AppSettings, **changes: Any) -> AppSettings:
    """Return a copy of ``settings`` with ``changes`` applied.

    Switching ``api_url`` restores the key remembered for the new URL unless
    a key is given in the same call. Setting ``api_key`` records it in
    ``key_map`` under the (possibly new) URL.

    Raises:
        ValueError: If a field name is unknown or a value fails validation
    """
    unknown = set(changes) - set(AppSettings.model_fields)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

    data = settings.model_dump()
    key_map = dict(data["key_map"])
    data.update(changes)

    if "api_url" in changes and "api_key" not in changes:
        data["api_key"] = resolve_api_key(key_map, data["api_url"])
    if "api_key" in changes:
        key_map[data["api_url"]] = data["api_key"]
    data["key_map"] = key_map

    return AppSettings.model_validate(data)
