"""Process-wide settings consulted while building and rendering components.

ComponentSettings

`unknown_attributes` (`"ignore" | "warn" | "error"`)
: What to do with constructor keys that the class never declared. `ignore`
  drops them silently (default), `warn` drops them and reports a diagnostic,
  `error` raises :class:`~spark_component.core.exceptions.UnknownAttributeError`.

`validate_on_render` (`bool`)
: Run the class validator right after an element produces its content.
  Disable it to render invalid trees while prototyping templates.

`escape_attribute_values` (`bool`)
: HTML-escape values when a tag attribute container is serialised.

`diagnostics` (`"null" | "logging"`)
: Emitter used for warnings and structured events. `logging` forwards them to
  the ``spark_component`` loggers.

`debug` (`bool`)
: Forwarded to the emitter; enables the debug representation of events.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
import os
from threading import RLock
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


ENV_PREFIX = "SPARK_COMPONENT_"

_SETTINGS: ComponentSettings | None = None
_LOCK: RLock = RLock()


class ComponentSettings(BaseModel):
    """Library-wide switches for attribute handling and rendering."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    unknown_attributes: Literal["ignore", "warn", "error"] = "ignore"
    validate_on_render: bool = True
    escape_attribute_values: bool = True
    diagnostics: Literal["null", "logging"] = "null"
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ComponentSettings:
        """Build settings from ``SPARK_COMPONENT_*`` environment variables."""
        source = os.environ if environ is None else environ
        payload: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = source.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None or not raw.strip():
                continue
            payload[name] = raw.strip()
        return cls.model_validate(payload)

    def merged(self, **overrides: Any) -> ComponentSettings:
        """Return a validated copy with ``overrides`` applied."""
        data = self.model_dump()
        data.update(overrides)
        return type(self).model_validate(data)


def get_settings() -> ComponentSettings:
    """Return the lazily created settings singleton."""
    global _SETTINGS
    with _LOCK:
        if _SETTINGS is None:
            _SETTINGS = ComponentSettings.from_env()
        return _SETTINGS


def set_settings(settings: ComponentSettings) -> ComponentSettings:
    """Replace the current settings singleton and return it."""
    global _SETTINGS
    with _LOCK:
        _SETTINGS = settings
        return _SETTINGS


def configure(**overrides: Any) -> ComponentSettings:
    """Apply ``overrides`` on top of the current settings."""
    return set_settings(get_settings().merged(**overrides))


@contextmanager
def settings_context(**overrides: Any) -> Iterator[ComponentSettings]:
    """Temporarily override the global settings."""
    global _SETTINGS
    with _LOCK:
        previous = _SETTINGS
    current = configure(**overrides)
    try:
        yield current
    finally:
        with _LOCK:
            _SETTINGS = previous


__all__ = [
    "ComponentSettings",
    "configure",
    "get_settings",
    "set_settings",
    "settings_context",
]
