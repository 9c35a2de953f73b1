"""Diagnostic abstractions shared by attributes, elements, and validators."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Protocol, runtime_checkable

from .config import get_settings


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Receiver for warnings and structured component events."""

    debug_enabled: bool

    def warning(self, message: str) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that discards every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Emitter writing to the ``spark_component`` loggers.

    Events with a summary are logged at INFO; the rest only reach DEBUG when
    ``debug_enabled`` is set.
    """

    def __init__(self, *, debug_enabled: bool = False) -> None:
        self.debug_enabled = debug_enabled

    def warning(self, message: str) -> None:
        logger.warning(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        summary = format_event_message(name, payload)
        if summary:
            logger.info(summary)
        elif self.debug_enabled:
            logger.debug("diagnostic event %s: %s", name, dict(payload))


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected diagnostic events."""
    data = dict(payload)

    if name == "attribute_discarded":
        owner = data.get("owner") or "<unknown>"
        keys = ", ".join(str(key) for key in data.get("keys") or ()) or "<none>"
        return f"Discarded undeclared attributes for {owner}: {keys}"

    if name == "validation_failed":
        owner = data.get("model_name") or "<unknown>"
        messages = data.get("messages") or []
        return f"Validation failed for {owner}: {'; '.join(messages)}"

    return None


_NULL_EMITTER = NullEmitter()


def get_emitter() -> DiagnosticEmitter:
    """Return the emitter selected by the current settings."""
    settings = get_settings()
    if settings.diagnostics == "logging":
        return LoggingEmitter(debug_enabled=settings.debug)
    return _NULL_EMITTER


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "format_event_message",
    "get_emitter",
]
