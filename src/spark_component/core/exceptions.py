"""Custom exception hierarchy for component declaration and rendering."""

from __future__ import annotations


class ComponentError(RuntimeError):
    """Base exception for component and element failures."""


class ConfigurationError(ComponentError):
    """Raised when a class declares attributes or elements incorrectly."""


class DefaultGroupError(ConfigurationError):
    """Raised when a default group bundle is not a mapping."""


class ElementError(ConfigurationError):
    """Raised when a generated accessor would overwrite an existing method."""


class UnknownAttributeError(ComponentError):
    """Raised for undeclared attributes when the ``error`` policy is active."""


class ValidationFailedError(ComponentError):
    """Raised when an element fails validation while producing its content."""

    def __init__(self, model_name: str, messages: list[str]) -> None:
        self.model_name = model_name
        self.messages = list(messages)
        super().__init__("Validation failed: " + ", ".join(self.messages))


__all__ = [
    "ComponentError",
    "ConfigurationError",
    "DefaultGroupError",
    "ElementError",
    "UnknownAttributeError",
    "ValidationFailedError",
]
