"""Small value helpers shared by the attribute and element layers."""

from __future__ import annotations

from collections.abc import Sized
from enum import Enum
import keyword
import re
from typing import Any


_PLURAL_EXCEPTIONS = {
    "child": "children",
    "person": "people",
    "man": "men",
    "woman": "women",
    "foot": "feet",
    "tooth": "teeth",
    "mouse": "mice",
    "datum": "data",
    "index": "indices",
    "criterion": "criteria",
    "sheep": "sheep",
    "series": "series",
    "species": "species",
    "news": "news",
}

_SIBILANT_RE = re.compile(r"(s|x|z|ch|sh)$")
_CONSONANT_Y_RE = re.compile(r"[^aeiou]y$")


def is_set(value: Any) -> bool:
    """Return True unless ``value`` is None or an empty collection.

    ``False`` and ``0`` count as set values.
    """
    if value is None:
        return False
    if isinstance(value, Sized):
        return len(value) > 0
    return True


def scalar(value: Any) -> Any:
    """Return the comparable payload of enum members, other values unchanged."""
    if isinstance(value, Enum):
        return value.value
    return value


def normalise_name(name: Any) -> str:
    """Return an attribute name with a keyword-escaping underscore removed.

    Keyword arguments such as ``class_`` or ``for_`` map to ``class``/``for``.
    """
    text = str(scalar(name))
    if text.endswith("_") and keyword.iskeyword(text[:-1]):
        return text[:-1]
    return text


def dasherize(name: Any) -> str:
    """Return the HTML attribute spelling of ``name``."""
    return normalise_name(name).replace("_", "-")


def pluralize(word: str) -> str:
    """Return the English plural of an identifier such as ``item`` or ``nav_entry``."""
    head, sep, last = word.rpartition("_")
    lowered = last.lower()
    if lowered in _PLURAL_EXCEPTIONS:
        plural = _PLURAL_EXCEPTIONS[lowered]
    elif _SIBILANT_RE.search(lowered):
        plural = last + "es"
    elif _CONSONANT_Y_RE.search(lowered):
        plural = last[:-1] + "ies"
    else:
        plural = last + "s"
    return f"{head}{sep}{plural}"


def humanize(name: str) -> str:
    """Return ``name`` as a capitalised phrase (``min_size`` -> ``Min size``)."""
    text = name.replace("_", " ").replace("-", " ").strip()
    return text[:1].upper() + text[1:]


def to_sentence(items: list[str], *, connector: str = ", ", last: str = ", or ") -> str:
    """Join ``items`` into a readable enumeration."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return connector.join(items[:-1]) + last + items[-1]


__all__ = [
    "dasherize",
    "humanize",
    "is_set",
    "normalise_name",
    "pluralize",
    "scalar",
    "to_sentence",
]
