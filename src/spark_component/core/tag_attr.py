"""Ordered HTML attribute container with nested ``data``/``aria`` groups.

Keys are stored in their HTML spelling (``foo_bar`` becomes ``foo-bar``) and
lookups accept either form. Empty values never make it into the container, so
serialising it always yields attributes worth emitting::

    attrs = TagAttr().add(id="nav", class_="main", data={"turbo_frame": "x", "y": None})
    str(attrs)  # 'id="nav" class="main" data-turbo-frame="x"'
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from markupsafe import Markup, escape

from .config import get_settings
from .utils import dasherize, is_set


CLASS_KEY = "class"


def _class_tokens(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Iterable) and not isinstance(value, Mapping):
        tokens: list[str] = []
        for item in value:
            tokens.extend(_class_tokens(item))
        return tokens
    return str(value).split()


def _merge_classes(*values: Any) -> str:
    seen: dict[str, None] = {}
    for value in values:
        for token in _class_tokens(value):
            seen.setdefault(token, None)
    return " ".join(seen)


def _format_value(value: Any) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, Enum):
        return _format_value(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, Iterable):
        return " ".join(_format_value(item) for item in value if is_set(item))
    return str(value)


class TagAttr(dict):
    """Mapping of HTML attribute names to values with nested prefixed groups."""

    def __init__(
        self, mapping: Mapping[Any, Any] | None = None, /, *, prefix: str | None = None, **kwargs: Any
    ) -> None:
        super().__init__()
        self.prefix = dasherize(prefix) if prefix else None
        if mapping or kwargs:
            self.add(mapping, **kwargs)

    def add(self, mapping: Mapping[Any, Any] | None = None, /, **kwargs: Any) -> TagAttr:
        """Merge entries, dropping empty values, and return the container."""
        if mapping:
            for key, value in mapping.items():
                self[key] = value
        for key, value in kwargs.items():
            self[key] = value
        return self

    def update(self, *args: Any, **kwargs: Any) -> None:  # type: ignore[override]
        for mapping in args:
            self.add(dict(mapping))
        self.add(**kwargs)

    def __ior__(self, other: Any) -> TagAttr:
        if not isinstance(other, Mapping):
            return NotImplemented
        return self.add(other)

    def __or__(self, other: Any) -> TagAttr:
        if not isinstance(other, Mapping):
            return NotImplemented
        return self.copy().add(other)

    def setdefault(self, key: Any, default: Any = None) -> Any:
        if key not in self:
            self[key] = default
        return self.get(key)

    @classmethod
    def fromkeys(cls, iterable: Iterable[Any], value: Any = None) -> TagAttr:  # type: ignore[override]
        return cls().add({key: value for key in iterable})

    def _child_prefix(self, key: str) -> str:
        return f"{self.prefix}-{key}" if self.prefix else key

    def __setitem__(self, key: Any, value: Any) -> None:
        name = dasherize(key)
        if isinstance(value, Mapping):
            nested = dict.get(self, name)
            if not isinstance(nested, TagAttr):
                nested = TagAttr(prefix=self._child_prefix(name))
            nested.add(value)
            if nested:
                dict.__setitem__(self, name, nested)
            return

        if not is_set(value):
            return

        if name == CLASS_KEY:
            value = _merge_classes(dict.get(self, name), value)
            if not value:
                return
        dict.__setitem__(self, name, value)

    def __getitem__(self, key: Any) -> Any:
        return dict.__getitem__(self, dasherize(key))

    def __delitem__(self, key: Any) -> None:
        dict.__delitem__(self, dasherize(key))

    def __contains__(self, key: object) -> bool:
        return dict.__contains__(self, dasherize(key))

    def get(self, key: Any, default: Any = None) -> Any:
        return dict.get(self, dasherize(key), default)

    def pop(self, key: Any, *default: Any) -> Any:
        return dict.pop(self, dasherize(key), *default)

    def copy(self) -> TagAttr:
        return TagAttr(self, prefix=self.prefix)

    @property
    def classname(self) -> str:
        """Return the ``class`` entry as a space separated string."""
        return _merge_classes(dict.get(self, CLASS_KEY))

    def _group(self, name: str) -> TagAttr:
        nested = dict.get(self, name)
        if isinstance(nested, TagAttr):
            return nested
        return TagAttr(prefix=self._child_prefix(name))

    @property
    def data(self) -> TagAttr:
        """Return the nested ``data-*`` attributes."""
        return self._group("data")

    @property
    def aria(self) -> TagAttr:
        """Return the nested ``aria-*`` attributes."""
        return self._group("aria")

    def to_s(self) -> str:
        """Serialise the container as an HTML attribute string."""
        escape_values = get_settings().escape_attribute_values
        parts: list[str] = []
        for key, value in self.items():
            if isinstance(value, TagAttr):
                rendered = value.to_s()
                if rendered:
                    parts.append(rendered)
                continue
            name = f"{self.prefix}-{key}" if self.prefix else key
            text = _format_value(value)
            if escape_values:
                text = str(escape(text))
            parts.append(f'{name}="{text}"')
        return " ".join(parts)

    def __str__(self) -> str:
        return self.to_s()

    def __html__(self) -> Markup:
        return Markup(self.to_s())

    def __repr__(self) -> str:
        return f"TagAttr({dict.__repr__(self)}, prefix={self.prefix!r})"


__all__ = ["TagAttr"]
