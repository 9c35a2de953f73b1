"""Declarative attribute management for components and elements.

Classes using :class:`AttributeMixin` declare their attributes in the class
body. Every marker becomes a read-only descriptor on the class::

    class Alert(ElementBase):
        label = Attribute()
        size = Attribute("large")
        role = TagAttribute("alert")
        live = AriaAttribute("polite")
        theme = Attribute("notice", groups={
            "notice": {"icon": "message", "color": "blue"},
            "error": {"icon": "warning", "color": "red"},
        })
        icon = Attribute()
        color = Attribute()

    alert = Alert(label="Saved", extra="dropped")
    alert.label          # "Saved"
    alert.icon           # "message", filled from the "notice" group
    str(alert.tag_attrs) # 'role="alert" aria-live="polite"'

Every schema starts with the base attributes ``id``, ``class``, ``data``,
``aria`` and ``html``. ``html`` accepts a mapping of extra tag attributes that
are passed through verbatim.

Subclasses compose their schema at class creation: the bases' schemas are
merged, then the class's own declarations are applied. Schemas are immutable,
so declaring in a subclass never changes its parents.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import copy
from dataclasses import dataclass, field, replace
import keyword
import logging
from types import MappingProxyType
from typing import Any, ClassVar, Literal

from .config import get_settings
from .diagnostics import get_emitter
from .exceptions import ConfigurationError, DefaultGroupError, ElementError, UnknownAttributeError
from .tag_attr import TagAttr
from .utils import is_set, normalise_name, scalar
from .validation import (
    AttributeRule,
    AttributeValidator,
    NullValidator,
    Validator,
    resolve_model_name,
)


logger = logging.getLogger(__name__)

BASE_ATTRIBUTES: tuple[str, ...] = ("id", "class", "data", "aria", "html")

AttributeKind = Literal["plain", "tag", "aria", "data"]

_PROTECTED_CLASSES: list[type] = []

# Marker default meaning "keep the inherited default, or None for a new name".
_INHERITED: Any = object()


def _freeze(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


def _union(current: tuple[str, ...], names: Iterable[str]) -> tuple[str, ...]:
    merged = dict.fromkeys(current)
    merged.update(dict.fromkeys(names))
    return tuple(merged)


def _freeze_groups(
    discriminator: str, bundles: Any
) -> Mapping[str, Mapping[str, Any]]:
    if not isinstance(bundles, Mapping):
        raise DefaultGroupError(
            f"Default group '{discriminator}' must map values to attribute defaults, "
            f"got {type(bundles).__name__}."
        )
    frozen: dict[str, Mapping[str, Any]] = {}
    for value, defaults in bundles.items():
        if not isinstance(defaults, Mapping):
            raise DefaultGroupError(
                f"Default group '{discriminator}' entry '{scalar(value)}' must be a mapping, "
                f"got {type(defaults).__name__}."
            )
        frozen[str(scalar(value))] = _freeze(
            {normalise_name(name): default for name, default in defaults.items()}
        )
    return _freeze(frozen)


@dataclass(frozen=True)
class AttributeSchema:
    """Immutable description of the attributes accepted by a class."""

    defaults: Mapping[str, Any] = field(default_factory=lambda: _freeze({}))
    tag_attributes: tuple[str, ...] = ()
    aria_attributes: tuple[str, ...] = ()
    data_attributes: tuple[str, ...] = ()
    default_groups: Mapping[str, Mapping[str, Mapping[str, Any]]] = field(
        default_factory=lambda: _freeze({})
    )
    rules: Mapping[str, AttributeRule] = field(default_factory=lambda: _freeze({}))

    @classmethod
    def base(cls) -> AttributeSchema:
        """Return the schema shared by every component and element."""
        return cls(
            defaults=_freeze(dict.fromkeys(BASE_ATTRIBUTES)),
            tag_attributes=BASE_ATTRIBUTES,
        )

    def merge(self, other: AttributeSchema) -> AttributeSchema:
        """Return a schema where declarations from ``other`` win."""
        rules = dict(self.rules)
        for name, rule in other.rules.items():
            rules[name] = rules[name].merge(rule) if name in rules else rule
        return AttributeSchema(
            defaults=_freeze({**self.defaults, **other.defaults}),
            tag_attributes=_union(self.tag_attributes, other.tag_attributes),
            aria_attributes=_union(self.aria_attributes, other.aria_attributes),
            data_attributes=_union(self.data_attributes, other.data_attributes),
            default_groups=_freeze({**self.default_groups, **other.default_groups}),
            rules=_freeze(rules),
        )

    def with_attributes(
        self, defaults: Mapping[str, Any], *, kind: AttributeKind = "plain"
    ) -> AttributeSchema:
        updated = replace(self, defaults=_freeze({**self.defaults, **defaults}))
        if kind == "tag":
            updated = replace(updated, tag_attributes=_union(self.tag_attributes, defaults))
        elif kind == "aria":
            updated = replace(updated, aria_attributes=_union(self.aria_attributes, defaults))
        elif kind == "data":
            updated = replace(updated, data_attributes=_union(self.data_attributes, defaults))
        return updated

    def with_default_group(self, discriminator: str, bundles: Any) -> AttributeSchema:
        frozen = _freeze_groups(discriminator, bundles)
        return replace(self, default_groups=_freeze({**self.default_groups, discriminator: frozen}))

    def with_rule(self, name: str, rule: AttributeRule) -> AttributeSchema:
        rules = dict(self.rules)
        rules[name] = rules[name].merge(rule) if name in rules else rule
        return replace(self, rules=_freeze(rules))


class Attribute:
    """Class-body marker declaring an attribute and its default value.

    Without a default, redeclaring an inherited attribute keeps the inherited
    default, so ``size = Attribute(validate={"presence": True})`` only adds a rule.
    """

    kind: ClassVar[AttributeKind] = "plain"
    __component_declaration__: ClassVar[bool] = True

    def __init__(
        self,
        default: Any = _INHERITED,
        *,
        choices: Iterable[Any] | None = None,
        groups: Mapping[Any, Mapping[str, Any]] | None = None,
        validate: Mapping[str, Any] | None = None,
    ) -> None:
        self.default = default
        self.choices = list(choices) if choices is not None else None
        self.groups = groups
        self.validate = dict(validate or {})
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.read_attribute(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        raise AttributeError(f"Attribute '{self.name}' is read-only")

    def rule_options(self) -> dict[str, Any]:
        options = dict(self.validate)
        if self.choices is not None:
            options.setdefault("choices", self.choices)
        return options

    def __repr__(self) -> str:
        if self.default is _INHERITED:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}({self.default!r})"


class TagAttribute(Attribute):
    """Attribute rendered as a top-level tag attribute."""

    kind = "tag"


class AriaAttribute(Attribute):
    """Attribute rendered under ``aria-*``."""

    kind = "aria"


class DataAttribute(Attribute):
    """Attribute rendered under ``data-*``."""

    kind = "data"


def protect(cls: type) -> type:
    """Register ``cls`` members as names generated accessors may not reuse."""
    _PROTECTED_CLASSES.append(cls)
    return cls


def guard_accessor(cls: type, name: str, *, replaceable: tuple[type, ...] = ()) -> None:
    """Raise when an accessor called ``name`` would overwrite an existing method.

    Members of protected library classes are never replaceable. Members defined
    on ``cls`` itself are only replaceable when they are instances of
    ``replaceable``. Inherited members are replaceable when they come from an
    earlier declaration, so subclasses may redeclare attributes and elements.
    """
    if not name.isidentifier() or keyword.iskeyword(name):
        raise ConfigurationError(f"'{name}' is not a valid accessor name.")
    for protected in _PROTECTED_CLASSES:
        if name in vars(protected):
            raise ElementError(f"Method '{name}' already exists.")
    for klass in cls.__mro__:
        if name not in vars(klass):
            continue
        member = vars(klass)[name]
        if klass is cls:
            if replaceable and isinstance(member, replaceable):
                continue
        elif getattr(member, "__component_declaration__", False):
            continue
        raise ElementError(f"Method '{name}' already exists.")


def declared_items(cls: type) -> list[tuple[str, Any]]:
    """Return class-body members of ``cls`` including those of its element config."""
    items: list[tuple[str, Any]] = []
    config = vars(cls).get("__element_config__")
    if config is not None:
        items.extend(vars(config).items())
    items.extend(vars(cls).items())
    return items


def _entries_from_args(args: Iterable[Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Convert mixed arguments to a mapping: ``("a", {"b": 1}), c=2`` -> ``{a, b, c}``."""
    entries: dict[str, Any] = {}
    for arg in args:
        if isinstance(arg, Mapping):
            entries.update({normalise_name(key): value for key, value in arg.items()})
        else:
            entries[normalise_name(arg)] = None
    entries.update({normalise_name(key): value for key, value in defaults.items()})
    return entries


def _apply_marker(schema: AttributeSchema, name: str, marker: Attribute) -> AttributeSchema:
    default = marker.default
    if default is _INHERITED:
        default = schema.defaults.get(name)
    schema = schema.with_attributes({name: default}, kind=marker.kind)
    if marker.groups is not None:
        schema = schema.with_default_group(name, marker.groups)
    options = marker.rule_options()
    if options:
        schema = schema.with_rule(name, AttributeRule.from_options(name, options))
    return schema


@protect
class AttributeMixin:
    """Mixin giving a class a declarative attribute schema."""

    __attribute_schema__: ClassVar[AttributeSchema] = AttributeSchema.base()
    validator: ClassVar[Validator] = NullValidator()

    _attribute_state: dict[str, Any]
    _tag_attrs: TagAttr | None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.__explicit_validator__ = any(name == "validator" for name, _ in declared_items(cls))

        schema = AttributeSchema()
        for base in reversed(cls.__bases__):
            inherited = getattr(base, "__attribute_schema__", None)
            if isinstance(inherited, AttributeSchema):
                schema = schema.merge(inherited)

        for name, value in declared_items(cls):
            if isinstance(value, Attribute):
                guard_accessor(cls, name, replaceable=(Attribute,))
                schema = _apply_marker(schema, name, value)

        cls.__attribute_schema__ = schema
        cls._refresh_validator()

    @classmethod
    def _refresh_validator(cls) -> None:
        if vars(cls).get("__explicit_validator__", False):
            return
        rules = cls.__attribute_schema__.rules
        if rules:
            cls.validator = AttributeValidator(rules, model_name=resolve_model_name(cls))

    @classmethod
    def _declare(cls, marker_type: type[Attribute], args: Iterable[Any], defaults: Mapping[str, Any]) -> None:
        for name, default in _entries_from_args(args, defaults).items():
            marker = marker_type(default)
            if name not in BASE_ATTRIBUTES:
                guard_accessor(cls, name, replaceable=(Attribute,))
                setattr(cls, name, marker)
                marker.__set_name__(cls, name)
            cls.__attribute_schema__ = _apply_marker(cls.__attribute_schema__, name, marker)
        cls._refresh_validator()

    @classmethod
    def declare_attribute(cls, *names: Any, **defaults: Any) -> None:
        """Declare attributes; positional names default to ``None``.

        ``declare_attribute("foo", {"bar": 1}, baz=True)`` declares ``foo``,
        ``bar`` and ``baz``. Base attribute names only update their default.
        """
        cls._declare(Attribute, names, defaults)

    @classmethod
    def declare_tag_attribute(cls, *names: Any, **defaults: Any) -> None:
        """Declare attributes that are rendered as tag attributes."""
        cls._declare(TagAttribute, names, defaults)

    @classmethod
    def declare_aria_attribute(cls, *names: Any, **defaults: Any) -> None:
        """Declare attributes that are rendered under ``aria-*``."""
        cls._declare(AriaAttribute, names, defaults)

    @classmethod
    def declare_data_attribute(cls, *names: Any, **defaults: Any) -> None:
        """Declare attributes that are rendered under ``data-*``."""
        cls._declare(DataAttribute, names, defaults)

    @classmethod
    def declare_default_group(cls, discriminator: str, bundles: Mapping[Any, Mapping[str, Any]]) -> None:
        """Register defaults selected by the value of ``discriminator``."""
        cls.__attribute_schema__ = cls.__attribute_schema__.with_default_group(
            normalise_name(discriminator), bundles
        )

    @classmethod
    def validates_attr(cls, name: str, **options: Any) -> None:
        """Attach validation rules to an attribute.

        ``choices`` is a shortcut for an inclusion check, for example
        ``validates_attr("size", choices=SIZES, allow_blank=True)``.
        """
        name = normalise_name(name)
        rule = AttributeRule.from_options(name, options)
        cls.__attribute_schema__ = cls.__attribute_schema__.with_rule(name, rule)
        cls._refresh_validator()

    @classmethod
    def attribute_schema(cls) -> AttributeSchema:
        return cls.__attribute_schema__

    def __init__(self, attributes: Mapping[str, Any] | None = None, /, **kwargs: Any) -> None:
        merged = dict(attributes or {})
        merged.update(kwargs)
        self.initialize_attributes(merged)

    def initialize_attributes(self, attributes: Mapping[str, Any] | None = None) -> None:
        """Store declared attribute values, falling back to defaults."""
        schema = type(self).__attribute_schema__
        provided = {normalise_name(key): value for key, value in (attributes or {}).items()}

        unknown = [key for key in provided if key not in schema.defaults]
        if unknown:
            self._discard_unknown(unknown)
            for key in unknown:
                del provided[key]

        for discriminator, bundles in schema.default_groups.items():
            selected = provided.get(discriminator)
            if selected is None:
                selected = schema.defaults.get(discriminator)
            if selected is None:
                continue
            bundle = bundles.get(str(scalar(selected)))
            if not bundle:
                continue
            for name, value in bundle.items():
                if provided.get(name) is None:
                    provided[name] = copy.deepcopy(value)

        state: dict[str, Any] = {}
        for name, default in schema.defaults.items():
            value = provided.get(name)
            if value is None:
                value = copy.deepcopy(default)
            if is_set(value):
                state[name] = value

        self._attribute_state = state
        self._tag_attrs = None

    def _discard_unknown(self, keys: list[str]) -> None:
        owner = type(self).__qualname__
        policy = get_settings().unknown_attributes
        if policy == "error":
            raise UnknownAttributeError(
                f"{owner} does not declare attribute(s): {', '.join(keys)}"
            )
        if policy == "warn":
            emitter = get_emitter()
            emitter.warning(f"{owner} ignored undeclared attribute(s): {', '.join(keys)}")
            emitter.event("attribute_discarded", {"owner": owner, "keys": keys})
            return
        logger.debug("Discarding undeclared attributes for %s: %s", owner, keys)

    def read_attribute(self, name: str) -> Any:
        """Return the stored value of ``name`` without any conversion."""
        return self._attribute_state.get(name)

    def attribute(self, name: str) -> Any:
        return self.attributes.get(normalise_name(name))

    @property
    def attributes(self) -> dict[str, Any]:
        """Return the set attributes in declaration order."""
        return self.attr_hash(*type(self).__attribute_schema__.defaults)

    def attr_hash(self, *names: str) -> dict[str, Any]:
        """Return ``{name: value}`` for the given names that hold a value.

        ``True`` is stringified so tags render ``data-foo="true"``.
        """
        result: dict[str, Any] = {}
        for name in names:
            value = self._attribute_state.get(name)
            if value is None:
                continue
            result[name] = "true" if value is True else value
        return result

    @property
    def tag_attrs(self) -> TagAttr:
        """Return the memoized tag attribute container for this instance."""
        if self._tag_attrs is None:
            schema = type(self).__attribute_schema__
            plain = self.attr_hash(*schema.tag_attributes)
            extras = plain.pop("html", None)
            tag_attrs = TagAttr()
            if isinstance(extras, Mapping):
                tag_attrs.add(extras)
            tag_attrs.add(plain)
            tag_attrs.add(aria=self.attr_hash(*schema.aria_attributes))
            tag_attrs.add(data=self.attr_hash(*schema.data_attributes))
            self._tag_attrs = tag_attrs
        return self._tag_attrs

    @property
    def classname(self) -> str:
        return self.tag_attrs.classname

    @property
    def data(self) -> TagAttr:
        return self.tag_attrs.data

    @property
    def aria(self) -> TagAttr:
        return self.tag_attrs.aria

    def validate(self) -> None:
        """Run the class validator against the current attribute values."""
        type(self).validator.validate(self)


__all__ = [
    "BASE_ATTRIBUTES",
    "AriaAttribute",
    "Attribute",
    "AttributeMixin",
    "AttributeSchema",
    "DataAttribute",
    "TagAttribute",
    "guard_accessor",
    "protect",
]
