"""Nested, lazily constructed sub-objects of components.

An element is declared on a component class and accessed through a generated
method. Calling the method with attributes or a block builds a new element;
calling it bare returns what was built::

    class Nav(ElementBase):
        title = element()

        @element(multiple=True)
        class item:
            href = TagAttribute()

    nav = Nav()
    nav.title(block=lambda: "Menu")
    nav.item(href="/a", block=lambda: "A")
    nav.item(href="/b", block=lambda: "B")

    nav.title().content                       # "Menu"
    [str(i.tag_attrs) for i in nav.items()]   # ['href="/a"', 'href="/b"']

Decorating a nested class turns its body into the element configuration:
attributes, nested elements, and methods all land on the element class.
Passing ``component=`` builds the element class on top of an existing
component instead of :class:`ElementBase`.

Each element keeps a weak reference to its parent, the deferred block and the
parent's view context. The block runs at most once, on first render, and the
class validator runs right after it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
import logging
import types
from types import MappingProxyType
from typing import Any, ClassVar
import weakref

from markupsafe import Markup, escape

from .attribute import AttributeMixin, declared_items, guard_accessor, protect
from .config import get_settings
from .diagnostics import get_emitter
from .exceptions import ConfigurationError
from .utils import pluralize
from .view import DEFAULT_VIEW_CONTEXT, Block, ViewContext


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementSpec:
    """Registered element: its name, backing class and multiplicity."""

    name: str
    element_class: type
    multiple: bool = False
    plural: str | None = None

    @property
    def storage_key(self) -> str:
        if self.multiple and self.plural:
            return self.plural
        return self.name


@dataclass(frozen=True)
class ElementSchema:
    """Immutable mapping of element names to their specification."""

    elements: Mapping[str, ElementSpec] = field(default_factory=lambda: MappingProxyType({}))

    def merge(self, other: ElementSchema) -> ElementSchema:
        return ElementSchema(MappingProxyType({**self.elements, **other.elements}))

    def with_element(self, spec: ElementSpec) -> ElementSchema:
        return replace(self, elements=MappingProxyType({**self.elements, spec.name: spec}))

    def __contains__(self, name: object) -> bool:
        return name in self.elements

    def __getitem__(self, name: str) -> ElementSpec:
        return self.elements[name]


class Element:
    """Class-body marker declaring an element.

    Use :func:`element` to create one; it doubles as a class decorator that
    attaches a configuration class.
    """

    __component_declaration__: ClassVar[bool] = True

    def __init__(
        self,
        *,
        multiple: bool = False,
        component: type | None = None,
        plural: str | None = None,
        config: type | None = None,
    ) -> None:
        if component is not None and not isinstance(component, type):
            raise ConfigurationError(
                f"Element component must be a class, got {type(component).__name__}."
            )
        self.multiple = multiple
        self.component = component
        self.plural = plural
        self.config = config
        self.name: str | None = None

    def __call__(self, config: type) -> Element:
        if not isinstance(config, type):
            raise ConfigurationError("Element configuration must be a class body.")
        if self.config is not None:
            raise ConfigurationError(f"Element '{config.__name__}' is already configured.")
        self.config = config
        return self

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return (
            f"Element(multiple={self.multiple!r}, component={self.component!r}, "
            f"config={self.config!r})"
        )


def element(
    *, multiple: bool = False, component: type | None = None, plural: str | None = None
) -> Element:
    """Declare an element in a class body, or decorate its configuration class."""
    return Element(multiple=multiple, component=component, plural=plural)


def _class_name(name: str) -> str:
    return "".join(part.capitalize() for part in name.split("_")) or "Element"


def build_element_class(
    owner: type, name: str, *, component: type | None = None, config: type | None = None
) -> type:
    """Create the anonymous class backing element ``name`` of ``owner``."""
    if component is None:
        bases: tuple[type, ...] = (ElementBase,)
    elif issubclass(component, ElementMixin):
        bases = (component,)
    elif issubclass(component, AttributeMixin):
        bases = (ElementMixin, component)
    else:
        bases = (ElementMixin, AttributeMixin, component)

    namespace: dict[str, Any] = {
        "__module__": owner.__module__,
        "__qualname__": f"{owner.__qualname__}.{name}",
        "__anonymous_element__": True,
    }
    if config is not None:
        bases = (config, *bases)
        namespace["__element_config__"] = config
        if config.__doc__:
            namespace["__doc__"] = config.__doc__
    if component is not None:
        namespace["source_component"] = component

    return types.new_class(_class_name(name), bases, exec_body=lambda ns: ns.update(namespace))


def _singular_accessor(spec: ElementSpec) -> Any:
    name = spec.name

    def accessor(
        self: ElementMixin,
        attributes: Mapping[str, Any] | None = None,
        /,
        *,
        caller: Block | None = None,
        block: Block | None = None,
        **kwargs: Any,
    ) -> Any:
        content_block = block if block is not None else caller
        if attributes is None and content_block is None and not kwargs:
            self._ensure_rendered()
            return self._element_slots[spec.storage_key]
        return self.build_element(name, attributes, block=content_block, **kwargs)

    accessor.__name__ = name
    accessor.__component_declaration__ = True  # type: ignore[attr-defined]
    accessor.__doc__ = f"Build a ``{name}`` element, or return the stored one when called bare."
    return accessor


def _plural_accessor(spec: ElementSpec) -> Any:
    def accessor(self: ElementMixin) -> list[Any]:
        self._ensure_rendered()
        return self._element_slots[spec.storage_key]

    accessor.__name__ = spec.plural or spec.name
    accessor.__component_declaration__ = True  # type: ignore[attr-defined]
    accessor.__doc__ = f"Return every ``{spec.name}`` element in build order."
    return accessor


def _define_element(
    cls: type, name: str, marker: Element, *, replaceable: tuple[type, ...]
) -> ElementSpec:
    plural = (marker.plural or pluralize(name)) if marker.multiple else None
    guard_accessor(cls, name, replaceable=replaceable)
    if plural and plural != name:
        guard_accessor(cls, plural)

    element_class = build_element_class(
        cls, name, component=marker.component, config=marker.config
    )
    spec = ElementSpec(name=name, element_class=element_class, multiple=marker.multiple, plural=plural)

    setattr(cls, name, _singular_accessor(spec))
    if plural and plural != name:
        setattr(cls, plural, _plural_accessor(spec))
    return spec


@protect
class ElementMixin:
    """Mixin adding element declarations and deferred rendering.

    Must be combined with :class:`AttributeMixin`, listed before it.
    """

    __element_schema__: ClassVar[ElementSchema] = ElementSchema()

    view_context: ViewContext | None = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        schema = ElementSchema()
        for base in reversed(cls.__bases__):
            inherited = getattr(base, "__element_schema__", None)
            if isinstance(inherited, ElementSchema):
                schema = schema.merge(inherited)

        for name, value in declared_items(cls):
            if isinstance(value, Element):
                spec = _define_element(cls, name, value, replaceable=(Element,))
                schema = schema.with_element(spec)

        cls.__element_schema__ = schema

    @classmethod
    def declare_element(
        cls,
        name: str,
        *,
        multiple: bool = False,
        component: type | None = None,
        config: type | None = None,
        plural: str | None = None,
    ) -> ElementSpec:
        """Declare an element after class creation."""
        marker = Element(multiple=multiple, component=component, plural=plural, config=config)
        marker.__set_name__(cls, name)
        spec = _define_element(cls, name, marker, replaceable=())
        cls.__element_schema__ = cls.__element_schema__.with_element(spec)
        return spec

    @classmethod
    def element_schema(cls) -> ElementSchema:
        return cls.__element_schema__

    def __init__(
        self,
        attributes: Mapping[str, Any] | None = None,
        /,
        *,
        _name: str | None = None,
        _parent: Any = None,
        _block: Block | None = None,
        _view: ViewContext | None = None,
        **kwargs: Any,
    ) -> None:
        self._element_name = _name
        self._parent_ref = weakref.ref(_parent) if _parent is not None else None
        self._block = _block
        self.view_context = _view
        self._content: Any = None
        self._rendered = False
        self._rendering = False
        self._element_defaults: dict[str, dict[str, Any]] = {}
        self._initialize_elements()
        super().__init__(attributes, **kwargs)  # type: ignore[call-arg]

    def _initialize_elements(self) -> None:
        self._element_slots: dict[str, Any] = {}
        for spec in type(self).__element_schema__.elements.values():
            # Multiple elements start as an empty list so templates can iterate.
            self._element_slots[spec.storage_key] = [] if spec.multiple else None

    @property
    def parent(self) -> Any:
        """Return the element's parent, or None for a root or a collected parent."""
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def element_name(self) -> str | None:
        return self._element_name

    def set_element_defaults(
        self, name: str, attributes: Mapping[str, Any] | None = None, /, **kwargs: Any
    ) -> None:
        """Override default attributes for elements built by this instance."""
        if name not in type(self).__element_schema__:
            raise ConfigurationError(f"{type(self).__qualname__} has no element '{name}'.")
        defaults = self._element_defaults.setdefault(name, {})
        defaults.update(attributes or {})
        defaults.update(kwargs)

    def build_element(
        self,
        name: str,
        attributes: Mapping[str, Any] | None = None,
        /,
        *,
        block: Block | None = None,
        **kwargs: Any,
    ) -> Any:
        """Create element ``name`` and store it on this instance."""
        schema = type(self).__element_schema__
        if name not in schema:
            raise ConfigurationError(f"{type(self).__qualname__} has no element '{name}'.")
        spec = schema[name]

        merged = dict(self._element_defaults.get(name, {}))
        merged.update(attributes or {})
        merged.update(kwargs)

        child = spec.element_class(
            merged, _name=name, _parent=self, _block=block, _view=self.view_context
        )
        if spec.multiple:
            self._element_slots[spec.storage_key].append(child)
        else:
            self._element_slots[name] = child

        logger.debug("Built element %s on %s", name, type(self).__qualname__)
        get_emitter().event("element_built", {"owner": type(self).__qualname__, "name": name})
        return child

    def _ensure_rendered(self) -> None:
        # Nested elements declared in the deferred block only exist once it ran.
        if self._block is not None and not self._rendered and not self._rendering:
            self.render_self()

    def render_block(self, view: ViewContext | None, block: Block | None) -> Any:
        if block is None:
            return None
        return (view or DEFAULT_VIEW_CONTEXT).capture(self, block)

    def render_self(self) -> Any:
        """Run the deferred block once, validate, and return the memoized content."""
        if self._rendered:
            return self._content

        self._rendering = True
        try:
            self._content = self.render_block(self.view_context, self._block)
        finally:
            self._rendering = False
        self._rendered = True

        get_emitter().event(
            "element_rendered",
            {"owner": type(self).__qualname__, "name": self._element_name},
        )
        if get_settings().validate_on_render:
            self.validate()  # type: ignore[attr-defined]
        return self._content

    @property
    def rendered(self) -> bool:
        return self._rendered

    @property
    def content(self) -> Any:
        return self.render_self()

    @property
    def blank(self) -> bool:
        content = self.render_self()
        return content is None or not str(content).strip()

    @property
    def present(self) -> bool:
        return not self.blank

    def __html__(self) -> Markup:
        content = self.render_self()
        return Markup("") if content is None else escape(content)

    def __str__(self) -> str:
        content = self.render_self()
        return "" if content is None else str(content)

    def __repr__(self) -> str:
        label = self._element_name or type(self).__qualname__
        return f"<{type(self).__qualname__} {label!r} rendered={self._rendered}>"


@protect
class ElementBase(ElementMixin, AttributeMixin):
    """Base class for elements that do not extend a component."""


__all__ = [
    "Element",
    "ElementBase",
    "ElementMixin",
    "ElementSchema",
    "ElementSpec",
    "build_element_class",
    "element",
]
