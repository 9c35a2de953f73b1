"""Declarative attributes and nested elements for view components."""

from __future__ import annotations

from spark_component.adapters.jinja import (
    Component,
    JinjaViewContext,
    build_environment,
    view_context_for,
)
from spark_component.core.attribute import (
    BASE_ATTRIBUTES,
    AriaAttribute,
    Attribute,
    AttributeMixin,
    AttributeSchema,
    DataAttribute,
    TagAttribute,
)
from spark_component.core.config import (
    ComponentSettings,
    configure,
    get_settings,
    set_settings,
    settings_context,
)
from spark_component.core.diagnostics import (
    DiagnosticEmitter,
    LoggingEmitter,
    NullEmitter,
    get_emitter,
)
from spark_component.core.element import (
    Element,
    ElementBase,
    ElementMixin,
    ElementSchema,
    ElementSpec,
    element,
)
from spark_component.core.exceptions import (
    ComponentError,
    ConfigurationError,
    DefaultGroupError,
    ElementError,
    UnknownAttributeError,
    ValidationFailedError,
)
from spark_component.core.tag_attr import TagAttr
from spark_component.core.validation import (
    AttributeRule,
    AttributeValidator,
    NullValidator,
    Validator,
)
from spark_component.core.view import DirectViewContext, ViewContext
from spark_component.version import get_version


__version__ = get_version()


__all__ = [
    "BASE_ATTRIBUTES",
    "AriaAttribute",
    "Attribute",
    "AttributeMixin",
    "AttributeRule",
    "AttributeSchema",
    "AttributeValidator",
    "Component",
    "ComponentError",
    "ComponentSettings",
    "ConfigurationError",
    "DataAttribute",
    "DefaultGroupError",
    "DiagnosticEmitter",
    "DirectViewContext",
    "Element",
    "ElementBase",
    "ElementError",
    "ElementMixin",
    "ElementSchema",
    "ElementSpec",
    "JinjaViewContext",
    "LoggingEmitter",
    "NullEmitter",
    "NullValidator",
    "TagAttr",
    "TagAttribute",
    "UnknownAttributeError",
    "ValidationFailedError",
    "Validator",
    "ViewContext",
    "__version__",
    "build_environment",
    "configure",
    "element",
    "get_emitter",
    "get_settings",
    "set_settings",
    "settings_context",
    "view_context_for",
]
