"""Jinja integration: view context, component base class and environment."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, ClassVar

from jinja2 import BaseLoader, Environment, Template, TemplateNotFound, select_autoescape
from jinja2.runtime import Macro
from markupsafe import Markup, escape

from spark_component.core.attribute import AttributeMixin, protect
from spark_component.core.element import ElementMixin
from spark_component.core.exceptions import ConfigurationError
from spark_component.core.view import DEFAULT_VIEW_CONTEXT, Block


logger = logging.getLogger(__name__)


class JinjaViewContext:
    """Capture element blocks and render component templates with Jinja.

    Call blocks (``{% call nav.item(href="/") %}...{% endcall %}``) reach the
    element as a :class:`~jinja2.runtime.Macro`; it receives the element only
    when it declares a parameter, as in ``{% call(item) nav.item() %}``.
    """

    def __init__(self, environment: Environment) -> None:
        self.environment = environment
        self._inline: dict[type, Template] = {}

    def capture(self, element: Any, block: Block) -> Any:
        if isinstance(block, Macro):
            if block.arguments or block.catch_varargs:
                return Markup(block(element))
            return Markup(block())
        result = DEFAULT_VIEW_CONTEXT.capture(element, block)
        return None if result is None else escape(result)

    def _template_for(self, component: Component) -> Template | None:
        cls = type(component)
        if cls.template_name:
            try:
                return self.environment.get_template(cls.template_name)
            except TemplateNotFound as exc:
                raise ConfigurationError(
                    f"Template '{cls.template_name}' for {cls.__qualname__} was not found."
                ) from exc
        if cls.template is not None:
            if cls not in self._inline:
                self._inline[cls] = self.environment.from_string(cls.template)
            return self._inline[cls]
        return None

    def render_component(self, component: Component) -> Markup:
        """Render ``component`` through its template, after its block ran."""
        content = component.render_self()
        template = self._template_for(component)
        if template is None:
            return Markup("") if content is None else escape(content)
        logger.debug("Rendering %s", type(component).__qualname__)
        return Markup(template.render(component=component, content=content))

    def render(self, component: Any, caller: Macro | None = None) -> Markup:
        """Template global: ``{{ render(Card(title="x")) }}`` or a call block."""
        if isinstance(component, Component):
            return component.render_in(self, caller)
        if isinstance(component, ElementMixin):
            return Markup(component.__html__())
        raise ConfigurationError(
            f"Cannot render {type(component).__name__}; expected a component or element."
        )


def build_environment(
    loader: BaseLoader | None = None,
    *,
    globals: Mapping[str, Any] | None = None,
    **options: Any,
) -> Environment:
    """Return an autoescaping environment exposing ``render``."""
    options.setdefault("autoescape", select_autoescape(default=True, default_for_string=True))
    environment = Environment(loader=loader, **options)
    view = JinjaViewContext(environment)
    environment.globals["render"] = view.render
    environment.globals["view_context"] = view
    if globals:
        environment.globals.update(globals)
    return environment


def view_context_for(environment: Environment) -> JinjaViewContext:
    """Return the view context bound to an environment from :func:`build_environment`."""
    view = environment.globals.get("view_context")
    if not isinstance(view, JinjaViewContext):
        raise ConfigurationError("Environment was not created by build_environment().")
    return view


@protect
class Component(ElementMixin, AttributeMixin):
    """Element with its own template.

    Set either ``template`` (inline source) or ``template_name`` (looked up
    through the environment loader). Templates receive ``component`` and
    ``content``.
    """

    template: ClassVar[str | None] = None
    template_name: ClassVar[str | None] = None

    def render_in(self, view: JinjaViewContext, block: Block | None = None) -> Markup:
        self.view_context = view
        if block is not None and not self.rendered:
            self._block = block
        return view.render_component(self)


__all__ = [
    "Component",
    "JinjaViewContext",
    "build_environment",
    "view_context_for",
]
