"""Block capture primitives used when elements produce their content."""

from __future__ import annotations

from collections.abc import Callable
import inspect
from typing import Any, Protocol, runtime_checkable


Block = Callable[..., Any]


@runtime_checkable
class ViewContext(Protocol):
    """Host capability executing a deferred block on behalf of an element."""

    def capture(self, element: Any, block: Block) -> Any: ...


def accepts_argument(block: Block) -> bool:
    """Return True when ``block`` can be called with one positional argument."""
    try:
        signature = inspect.signature(block)
    except (TypeError, ValueError):
        return True
    for parameter in signature.parameters.values():
        if parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
            inspect.Parameter.VAR_POSITIONAL,
        ):
            return True
    return False


class DirectViewContext:
    """View context for plain Python blocks.

    The block receives the element when it declares a positional parameter,
    so both ``lambda: "text"`` and ``lambda el: el.attribute("label")`` work.
    The block result is returned untouched.
    """

    def capture(self, element: Any, block: Block) -> Any:
        if accepts_argument(block):
            return block(element)
        return block()


DEFAULT_VIEW_CONTEXT = DirectViewContext()


__all__ = ["DEFAULT_VIEW_CONTEXT", "Block", "DirectViewContext", "ViewContext", "accepts_argument"]
