"""Optional validation capability for components and elements.

Classes opt in by declaring rules, either on the attribute marker or through
``validates_attr``::

    class Button(ElementBase):
        size = Attribute("medium", choices=("small", "medium", "large"))
        count = Attribute(validate={"numericality": {"only_integer": True}})

Rules compile into a pydantic model owned by an :class:`AttributeValidator`.
Classes without rules keep the :class:`NullValidator`, which makes validation a
no-op. A class that assigns its own ``validator`` in its body keeps it.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from decimal import Decimal
import logging
import re
from types import MappingProxyType
from typing import Annotated, Any, Protocol, runtime_checkable

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    create_model,
    field_validator,
)
from pydantic_core import PydanticCustomError

from .diagnostics import get_emitter
from .exceptions import ConfigurationError, ValidationFailedError
from .utils import humanize, is_set, scalar, to_sentence


logger = logging.getLogger(__name__)

LIBRARY_NAMESPACE = "SparkComponent"


@runtime_checkable
class Validator(Protocol):
    """Capability invoked after an element produced its content."""

    def validate(self, instance: Any) -> None: ...


class NullValidator:
    """Validator used when a class declares no rules."""

    def validate(self, instance: Any) -> None:
        return


class NumericalityRule(BaseModel):
    """Numeric constraints applied to an attribute value."""

    model_config = ConfigDict(extra="forbid")

    only_integer: bool = False
    greater_than: float | None = None
    greater_than_or_equal_to: float | None = None
    less_than: float | None = None
    less_than_or_equal_to: float | None = None


class LengthRule(BaseModel):
    """Length constraints applied to string or sequence values."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    minimum: int | None = None
    maximum: int | None = None
    exactly: int | None = Field(default=None, alias="is")


class AttributeRule(BaseModel):
    """Validation rules attached to a single attribute."""

    model_config = ConfigDict(extra="forbid")

    presence: bool = False
    choices: list[Any] | None = None
    numericality: NumericalityRule | None = None
    length: LengthRule | None = None
    format: re.Pattern[str] | None = None
    allow_blank: bool = False
    message: str | None = None

    @field_validator("numericality", mode="before")
    @classmethod
    def _coerce_numericality(cls, value: Any) -> Any:
        if value is True:
            return {}
        if value is False:
            return None
        return value

    @classmethod
    def from_options(cls, name: str, options: Mapping[str, Any]) -> AttributeRule:
        """Validate user supplied rule options for ``name``."""
        try:
            return cls.model_validate(dict(options))
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid validation rules for attribute '{name}': {exc.errors()[0]['msg']}"
            ) from exc

    def merge(self, other: AttributeRule) -> AttributeRule:
        """Return a rule where options explicitly set on ``other`` win."""
        payload = self.model_dump(exclude_unset=True, by_alias=True)
        payload.update(other.model_dump(exclude_unset=True, by_alias=True))
        return type(self).model_validate(payload)


def _as_number(value: Any) -> int | float | Decimal | None:
    value = scalar(value)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return value
    if isinstance(value, str):
        candidate = value.strip()
        try:
            return int(candidate)
        except ValueError:
            pass
        try:
            return float(candidate)
        except ValueError:
            return None
    return None


def _fail(rule: AttributeRule, kind: str, template: str, **context: Any) -> PydanticCustomError:
    if rule.message:
        return PydanticCustomError(kind, rule.message)
    return PydanticCustomError(kind, template, context)


def _matches_choice(value: Any, choices: list[Any]) -> bool:
    candidate = scalar(value)
    normalised = {str(scalar(choice)) for choice in choices}
    return candidate in [scalar(choice) for choice in choices] or str(candidate) in normalised


def _check_blank(rule: AttributeRule) -> None:
    if rule.allow_blank:
        return
    if rule.presence:
        raise _fail(rule, "presence", "can't be blank")
    if rule.numericality is not None:
        raise _fail(rule, "numericality", "is not a number")
    if rule.choices is not None:
        raise _fail(rule, "inclusion", "is not included in the list")
    if rule.format is not None:
        raise _fail(rule, "format", "is invalid")
    if rule.length is not None and (rule.length.minimum or rule.length.exactly):
        count = rule.length.exactly if rule.length.exactly is not None else rule.length.minimum
        raise _fail(rule, "length", "is too short (minimum is {count} characters)", count=count)


def _check_numericality(rule: AttributeRule, options: NumericalityRule, value: Any) -> None:
    number = _as_number(value)
    if number is None:
        raise _fail(rule, "numericality", "is not a number")
    if options.only_integer and not isinstance(number, int):
        raise _fail(rule, "numericality", "must be an integer")
    bounds: tuple[tuple[float | None, Callable[[Any, float], bool], str], ...] = (
        (options.greater_than, lambda n, b: n > b, "must be greater than {count}"),
        (
            options.greater_than_or_equal_to,
            lambda n, b: n >= b,
            "must be greater than or equal to {count}",
        ),
        (options.less_than, lambda n, b: n < b, "must be less than {count}"),
        (options.less_than_or_equal_to, lambda n, b: n <= b, "must be less than or equal to {count}"),
    )
    for bound, predicate, template in bounds:
        if bound is not None and not predicate(number, bound):
            raise _fail(rule, "numericality", template, count=f"{bound:g}")


def _check_length(rule: AttributeRule, options: LengthRule, value: Any) -> None:
    size = len(value) if hasattr(value, "__len__") else len(str(value))
    if options.exactly is not None and size != options.exactly:
        raise _fail(
            rule,
            "length",
            "is the wrong length (should be {count} characters)",
            count=options.exactly,
        )
    if options.minimum is not None and size < options.minimum:
        raise _fail(
            rule, "length", "is too short (minimum is {count} characters)", count=options.minimum
        )
    if options.maximum is not None and size > options.maximum:
        raise _fail(
            rule, "length", "is too long (maximum is {count} characters)", count=options.maximum
        )


def check_value(rule: AttributeRule, value: Any) -> Any:
    """Apply ``rule`` to ``value`` raising pydantic custom errors on failure."""
    if not is_set(value):
        _check_blank(rule)
        return value

    if rule.choices is not None and not _matches_choice(value, rule.choices):
        options = to_sentence([repr(scalar(choice)) for choice in rule.choices])
        raise _fail(
            rule,
            "inclusion",
            '"{value}" is not valid. Options include: {options}.',
            value=str(scalar(value)),
            options=options,
        )
    if rule.numericality is not None:
        _check_numericality(rule, rule.numericality, value)
    if rule.length is not None:
        _check_length(rule, rule.length, value)
    if rule.format is not None and not rule.format.search(str(scalar(value))):
        raise _fail(rule, "format", "is invalid")
    return value


def _rule_checker(rule: AttributeRule) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        return check_value(rule, value)

    return check


def _build_model(model_name: str, rules: Mapping[str, AttributeRule]) -> type[BaseModel]:
    fields: dict[str, Any] = {}
    for index, (name, rule) in enumerate(rules.items()):
        fields[f"attribute_{index}"] = (
            Annotated[Any, AfterValidator(_rule_checker(rule))],
            Field(default=None, alias=name, validate_default=True),
        )
    identifier = re.sub(r"\W", "_", model_name) or LIBRARY_NAMESPACE
    return create_model(  # type: ignore[call-overload]
        f"{identifier}Attributes",
        __config__=ConfigDict(extra="ignore", arbitrary_types_allowed=True),
        **fields,
    )


class AttributeValidator:
    """Validator compiled from per-attribute rules."""

    def __init__(self, rules: Mapping[str, AttributeRule], *, model_name: str) -> None:
        self.rules = MappingProxyType(dict(rules))
        self.model_name = model_name
        self._model = _build_model(model_name, self.rules)

    def errors(self, instance: Any) -> list[str]:
        """Return human readable failures for ``instance`` without raising."""
        payload = {name: instance.read_attribute(name) for name in self.rules}
        try:
            self._model.model_validate(payload)
        except ValidationError as exc:
            messages: list[str] = []
            for error in exc.errors():
                location = error.get("loc") or ("base",)
                label = humanize(f"attribute_{location[0]}")
                messages.append(f"{label} {error['msg']}")
            return messages
        return []

    def validate(self, instance: Any) -> None:
        messages = self.errors(instance)
        if not messages:
            return
        get_emitter().event(
            "validation_failed", {"model_name": self.model_name, "messages": messages}
        )
        logger.debug("Validation failed for %s: %s", self.model_name, messages)
        raise ValidationFailedError(self.model_name, messages)

    def __repr__(self) -> str:
        return f"AttributeValidator({self.model_name!r}, rules={list(self.rules)!r})"


def resolve_model_name(cls: type) -> str:
    """Return the display name used for ``cls`` in validation messages.

    Anonymous element classes borrow the name of the component or element base
    they extend; their configuration class is skipped. When nothing qualifies
    the library namespace is used.
    """
    for candidate in (cls, *cls.__bases__):
        if candidate is object or not hasattr(candidate, "__attribute_schema__"):
            continue
        if vars(candidate).get("__anonymous_element__", False):
            continue
        return candidate.__name__
    return LIBRARY_NAMESPACE


__all__ = [
    "LIBRARY_NAMESPACE",
    "AttributeRule",
    "AttributeValidator",
    "LengthRule",
    "NullValidator",
    "NumericalityRule",
    "Validator",
    "check_value",
    "resolve_model_name",
]
