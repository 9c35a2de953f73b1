from __future__ import annotations

from enum import Enum
import logging

import pytest

from spark_component.core.attribute import (
    AriaAttribute,
    Attribute,
    DataAttribute,
    TagAttribute,
)
from spark_component.core.config import settings_context
from spark_component.core.element import ElementBase
from spark_component.core.exceptions import (
    DefaultGroupError,
    ElementError,
    UnknownAttributeError,
)


class Theme(Enum):
    NOTICE = "notice"
    ERROR = "error"


class Alert(ElementBase):
    label = Attribute()
    size = Attribute("large")
    role = TagAttribute("alert")
    live = AriaAttribute("polite")
    target = DataAttribute()


class Notice(ElementBase):
    theme = Attribute(
        "notice",
        groups={
            "notice": {"icon": "message", "color": "blue"},
            "error": {"icon": "warning", "color": "red"},
        },
    )
    icon = Attribute()
    color = Attribute()


def test_declared_attributes_read_through_descriptors() -> None:
    alert = Alert(label="Saved")

    assert alert.label == "Saved"
    assert alert.size == "large"
    assert alert.attribute("role") == "alert"
    assert alert.attributes == {
        "label": "Saved",
        "size": "large",
        "role": "alert",
        "live": "polite",
    }


def test_descriptors_are_read_only() -> None:
    alert = Alert()

    with pytest.raises(AttributeError):
        alert.label = "changed"


def test_mapping_and_keyword_arguments_merge() -> None:
    alert = Alert({"label": "From mapping", "size": "small"}, size="tiny")

    assert alert.label == "From mapping"
    assert alert.size == "tiny"


def test_tag_attrs_render_tag_aria_and_data_subsets() -> None:
    alert = Alert(label="ignored in tag", target="#panel")

    assert str(alert.tag_attrs) == 'role="alert" aria-live="polite" data-target="#panel"'
    assert alert.aria.to_s() == 'aria-live="polite"'
    assert alert.data["target"] == "#panel"


def test_base_attributes_are_always_available() -> None:
    alert = Alert(id="a", class_="btn", data={"turbo": True})

    assert str(alert.tag_attrs) == (
        'id="a" class="btn" data-turbo="true" role="alert" aria-live="polite"'
    )
    assert alert.classname == "btn"


def test_html_extras_are_merged_first() -> None:
    alert = Alert(html={"title": "Hi", "class": "x"}, class_="btn")

    assert str(alert.tag_attrs) == 'title="Hi" class="x btn" role="alert" aria-live="polite"'


def test_tag_attrs_are_memoized() -> None:
    alert = Alert()

    assert alert.tag_attrs is alert.tag_attrs


def test_empty_values_fall_back_to_nothing() -> None:
    alert = Alert(label="", size=None)

    assert alert.label is None
    assert alert.size == "large"


def test_true_is_stringified_in_attr_hash() -> None:
    class Toggle(ElementBase):
        pressed = AriaAttribute(True)

    toggle = Toggle()

    assert toggle.pressed is True
    assert toggle.attr_hash("pressed") == {"pressed": "true"}
    assert str(toggle.tag_attrs) == 'aria-pressed="true"'


def test_defaults_are_copied_per_instance() -> None:
    class Tagged(ElementBase):
        tags = Attribute(["a"])

    first = Tagged()
    first.tags.append("b")

    assert Tagged().tags == ["a"]


def test_group_defaults_are_copied_per_instance() -> None:
    class Box(ElementBase):
        kind = Attribute("a", groups={"a": {"tags": ["x"]}})
        tags = Attribute()

    Box().tags.append("y")

    assert Box().tags == ["x"]


def test_default_group_selected_by_default_value() -> None:
    notice = Notice()

    assert notice.icon == "message"
    assert notice.color == "blue"


def test_default_group_selected_by_input() -> None:
    notice = Notice(theme="error")

    assert notice.icon == "warning"
    assert notice.color == "red"


def test_default_group_does_not_override_input() -> None:
    notice = Notice(theme="error", icon="bolt")

    assert notice.icon == "bolt"
    assert notice.color == "red"


def test_default_group_accepts_enum_members() -> None:
    assert Notice(theme=Theme.ERROR).color == "red"


def test_unknown_group_value_leaves_attributes_unset() -> None:
    notice = Notice(theme="success")

    assert notice.icon is None
    assert notice.theme == "success"


def test_declare_default_group_after_class_creation() -> None:
    class Badge(ElementBase):
        size = Attribute("md")
        padding = Attribute()

    Badge.declare_default_group("size", {"sm": {"padding": 1}, "md": {"padding": 2}})

    assert Badge().padding == 2
    assert Badge(size="sm").padding == 1


def test_default_group_bundle_must_be_a_mapping() -> None:
    class Badge(ElementBase):
        size = Attribute("md")

    with pytest.raises(DefaultGroupError):
        Badge.declare_default_group("size", {"sm": "tiny"})

    with pytest.raises(DefaultGroupError):

        class Broken(ElementBase):
            kind = Attribute(groups=["a", "b"])


def test_declare_attribute_forms() -> None:
    class Button(ElementBase):
        pass

    Button.declare_attribute("label", {"size": "md"}, disabled=False)
    Button.declare_tag_attribute(type="button")
    Button.declare_aria_attribute("expanded")
    Button.declare_data_attribute(action="click")

    button = Button(label="Go", expanded=True)

    assert button.label == "Go"
    assert button.size == "md"
    assert button.disabled is False
    assert str(button.tag_attrs) == 'type="button" aria-expanded="true" data-action="click"'


def test_declaring_base_attribute_updates_default_only() -> None:
    class Landmark(ElementBase):
        pass

    Landmark.declare_tag_attribute(id="main")

    assert Landmark().tag_attrs["id"] == "main"
    assert "id" not in vars(Landmark)


def test_subclass_schema_does_not_leak_into_parent() -> None:
    class Parent(ElementBase):
        size = Attribute("md")

    class Child(Parent):
        size = Attribute("lg")
        extra = Attribute()

    Child.declare_attribute(flag=True)

    assert Parent().size == "md"
    assert Child().size == "lg"
    assert Child().attribute("flag") == "true"
    assert "extra" not in Parent.attribute_schema().defaults
    assert "flag" not in Parent.attribute_schema().defaults


def test_unknown_attributes_are_ignored_by_default() -> None:
    alert = Alert(label="x", bogus=1)

    assert "bogus" not in alert.attributes
    assert "bogus" not in alert.tag_attrs


def test_unknown_attributes_can_raise() -> None:
    with settings_context(unknown_attributes="error"):
        with pytest.raises(UnknownAttributeError, match="bogus"):
            Alert(bogus=1)


def test_unknown_attributes_can_warn(caplog: pytest.LogCaptureFixture) -> None:
    with settings_context(unknown_attributes="warn", diagnostics="logging"):
        with caplog.at_level(logging.WARNING):
            Alert(bogus=1)

    assert any("ignored undeclared attribute(s): bogus" in r.message for r in caplog.records)


def test_unknown_keys_are_dropped_before_groups_apply() -> None:
    notice = Notice(theme="error", glyph="star")

    assert notice.color == "red"
    assert "glyph" not in notice.attributes


def test_protected_names_cannot_be_attributes() -> None:
    with pytest.raises(ElementError, match="Method 'tag_attrs' already exists."):

        class Bad(ElementBase):
            tag_attrs = Attribute()


def test_own_methods_cannot_be_replaced() -> None:
    class Labelled(ElementBase):
        def label(self) -> str:
            return "method"

    with pytest.raises(ElementError, match="Method 'label' already exists."):
        Labelled.declare_attribute("label")


def test_marker_without_default_keeps_inherited_default() -> None:
    class Parent(ElementBase):
        size = Attribute("md")

    class Child(Parent):
        size = Attribute(validate={"presence": True})

    assert Child().size == "md"
    assert Child.attribute_schema().rules["size"].presence is True
