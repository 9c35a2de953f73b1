from __future__ import annotations

from enum import Enum

from markupsafe import Markup

from spark_component.core.config import settings_context
from spark_component.core.tag_attr import TagAttr


class Tone(Enum):
    INFO = "info"


def test_serialises_nested_groups_in_order() -> None:
    attrs = TagAttr().add(id="nav", class_="main", data={"turbo_frame": "x", "y": None})

    assert str(attrs) == 'id="nav" class="main" data-turbo-frame="x"'
    assert attrs.to_s() == str(attrs)


def test_drops_unset_values() -> None:
    attrs = TagAttr(title="", rel=[], data={}, aria={"hidden": None}, role=None)

    assert dict(attrs) == {}
    assert str(attrs) == ""
    assert "data" not in attrs


def test_keeps_false_and_zero() -> None:
    attrs = TagAttr(disabled=True, hidden=False, tabindex=0)

    assert str(attrs) == 'disabled="true" hidden="false" tabindex="0"'


def test_lookups_accept_underscored_keys() -> None:
    attrs = TagAttr(foo_bar="baz")

    assert attrs["foo_bar"] == "baz"
    assert attrs["foo-bar"] == "baz"
    assert "foo_bar" in attrs
    assert attrs.get("missing_key", "fallback") == "fallback"
    assert attrs.pop("foo_bar") == "baz"
    assert not attrs


def test_class_values_accumulate() -> None:
    attrs = TagAttr(class_="btn btn-primary")
    attrs["class"] = ["btn", "active"]
    attrs.add({"class": "wide"})

    assert attrs.classname == "btn btn-primary active wide"
    assert str(attrs) == 'class="btn btn-primary active wide"'


def test_sequences_are_space_joined() -> None:
    attrs = TagAttr(rel=["noopener", None, "noreferrer"])

    assert str(attrs) == 'rel="noopener noreferrer"'


def test_enum_values_render_their_value() -> None:
    assert str(TagAttr(tone=Tone.INFO)) == 'tone="info"'


def test_group_accessors_and_prefix() -> None:
    attrs = TagAttr(aria={"label": "Close"}, data={"controller": {"name": "modal"}})

    assert attrs.aria["label"] == "Close"
    assert attrs.aria.to_s() == 'aria-label="Close"'
    assert attrs.data.to_s() == 'data-controller-name="modal"'
    assert str(TagAttr(prefix="data", foo_bar="baz")) == 'data-foo-bar="baz"'


def test_missing_group_is_empty() -> None:
    attrs = TagAttr(id="a")

    assert attrs.data.to_s() == ""
    assert attrs.aria.prefix == "aria"


def test_merging_into_existing_group() -> None:
    attrs = TagAttr(data={"a": 1})
    attrs.add(data={"b": 2})

    assert str(attrs) == 'data-a="1" data-b="2"'


def test_values_are_escaped() -> None:
    attrs = TagAttr(title='<"quoted">')

    assert str(attrs) == 'title="&lt;&#34;quoted&#34;&gt;"'


def test_escaping_can_be_disabled() -> None:
    with settings_context(escape_attribute_values=False):
        assert str(TagAttr(title="<b>")) == 'title="<b>"'


def test_html_protocol_returns_markup() -> None:
    rendered = TagAttr(id="x").__html__()

    assert isinstance(rendered, Markup)
    assert rendered == 'id="x"'


def test_copy_is_independent() -> None:
    original = TagAttr(id="x", data={"a": 1})
    clone = original.copy()
    clone.add(data={"b": 2})

    assert str(original) == 'id="x" data-a="1"'
    assert str(clone) == 'id="x" data-a="1" data-b="2"'


def test_in_place_union_goes_through_normalisation() -> None:
    attrs = TagAttr(id="a")
    attrs |= {"title": None, "foo_bar": "x"}

    assert isinstance(attrs, TagAttr)
    assert dict(attrs) == {"id": "a", "foo-bar": "x"}


def test_union_returns_a_new_container() -> None:
    attrs = TagAttr(id="a")
    merged = attrs | {"class": "b", "role": ""}

    assert isinstance(merged, TagAttr)
    assert str(merged) == 'id="a" class="b"'
    assert str(attrs) == 'id="a"'


def test_setdefault_and_fromkeys_drop_unset_values() -> None:
    attrs = TagAttr()

    assert attrs.setdefault("aria_label") is None
    assert attrs.setdefault("foo_bar", "x") == "x"
    assert attrs.setdefault("foo_bar", "y") == "x"
    assert dict(attrs) == {"foo-bar": "x"}

    assert dict(TagAttr.fromkeys(["a_b", "c"])) == {}
    assert dict(TagAttr.fromkeys(["a_b"], "on")) == {"a-b": "on"}
