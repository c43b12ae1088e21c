import pytest

from hxwire.core.attributes import Attributes
from hxwire.core.element import (
    Block,
    Error,
    Fragment,
    Labeled,
    Raw,
    Tag,
    render_to_string,
)
from hxwire.core.errors import ElementError


def test_tag_without_attributes():
    assert render_to_string(Tag("p", None, Raw("hi"))) == "<p>hi</p>"


def test_tag_with_attributes():
    tag = Tag("a", Attributes().set("href", "/x").set("class", "link"), Raw("go"))
    assert render_to_string(tag) == '<a class="link" href="/x">go</a>'


def test_render_is_repeatable():
    tag = Tag("div", Attributes().set("id", "a"), Fragment([Raw("x"), Raw("y")]))
    assert render_to_string(tag) == render_to_string(tag)


def test_fragment_skips_none():
    assert render_to_string(Fragment([Raw("a"), None, Raw("b")])) == "ab"
    assert len(Fragment([None, Raw("a"), None]).children) == 1


def test_block():
    block = Block("{% if x %}", Raw("yes"), "{% endif %}")
    assert render_to_string(block) == "{% if x %}yes{% endif %}"
    assert render_to_string(Block("{% else %}", None)) == "{% else %}"


def test_render_none():
    assert render_to_string(None) == ""


def test_validate_prefixes_tag_names():
    tree = Tag("div", None, Fragment([Tag("span", None, Error(ValueError("boom")))]))
    assert str(tree.validate()) == "div.span boom"


def test_validate_joins_sibling_errors():
    tree = Fragment([Error(ValueError("one")), Raw("ok"), Error(ValueError("two"))])
    assert str(tree.validate()) == "one\ntwo"


def test_missing_tag_name():
    assert "missing tag name" in str(Tag("").validate())


def test_labeled_encloses_errors():
    inner = Tag("div", None, Error(ValueError("boom")))
    assert str(Labeled("Form", inner, enclose=True).validate()) == "Form(div) boom"
    assert str(Labeled("Form", inner).validate()) == "Form.div boom"


def test_find_tag():
    div = Tag("div")
    assert Fragment([Raw("text"), div]).find_tag() is div
    assert Block("{% if x %}", div).find_tag() is div


def test_find_tag_errors():
    with pytest.raises(ElementError, match="no tag found"):
        Raw("text").find_tag()
    with pytest.raises(ElementError, match="expected one tag, found 2"):
        Fragment([Tag("a"), Tag("b")]).find_tag()
