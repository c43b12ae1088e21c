import unittest

from hxwire.core.attributes import Attributes
from hxwire.core.component import (
    OL,
    UL,
    A,
    Button,
    Component,
    Div,
    Document,
    Fragment,
    H,
    Img,
    Input,
    Label,
    LI,
    Raw,
    Tag,
)
from hxwire.core.element import Error, render_to_string
from hxwire.runtime.page import Page


class Counting(Component):
    def __init__(self):
        self.calls = 0

    def compile(self, page):
        self.calls += 1
        return Raw(f"c{self.calls}").compile(page)


def compile_html(component):
    page = Page()
    return render_to_string(page.compile(component))


class TestShorthands(unittest.TestCase):
    def test_div(self):
        html = compile_html(Div(Raw("x"), id="a", classes=["b", "c"], hidden=True))
        self.assertEqual(html, '<div class="b c" hidden id="a">x</div>')

    def test_empty_div(self):
        self.assertEqual(compile_html(Div()), "<div></div>")

    def test_button_is_never_submit(self):
        attrs = Attributes().set("type", "submit")
        html = compile_html(Button(Raw("+"), attrs=attrs, disabled=True))
        self.assertEqual(html, '<button disabled type="button">+</button>')

    def test_link_and_image(self):
        self.assertEqual(compile_html(A(Raw("home"), href="/")), '<a href="/">home</a>')
        self.assertEqual(
            compile_html(Img(src="/logo.png", alt="logo")),
            '<img alt="logo" src="/logo.png"></img>',
        )

    def test_label_and_input(self):
        self.assertEqual(
            compile_html(Label(Raw("Name"), for_="name")),
            '<label for="name">Name</label>',
        )
        self.assertEqual(
            compile_html(Input(name="name", placeholder="Ada")),
            '<input name="name" placeholder="Ada" type="text"></input>',
        )

    def test_heading(self):
        self.assertEqual(compile_html(H(Raw("Title"), level=2)), "<h2>Title</h2>")

    def test_invalid_heading(self):
        el = Page().compile(H(Raw("Title"), level=9))
        self.assertIsInstance(el, Error)
        self.assertEqual(str(el.validate()), "invalid heading level 9")

    def test_lists(self):
        items = [LI(Raw("a")), LI(Raw("b"))]
        self.assertEqual(compile_html(UL(items=items)), "<ul><li>a</li><li>b</li></ul>")
        self.assertEqual(compile_html(OL(items=items[:1])), "<ol><li>a</li></ol>")

    def test_attrs_are_not_mutated(self):
        attrs = Attributes().set("class", "card")
        div = Div(id="x", attrs=attrs)
        first = compile_html(div)
        self.assertEqual(compile_html(div), first)
        self.assertEqual(attrs.render(), 'class="card"')


class TestFragment(unittest.TestCase):
    def test_none_children_are_skipped(self):
        page = Page()
        with_none = page.compile(Fragment(Raw("a"), None, Raw("b")))
        without = page.compile(Fragment(Raw("a"), Raw("b")))
        self.assertEqual(render_to_string(with_none), render_to_string(without))
        self.assertEqual(len(with_none.children), len(without.children))

    def test_child_errors_carry_index(self):
        el = Page().compile(Div(Fragment(Raw("a"), H(level=9))))
        self.assertEqual(str(el.validate()), "div[1] invalid heading level 9")

    def test_each_placement_compiles(self):
        counting = Counting()
        html = compile_html(Fragment(counting, counting))
        self.assertEqual(html, "c1c2")
        self.assertEqual(counting.calls, 2)


class TestTagAndDocument(unittest.TestCase):
    def test_generic_tag(self):
        tag = Tag("section", Attributes().set("role", "main"), Raw("x"))
        self.assertEqual(compile_html(tag), '<section role="main">x</section>')

    def test_document(self):
        doc = Document(body=Div(Raw("hi")), header=Tag("title", None, Raw("T")), lang="en")
        self.assertEqual(
            compile_html(doc),
            '<!DOCTYPE html><html lang="en"><head><title>T</title></head>'
            "<body><div>hi</div></body></html>",
        )
