import pytest
from starlette.testclient import TestClient

from hxwire.core.component import Button, Div, Fragment, Raw
from hxwire.core.errors import BuildError
from hxwire.core.interaction import Interaction, SwapMethod
from hxwire.core.meta import AtPath
from hxwire.core.template import Value
from hxwire.runtime.app import HxWire
from hxwire.runtime.page import TEMPLATE_PREAMBLE, Page


def counter():
    inc = Interaction("inc")
    return Fragment(
        inc.swap(Div(Raw("0"))),
        inc.trigger(Button(Raw("+"))),
    )


def built(root):
    page = Page()
    page.add(root)
    errors = page.validate()
    assert errors is None, errors
    return page.render()


def test_counter_wiring():
    sources = built(counter())
    assert sources["/"] == (
        TEMPLATE_PREAMBLE + '<div id="hxwire_0">0</div>'
        '<button hx-post="/inc" hx-swap="outerHTML" hx-target="#hxwire_0" '
        'type="button">+</button>'
    )
    assert sources["/inc"] == TEMPLATE_PREAMBLE + '<div id="hxwire_0">0</div>'


def test_trigger_before_target():
    inc = Interaction("inc")
    sources = built(Fragment(inc.trigger(Button(Raw("+"))), inc.swap(Div(Raw("0")))))
    assert 'hx-post="/inc"' in sources["/"]
    assert sources["/inc"] == TEMPLATE_PREAMBLE + '<div id="hxwire_0">0</div>'


def test_separate_content():
    inc = Interaction("load", method="get")
    swap = inc.swap(
        Div(Raw("empty"), id="box"),
        Div(Raw("loaded")),
        method=SwapMethod.INNER_HTML,
    )
    sources = built(
        Fragment(swap, inc.trigger(Button(Raw("load")), event="click", vals={"a": 1}))
    )
    assert sources["/"] == (
        TEMPLATE_PREAMBLE + '<div id="box">empty</div>'
        '<button hx-get="/load" hx-swap="innerHTML" hx-target="#box" '
        'hx-trigger="click" hx-vals="{&#34;a&#34;: 1}" type="button">load</button>'
    )
    assert sources["/load"] == TEMPLATE_PREAMBLE + "<div>loaded</div>"


def test_out_of_band_swaps_stack():
    inc = Interaction("inc")
    first = inc.swap(Div(Raw("a")))
    last = inc.swap(Div(Raw("b")))
    sources = built(Fragment(inc.trigger(Button(Raw("+"))), last, first))

    assert first.out_of_band
    assert not last.out_of_band
    assert sources["/inc"] == (
        TEMPLATE_PREAMBLE + '<div id="hxwire_0">b</div>'
        '<div hx-swap-oob="outerHTML" id="hxwire_1">a</div>'
    )
    assert 'hx-target="#hxwire_0"' in sources["/"]


def test_forced_out_of_band():
    inc = Interaction("inc")
    side = inc.swap(Div(Raw("side"), id="side"), out_of_band=True)
    main = inc.swap(Div(Raw("main")))
    sources = built(Fragment(main, side, inc.trigger(Button(Raw("+")))))
    assert sources["/inc"] == (
        TEMPLATE_PREAMBLE + '<div id="hxwire_0">main</div>'
        '<div hx-swap-oob="outerHTML" id="side">side</div>'
    )


def test_only_out_of_band_swaps_still_wire_triggers():
    inc = Interaction("inc")
    sources = built(
        Fragment(inc.swap(Div(Raw("0")), out_of_band=True), inc.trigger(Button(Raw("+"))))
    )
    assert sources["/"] == (
        TEMPLATE_PREAMBLE + '<div id="hxwire_0">0</div>'
        '<button hx-post="/inc" hx-swap="none" hx-target="#hxwire_0" '
        'type="button">+</button>'
    )
    assert sources["/inc"] == (
        TEMPLATE_PREAMBLE + '<div hx-swap-oob="outerHTML" id="hxwire_0">0</div>'
    )


def test_out_of_band_copy_sees_later_wiring():
    refresh = Interaction("refresh")
    button = refresh.trigger(Button(Raw("go")))
    inc = Interaction("inc")
    sources = built(
        Fragment(
            inc.swap(button, out_of_band=True),
            inc.swap(Div(Raw("main"))),
            inc.trigger(Button(Raw("+"))),
            refresh.swap(Div(Raw("x"))),
        )
    )
    copy = sources["/inc"].split("</div>", 1)[1]
    assert copy.startswith('<button hx-post="/refresh" ')
    assert 'hx-swap-oob="outerHTML" hx-target="#hxwire_2" id="hxwire_0"' in copy


def test_route_follows_target_path():
    inc = Interaction("inc")
    counter = Fragment(inc.swap(Div(Raw("0"))), inc.trigger(Button(Raw("+"))))
    sources = built(AtPath(counter, "counter"))
    assert "/counter/inc" in sources
    assert 'hx-post="/counter/inc"' in sources["/"]


def errors_of(root):
    page = Page()
    page.add(root)
    errors = page.validate()
    assert errors is not None
    return str(errors["/"])


def test_trigger_never_placed():
    inc = Interaction("inc")
    inc.trigger(Button(Raw("+")))
    assert errors_of(inc.swap(Div(Raw("0")))) == "inc trigger was never compiled"


def test_swap_never_placed():
    inc = Interaction("inc")
    inc.swap(Div(Raw("0")))
    assert errors_of(inc.trigger(Button(Raw("+")))) == "inc target of swap 0 was never compiled"


def test_trigger_without_swaps():
    inc = Interaction("inc")
    assert errors_of(inc.trigger(Button(Raw("+")))) == "inc no swap registered"


def test_missing_target():
    inc = Interaction("inc")
    assert errors_of(inc.swap(content=Div(Raw("0")))) == "inc missing target"


def test_missing_content():
    inc = Interaction("inc")
    swap = inc.swap()
    swap.target(Div(Raw("0")))
    assert errors_of(swap) == "inc missing content"


def test_target_set_twice():
    inc = Interaction("inc")
    swap = inc.swap(Div(Raw("a")))
    swap.target(Div(Raw("b")))
    assert "inc swap target set twice" in errors_of(Fragment(swap, inc.trigger(Button(Raw("+")))))


def test_unsupported_method():
    with pytest.raises(ValueError):
        Interaction("inc", method="trace")


def test_duplicate_route_fails_build():
    a, b = Interaction("inc"), Interaction("inc")
    root = Fragment(
        a.swap(Div(Raw("a"))),
        a.trigger(Button(Raw("a"))),
        b.swap(Div(Raw("b"))),
        b.trigger(Button(Raw("b"))),
    )
    with pytest.raises(BuildError, match="interaction already registered at /inc"):
        HxWire(root)


def test_served_counter():
    count = {"n": 0}

    def increment(request):
        count["n"] += 1
        return {"count": count["n"]}

    inc = Interaction("inc", push_url="/counted")
    root = Fragment(
        inc.action(increment, Div(Value("count"))),
        inc.trigger(Button(Raw("+"))),
    )
    client = TestClient(HxWire(root))

    page = client.get("/")
    assert page.status_code == 200
    assert page.text.startswith('<div id="hxwire_0"></div><button')

    partial = client.post("/inc", headers={"HX-Request": "true"})
    assert partial.status_code == 200
    assert partial.text == '<div id="hxwire_0">1</div>'
    assert partial.headers["HX-Push-Url"] == "/counted"

    partial = client.post("/inc", headers={"HX-Request": "true"})
    assert partial.text == '<div id="hxwire_0">2</div>'
