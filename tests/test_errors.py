import pytest

from hxwire.core.errors import (
    CompileErrors,
    MissingIDError,
    PathError,
    Validator,
    enclose_path,
    join_errors,
    prepend_path,
)


def test_prepend_path():
    err = prepend_path(prepend_path(ValueError("base error"), "b"), "a")
    assert isinstance(err, PathError)
    assert str(err) == "a.b base error"
    assert isinstance(err.err, ValueError)


def test_enclose_path():
    err = enclose_path(prepend_path(ValueError("base error"), "b"), "a")
    assert str(err) == "a(b) base error"


def test_enclose_multi_segment_path():
    err = enclose_path(prepend_path(ValueError("base error"), "a", "b", "c"), "wrap")
    assert str(err) == "wrap(a.b.c) base error"


def test_prepend_after_enclose():
    err = prepend_path(enclose_path(prepend_path(ValueError("x"), "b"), "Form"), "div")
    assert str(err) == "div.Form(b) x"


def test_index_segments_have_no_dot():
    err = prepend_path(prepend_path(ValueError("boom"), "[1]", "button"), "div")
    assert str(err) == "div[1].button boom"


def test_enclose_plain_error():
    err = enclose_path(ValueError("boom"), "Form")
    assert str(err) == "Form boom"


def test_none_passes_through():
    assert prepend_path(None, "a") is None
    assert enclose_path(None, "a") is None


def test_join_errors():
    assert join_errors([None, None]) is None
    single = ValueError("one")
    assert join_errors([None, single]) is single
    joined = join_errors([ValueError("one"), ValueError("two")])
    assert isinstance(joined, CompileErrors)
    assert str(joined) == "one\ntwo"


def test_validator_collects_every_failure():
    validator = Validator("form").require_id("").require_content(None, "success")
    err = validator.error()
    assert isinstance(err, PathError)
    assert str(err) == "form missing id\nmissing success"
    with pytest.raises(PathError):
        validator.check()


def test_validator_passes():
    Validator("form").require_id("signup").require_function(len).check()


def test_error_classes():
    assert issubclass(MissingIDError, Exception)
    err = MissingIDError("missing id")
    assert str(prepend_path(err, "div")) == "div missing id"
