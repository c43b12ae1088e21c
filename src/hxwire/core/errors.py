"""Error types and path-annotation helpers."""

from typing import Any, Iterable, List, Optional, Sequence


class HxWireError(Exception):
    """Base class for every error raised by hxwire."""

    pass


class ComponentError(HxWireError):
    """Structural or usage error found while compiling a component tree."""

    pass


class MissingIDError(ComponentError):
    pass


class MissingTargetError(ComponentError):
    pass


class MissingContentError(ComponentError):
    pass


class MissingFunctionError(ComponentError):
    pass


class DuplicateError(ComponentError):
    """Raised when a single-use slot (target, content) is filled twice."""

    pass


class NotCompiledError(ComponentError):
    """Raised when a reference is rendered or inspected before compile."""

    pass


class ElementError(ComponentError):
    """Raised when an element tree does not have the expected shape."""

    pass


class BuildError(HxWireError):
    """Build-fatal error. The application cannot serve any path."""

    def __init__(self, message: str, errors: Optional[dict] = None):
        super().__init__(message)
        self.errors = errors or {}


class DuplicateInteractionError(BuildError):
    """Raised when two handlers are registered at the same path."""

    pass


class CompileErrors(HxWireError):
    """Several errors collected from one subtree."""

    def __init__(self, errors: Sequence[Exception]):
        self.errors = list(errors)
        super().__init__("\n".join(str(err) for err in self.errors))


def join_errors(errors: Iterable[Optional[Exception]]) -> Optional[Exception]:
    """Combine errors, ignoring None. Returns None when nothing failed."""
    found = [err for err in errors if err is not None]
    if not found:
        return None
    if len(found) == 1:
        return found[0]
    return CompileErrors(found)


class PathError(HxWireError):
    """An error annotated with the component path it was raised under.

    The path reads like a breadcrumb: ``form.div[1].button missing id``.
    Segments are joined with ``.`` except next to enclosed groups
    (``Form(div.button)``) and index segments (``[1]``).
    """

    def __init__(self, path: List[str], err: Exception):
        self.path = list(path)
        self.err = err
        super().__init__(self.path_string(), err)
        self.__cause__ = err

    def path_string(self) -> str:
        out = ""
        for i, segment in enumerate(self.path):
            if i > 0 and not (
                segment.startswith(("(", "[")) or segment.endswith(")")
            ):
                out += "."
            out += segment
        return out

    def __str__(self) -> str:
        return f"{self.path_string()} {self.err}"


def prepend_path(err: Optional[Exception], *path: str) -> Optional[Exception]:
    """Add ancestor segments in front of an error's path."""
    if err is None:
        return None
    if not path:
        return err
    if isinstance(err, PathError):
        return PathError(list(path) + err.path, err.err)
    return PathError(list(path), err)


def enclose_path(err: Optional[Exception], *path: str) -> Optional[Exception]:
    """Wrap an error's path in parentheses and put ``path`` in front.

    Used by reusable components that present their internals as one unit:
    ``enclose_path(PathError(["a", "b"], e), "Form")`` reads ``Form(a.b) e``.
    """
    if err is None:
        return None
    if isinstance(err, PathError):
        enclosed = "(" + err.path_string() + ")"
        return PathError(list(path) + [enclosed], err.err)
    return PathError(list(path), err)


class Validator:
    """Collects required-field checks for one component."""

    def __init__(self, name: str):
        self.name = name
        self.errors: List[Exception] = []

    def require(self, ok: Any, err: Exception) -> "Validator":
        if not ok:
            self.errors.append(err)
        return self

    def require_id(self, value: str) -> "Validator":
        return self.require(value, MissingIDError("missing id"))

    def require_content(self, value: Any, field: str = "content") -> "Validator":
        return self.require(value is not None, MissingContentError(f"missing {field}"))

    def require_target(self, value: Any) -> "Validator":
        return self.require(value is not None, MissingTargetError("missing target"))

    def require_function(self, value: Any, field: str = "function") -> "Validator":
        return self.require(
            callable(value), MissingFunctionError(f"missing {field}")
        )

    def error(self) -> Optional[Exception]:
        return prepend_path(join_errors(self.errors), self.name)

    def check(self) -> None:
        """Raise the collected error, if any."""
        err = self.error()
        if err is not None:
            raise err
