from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("hxwire")
except PackageNotFoundError:
    __version__ = "unknown"

from hxwire.core.attributes import Attributes
from hxwire.core.component import (
    LI,
    OL,
    UL,
    A,
    Button,
    Component,
    Div,
    Document,
    Footer,
    Fragment,
    H,
    Header,
    Img,
    Input,
    Label,
    Main,
    Nav,
    P,
    Raw,
    Section,
    Span,
    Tag,
)
from hxwire.core.errors import (
    BuildError,
    ComponentError,
    DuplicateInteractionError,
    HxWireError,
    PathError,
)
from hxwire.core.interaction import Interaction, Swap, SwapMethod, Trigger
from hxwire.core.meta import AtData, AtPath, Mono
from hxwire.core.reference import Reference
from hxwire.core.template import (
    Condition,
    Conditions,
    Dynamic,
    Expression,
    Range,
    Value,
    Variable,
    With,
)
from hxwire.components.form import Form, InputHidden, InputSubmit, InputText
from hxwire.components.paths import Paths, Tab, Tabs
from hxwire.runtime.app import HxWire
from hxwire.runtime.handler import (
    is_request_at_path,
    load_data,
    request_data,
    request_value,
    set_header,
)
from hxwire.runtime.multiplexer import Multiplexer, Subscription
from hxwire.runtime.page import Page
from hxwire.runtime.stream import SSEEvent, Stream, StreamTarget

__all__ = [
    "HxWire",
    "Page",
    "Attributes",
    "Component",
    "Raw",
    "Fragment",
    "Tag",
    "Document",
    "Div",
    "Span",
    "P",
    "Header",
    "Footer",
    "Main",
    "Section",
    "Nav",
    "Label",
    "Button",
    "A",
    "Img",
    "Input",
    "H",
    "UL",
    "OL",
    "LI",
    "AtPath",
    "AtData",
    "Mono",
    "Reference",
    "Interaction",
    "Swap",
    "SwapMethod",
    "Trigger",
    "Condition",
    "Conditions",
    "With",
    "Range",
    "Variable",
    "Value",
    "Expression",
    "Dynamic",
    "Form",
    "InputText",
    "InputHidden",
    "InputSubmit",
    "Paths",
    "Tab",
    "Tabs",
    "Stream",
    "StreamTarget",
    "SSEEvent",
    "Multiplexer",
    "Subscription",
    "is_request_at_path",
    "load_data",
    "request_data",
    "request_value",
    "set_header",
    "HxWireError",
    "ComponentError",
    "BuildError",
    "DuplicateInteractionError",
    "PathError",
]
