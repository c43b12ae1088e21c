"""Shared Jinja2 namespace used while building an application."""

import logging
from typing import Any, Callable, Dict, Optional

from jinja2 import DictLoader, Environment, Template, select_autoescape

from hxwire.core.generator import Generator

logger = logging.getLogger(__name__)


class TemplateBuilder:
    """Collects template functions and sources for one build.

    Functions are exposed to templates as globals under generated names;
    templates are parsed when added so syntax errors surface at build time.
    """

    def __init__(self, generator: Generator):
        self.generator = generator
        self.sources: Dict[str, str] = {}
        self.env = Environment(
            loader=DictLoader(self.sources),
            autoescape=select_autoescape(default=True, default_for_string=True),
        )

    def register(self, fn: Callable[..., Any], origin: Optional[Any] = None) -> str:
        """Expose ``fn`` to templates and return its generated name.

        The name is derived from ``origin`` (defaults to ``fn``) so wrappers
        can keep the name of the user function they wrap.
        """
        name = self.generator.new_function_id(origin if origin is not None else fn)
        self.env.globals[name] = fn
        return name

    def add(self, name: str, source: str) -> Template:
        """Parse ``source`` under ``name``. Raises ``TemplateSyntaxError``."""
        self.sources[name] = source
        template = self.env.get_template(name)
        logger.debug("parsed template %s", name)
        return template

    def get(self, name: str) -> Template:
        return self.env.get_template(name)
