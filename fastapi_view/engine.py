"""Jinja2 engine adapter with async execution, helpers and partials.

One ``TemplateEngine`` is shared by every render of a ``ViewRenderer``.
Helpers are registered once at setup; partials are re-registered on every
render call, and the last registration for a name wins.
"""

from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from jinja2 import BaseLoader, Environment, Template, TemplateNotFound, TemplateSyntaxError

from fastapi_view.exceptions import CompileOrExecuteError, ViewException


@dataclass(frozen=True)
class CompiledTemplate:
    """Template source paired with its compiled Jinja2 template."""

    source: str
    template: Template


class PartialLoader(BaseLoader):
    """Serves registered partials to ``{% include %}``."""

    def __init__(self) -> None:
        self.partials: dict[str, CompiledTemplate] = {}

    def load(
        self, environment: Environment, name: str, globals: MutableMapping[str, Any] | None = None
    ) -> Template:
        # Already compiled at registration
        return self._lookup(name).template

    def _lookup(self, name: str) -> CompiledTemplate:
        compiled = self.partials.get(name)
        if compiled is None:
            raise TemplateNotFound(name)
        return compiled


class TemplateEngine:
    """Compiles and executes templates on a shared async Jinja2 environment."""

    def __init__(self, environment: Environment | None = None):
        if environment is None:
            # Async mode awaits coroutines returned by helpers during rendering
            environment = Environment(autoescape=True, enable_async=True)
        elif not environment.is_async:
            raise ValueError("environment must be created with enable_async=True")
        # Partials are looked up on every include, never from the template cache
        environment.cache = None
        self.partial_loader = PartialLoader()
        self.environment = environment
        self.environment.loader = self.partial_loader

    def compile(self, source: str) -> CompiledTemplate:
        try:
            template = self.environment.from_string(source)
        except TemplateSyntaxError as e:
            raise CompileOrExecuteError(
                f"template syntax error: {e.message}", details={"lineno": e.lineno}
            ) from e
        return CompiledTemplate(source=source, template=template)

    async def execute(self, compiled: CompiledTemplate, data: Mapping[str, Any]) -> str:
        """Render ``compiled`` against ``data``.

        Returns only once every awaitable produced by helpers has settled.

        Raises:
            CompileOrExecuteError: If the template or any helper raised
        """
        try:
            return await compiled.template.render_async(dict(data))
        except ViewException:
            raise
        except Exception as e:
            raise CompileOrExecuteError(
                f"template execution failed: {e}", details={"error_type": type(e).__name__}
            ) from e

    def register_helper(self, name: str, helper: Callable[..., Any]) -> None:
        self.environment.globals[name] = helper

    def compile_partial(self, name: str, source: str) -> CompiledTemplate:
        """Compile partial source, reusing the registered template if the source is unchanged."""
        current = self.partial_loader.partials.get(name)
        if current is not None and current.source == source:
            return current
        return self.compile(source)

    def register_partial(self, name: str, compiled: CompiledTemplate) -> None:
        self.partial_loader.partials[name] = compiled

    @property
    def partials(self) -> Mapping[str, CompiledTemplate]:
        return self.partial_loader.partials
