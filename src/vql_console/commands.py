"""Statement dispatch.

A completed line is routed on its leading keyword, matched case-insensitively.
Handlers live in a :class:`CommandRegistry` built once at startup; plugins may
add keywords through the ``register_commands`` hook. Lines with an unknown
leading keyword are ignored.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from vql_console.cancellation import CancellationController, ExecutionContext, StatementCancelled
from vql_console.catalog import Evaluator, SuggestionSource
from vql_console.errors import EvaluatorNotConfiguredError, QueryParseError
from vql_console.help import HelpResolver
from vql_console.render import Renderer
from vql_console.scope import Scope
from vql_console.state import ConsoleState

TOKEN_SEPARATOR = " "


@dataclass
class StatementRuntime:
    """Collaborators a statement handler may use."""

    scope: Scope
    source: SuggestionSource
    renderer: Renderer
    cancellation: CancellationController
    evaluator: Evaluator | None = None


CommandHandler = Callable[[StatementRuntime, ConsoleState, str], None]


@dataclass(frozen=True)
class CommandDescriptor:
    keyword: str
    handler: CommandHandler
    description: str = ""


class CommandRegistry:
    """Statement handlers keyed by upper-cased leading keyword."""

    def __init__(self) -> None:
        self._commands: dict[str, CommandDescriptor] = {}

    def register(self, keyword: str, handler: CommandHandler, description: str = "") -> None:
        key = keyword.upper()
        if key in self._commands:
            logger.debug("command.replaced keyword={}", key)
        self._commands[key] = CommandDescriptor(keyword=key, handler=handler, description=description)

    def get(self, keyword: str) -> CommandDescriptor | None:
        return self._commands.get(keyword.upper())

    def has(self, keyword: str) -> bool:
        return keyword.upper() in self._commands

    def keywords(self) -> list[str]:
        return sorted(self._commands)


def execute_statement(runtime: StatementRuntime, state: ConsoleState, text: str) -> None:
    # Recorded before parsing so failed statements stay recallable.
    state.append(text)

    try:
        evaluator = _require_evaluator(runtime)
        query = evaluator.parse(text)
    except (EvaluatorNotConfiguredError, QueryParseError) as exc:
        runtime.renderer.error(str(exc))
        return

    def _run(context: ExecutionContext) -> int:
        return runtime.renderer.rows(evaluator.evaluate(query, runtime.scope, context), context)

    try:
        count = runtime.cancellation.run_cancellable(_run)
    except StatementCancelled:
        runtime.renderer.info("[dim]Statement cancelled.[/dim]")
        return
    logger.debug("statement.done rows={}", count)


def execute_help(runtime: StatementRuntime, state: ConsoleState, text: str) -> None:
    state.append(text)
    result = HelpResolver(runtime.source).resolve(text.split(TOKEN_SEPARATOR))
    runtime.renderer.help(result)


def _require_evaluator(runtime: StatementRuntime) -> Evaluator:
    if runtime.evaluator is None:
        raise EvaluatorNotConfiguredError("no query evaluator is installed")
    return runtime.evaluator


def default_registry() -> CommandRegistry:
    registry = CommandRegistry()
    registry.register("SELECT", execute_statement, "Start a query")
    registry.register("LET", execute_statement, "Assign a stored query")
    registry.register("HELP", execute_help, "Show help about plugins, functions etc")
    return registry


class CommandDispatcher:
    """Route completed lines to registered statement handlers."""

    def __init__(self, registry: CommandRegistry, runtime: StatementRuntime) -> None:
        self._registry = registry
        self._runtime = runtime

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    def dispatch(self, state: ConsoleState, text: str) -> bool:
        """Dispatch one line. Returns False when the line was not recognized."""

        if text == "":
            return False

        keyword = text.split(TOKEN_SEPARATOR, 1)[0]
        command = self._registry.get(keyword)
        if command is None:
            logger.debug("dispatch.ignored keyword={}", keyword)
            return False

        logger.debug("dispatch.statement keyword={}", command.keyword)
        command.handler(self._runtime, state, text)
        return True
