"""Console bootstrap helpers."""

from __future__ import annotations

from vql_console.cancellation import CancellationController, InterruptSource
from vql_console.catalog import SuggestionSource
from vql_console.commands import CommandDispatcher, StatementRuntime, default_registry
from vql_console.completion import StatementCompleter
from vql_console.config import Settings, load_config_file
from vql_console.framework import ConsoleFramework
from vql_console.render import Renderer
from vql_console.repl import ConsoleRepl, LineReader
from vql_console.scope import Scope, build_bindings
from vql_console.state import load_state
from vql_console.uploader import FileBasedUploader


def build_console(
    settings: Settings,
    framework: ConsoleFramework,
    *,
    renderer: Renderer | None = None,
    reader: LineReader | None = None,
    interrupts: InterruptSource | None = None,
) -> ConsoleRepl:
    """Wire scope, catalog, dispatcher and input loop for one session."""

    config = load_config_file(settings.config_file)
    bindings = build_bindings(config, uploader=FileBasedUploader(settings.dump_dir), env=settings.env)
    scope = Scope(framework.extend_scope(bindings))

    evaluator = framework.create_evaluator()
    source = SuggestionSource(scope, evaluator, framework.create_artifacts())
    renderer = renderer or Renderer(settings.format)
    runtime = StatementRuntime(
        scope=scope,
        source=source,
        renderer=renderer,
        cancellation=CancellationController(interrupts),
        evaluator=evaluator,
    )
    registry = framework.register_commands(default_registry())

    return ConsoleRepl(
        dispatcher=CommandDispatcher(registry, runtime),
        state=load_state(settings.history_file),
        scope=scope,
        renderer=renderer,
        completer=StatementCompleter(source),
        history_file=settings.history_file,
        prompt=settings.prompt,
        max_suggestions=settings.max_suggestions,
        reader=reader,
    )
