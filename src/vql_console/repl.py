"""Interactive input loop for the VQL console."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from loguru import logger
from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from vql_console.commands import CommandDispatcher
from vql_console.completion import StatementCompleter
from vql_console.render import Renderer
from vql_console.scope import Scope
from vql_console.state import ConsoleState, save_state

QUIT_COMMANDS = frozenset({"quit", "exit"})

LineReader = Callable[[], str]


class ConsoleRepl:
    """Read statements, dispatch them and persist history on exit."""

    def __init__(
        self,
        *,
        dispatcher: CommandDispatcher,
        state: ConsoleState,
        scope: Scope,
        renderer: Renderer,
        completer: StatementCompleter,
        history_file: Path,
        prompt: str = "VQL > ",
        max_suggestions: int = 10,
        reader: LineReader | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.state = state
        self.scope = scope
        self.renderer = renderer
        self.history_file = history_file
        self._completer = completer
        self._prompt = prompt
        self._max_suggestions = max_suggestions
        self._reader = reader

    def _build_reader(self) -> LineReader:
        session: PromptSession[str] = PromptSession(
            completer=self._completer,
            history=InMemoryHistory(self.state.history),
            complete_while_typing=True,
            reserve_space_for_menu=self._max_suggestions,
        )

        def _read() -> str:
            with patch_stdout(raw=True):
                return session.prompt(self._prompt)

        return _read

    def run(self) -> None:
        reader = self._reader or self._build_reader()
        try:
            self._run_input_loop(reader)
        finally:
            save_state(self.history_file, self.state)
            self.scope.close()

    def _run_input_loop(self, reader: LineReader) -> None:
        while True:
            try:
                text = reader()
            except KeyboardInterrupt:
                continue
            except EOFError:
                self.renderer.info("Goodbye!")
                break
            if text.strip().lower() in QUIT_COMMANDS:
                self.renderer.info("Goodbye!")
                break
            self.handle_line(text)

    def handle_line(self, text: str) -> bool:
        try:
            return self.dispatcher.dispatch(self.state, text)
        except Exception as exc:
            # Evaluator failures end the statement, never the session.
            logger.opt(exception=True).debug("statement.failed")
            self.renderer.error(f"{type(exc).__name__}: {exc}")
            return False
