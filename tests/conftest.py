from __future__ import annotations

import io
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

import pytest
from rich.console import Console

from vql_console.cancellation import CancellationController, ExecutionContext
from vql_console.catalog import (
    ArtifactDefinition,
    CatalogEntry,
    FieldDescriptor,
    InMemoryArtifactRepository,
    SuggestionSource,
)
from vql_console.commands import StatementRuntime
from vql_console.errors import QueryParseError
from vql_console.render import Renderer
from vql_console.scope import Scope


@dataclass
class FakeEvaluator:
    function_entries: list[CatalogEntry] = field(default_factory=list)
    plugin_entries: list[CatalogEntry] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    parse_error: str | None = None
    parsed: list[str] = field(default_factory=list)
    on_row: Callable[[ExecutionContext], None] | None = None

    def functions(self) -> list[CatalogEntry]:
        return self.function_entries

    def plugins(self) -> list[CatalogEntry]:
        return self.plugin_entries

    def parse(self, text: str) -> str:
        if self.parse_error is not None:
            raise QueryParseError(self.parse_error)
        self.parsed.append(text)
        return text

    def evaluate(self, query: Any, scope: Any, context: ExecutionContext) -> Iterator[dict[str, Any]]:
        for row in self.rows:
            if self.on_row is not None:
                self.on_row(context)
            context.raise_if_cancelled()
            yield row


@dataclass
class ManualInterrupts:
    """Interrupt source fired by the test instead of SIGINT."""

    notify: Callable[[], None] | None = None
    armed: int = 0

    def arm(self, notify: Callable[[], None]) -> None:
        self.notify = notify
        self.armed += 1

    def disarm(self) -> None:
        self.notify = None

    def fire(self) -> None:
        if self.notify is not None:
            self.notify()


def make_evaluator(**kwargs: Any) -> FakeEvaluator:
    return FakeEvaluator(
        function_entries=[
            CatalogEntry("count", "Counts rows."),
            CatalogEntry("format", "Format a string.", (FieldDescriptor("format", "string", "required,doc=Format string"),)),
        ],
        plugin_entries=[
            CatalogEntry(
                "glob",
                "Retrieve files based on a list of glob expressions",
                (
                    FieldDescriptor("globs", "string", "required,doc=One or more glob patterns", repeated=True),
                    FieldDescriptor("root", "string", "doc=The root directory to glob from (default '/')."),
                    FieldDescriptor("accessor", "string"),
                ),
            ),
            CatalogEntry("pslist", "List processes"),
        ],
        **kwargs,
    )


def make_artifacts() -> InMemoryArtifactRepository:
    return InMemoryArtifactRepository(
        [ArtifactDefinition("Linux.Sys.Users", "Get User specific information.", "name: Linux.Sys.Users\n")]
    )


def make_scope() -> Scope:
    return Scope({"hostname": "box", "$uploader": object(), "$cache": {}, "_private": 1})


def make_renderer(output_format: str = "json") -> tuple[Renderer, io.StringIO]:
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, force_terminal=False, color_system=None)
    return Renderer(output_format, console=console), buffer  # type: ignore[arg-type]


@pytest.fixture
def evaluator() -> FakeEvaluator:
    return make_evaluator()


@pytest.fixture
def source(evaluator: FakeEvaluator) -> SuggestionSource:
    return SuggestionSource(make_scope(), evaluator, make_artifacts())


@pytest.fixture
def interrupts() -> ManualInterrupts:
    return ManualInterrupts()


@pytest.fixture
def runtime_output(
    source: SuggestionSource, evaluator: FakeEvaluator, interrupts: ManualInterrupts
) -> tuple[StatementRuntime, io.StringIO]:
    renderer, buffer = make_renderer()
    runtime = StatementRuntime(
        scope=make_scope(),
        source=source,
        renderer=renderer,
        cancellation=CancellationController(interrupts),
        evaluator=evaluator,
    )
    return runtime, buffer
