"""Read-only suggestion sources over scope variables, the evaluator catalog and artifacts."""

from __future__ import annotations

import builtins
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from vql_console.cancellation import ExecutionContext

ARTIFACT_PREFIX = "Artifact."
HIDDEN_VAR_PREFIXES = ("$", "_")
CALL_BRACKET = "("


@dataclass(frozen=True)
class Suggestion:
    """One completion proposal."""

    text: str
    description: str = ""


@dataclass(frozen=True)
class FieldDescriptor:
    """One declared argument field as reported by the evaluator's introspection."""

    name: str
    target: str
    tag: str = ""
    repeated: bool = False


@dataclass(frozen=True)
class CatalogEntry:
    """A registered function or plugin."""

    name: str
    doc: str = ""
    fields: tuple[FieldDescriptor, ...] = ()


@dataclass(frozen=True)
class ArtifactDefinition:
    """A named query template."""

    name: str
    description: str = ""
    raw: str = ""


class VariableScope(Protocol):
    def keys(self) -> Iterable[str]: ...


class FunctionCatalog(Protocol):
    def functions(self) -> Sequence[CatalogEntry]: ...

    def plugins(self) -> Sequence[CatalogEntry]: ...


class Evaluator(FunctionCatalog, Protocol):
    """Query evaluator contract supplied by a plugin."""

    def parse(self, text: str) -> Any:
        """Parse statement text, raising QueryParseError when it is not valid."""
        ...

    def evaluate(self, query: Any, scope: Any, context: ExecutionContext) -> Iterable[Mapping[str, Any]]:
        """Evaluate a parsed query, yielding rows until done or cancelled."""
        ...


class ArtifactRepository(Protocol):
    def list(self) -> builtins.list[str]: ...

    def get(self, name: str) -> ArtifactDefinition | None: ...


class InMemoryArtifactRepository:
    """Artifact repository held in memory, keyed by artifact name."""

    def __init__(self, definitions: Iterable[ArtifactDefinition] = ()) -> None:
        self._definitions: dict[str, ArtifactDefinition] = {}
        for definition in definitions:
            self.add(definition)

    def add(self, definition: ArtifactDefinition) -> None:
        self._definitions[definition.name] = definition

    def list(self) -> builtins.list[str]:
        return sorted(self._definitions)

    def get(self, name: str) -> ArtifactDefinition | None:
        return self._definitions.get(name)

    def __iter__(self) -> Iterator[ArtifactDefinition]:
        return iter(self._definitions.values())


class SuggestionSource:
    """Query-only view over variables, functions, plugins and artifacts."""

    def __init__(
        self,
        scope: VariableScope,
        catalog: FunctionCatalog | None = None,
        artifacts: ArtifactRepository | None = None,
    ) -> None:
        self._scope = scope
        self._catalog = catalog
        self._artifacts = artifacts

    @property
    def artifacts(self) -> ArtifactRepository | None:
        return self._artifacts

    def function_entries(self) -> list[CatalogEntry]:
        if self._catalog is None:
            return []
        return list(self._catalog.functions())

    def plugin_entries(self) -> list[CatalogEntry]:
        if self._catalog is None:
            return []
        return list(self._catalog.plugins())

    def variables(self) -> list[Suggestion]:
        return [
            Suggestion(name)
            for name in self._scope.keys()
            if not name.startswith(HIDDEN_VAR_PREFIXES)
        ]

    def functions(self, *, add_bracket: bool) -> list[Suggestion]:
        suffix = CALL_BRACKET if add_bracket else ""
        return [Suggestion(entry.name + suffix, entry.doc) for entry in self.function_entries()]

    def plugins(self, *, add_bracket: bool) -> list[Suggestion]:
        suffix = CALL_BRACKET if add_bracket else ""
        result = [Suggestion(entry.name + suffix, entry.doc) for entry in self.plugin_entries()]
        if self._artifacts is None:
            return result

        for name in self._artifacts.list():
            artifact = self._artifacts.get(name)
            if artifact is None:
                continue
            result.append(Suggestion(f"{ARTIFACT_PREFIX}{name}{suffix}", artifact.description))
        return result

    def find_function(self, name: str) -> CatalogEntry | None:
        return _find_entry(self.function_entries(), name)

    def find_plugin(self, name: str) -> CatalogEntry | None:
        return _find_entry(self.plugin_entries(), name)

    def find_artifact(self, name: str) -> ArtifactDefinition | None:
        if self._artifacts is None:
            return None
        return self._artifacts.get(name)


def _find_entry(entries: Iterable[CatalogEntry], name: str) -> CatalogEntry | None:
    for entry in entries:
        if entry.name == name:
            return entry
    return None
