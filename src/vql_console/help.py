"""HELP statement resolution."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from loguru import logger

from vql_console.catalog import ARTIFACT_PREFIX, CatalogEntry, SuggestionSource
from vql_console.tags import ArgumentDescriptor, describe_arguments

HelpKind = Literal["function", "plugin", "artifact", "unknown_artifact", "unknown"]

UNKNOWN_ARTIFACT = "Unknown artifact"
UNKNOWN_ENTRY = "Unknown function or plugin."

_TITLES: dict[str, str] = {
    "function": "Function",
    "plugin": "VQL Plugin",
}


@dataclass(frozen=True)
class HelpResult:
    kind: HelpKind
    name: str = ""
    doc: str = ""
    raw: str = ""
    arguments: tuple[ArgumentDescriptor, ...] = field(default_factory=tuple)

    @property
    def found(self) -> bool:
        return self.kind in ("function", "plugin", "artifact")

    @property
    def title(self) -> str:
        return f"{_TITLES.get(self.kind, '')} {self.name}:".strip()

    def render(self) -> str:
        """Render as plain text."""
        if self.kind == "artifact":
            return self.raw
        if self.kind == "unknown_artifact":
            return UNKNOWN_ARTIFACT
        if self.kind == "unknown":
            return UNKNOWN_ENTRY

        lines = [self.title, self.doc, ""]
        if self.arguments:
            lines.append("Args:")
            lines.extend(_argument_line(argument) for argument in self.arguments)
        return "\n".join(lines).rstrip("\n") + "\n"


def _argument_line(argument: ArgumentDescriptor) -> str:
    repeated = "repeated" if argument.repeated else ""
    required = "required" if argument.required else ""
    return f"  {argument.field_name}: {argument.doc} ({argument.target_type}) {repeated} {required}".rstrip()


class HelpResolver:
    """Look up documentation for functions, plugins and artifacts."""

    def __init__(self, source: SuggestionSource) -> None:
        self._source = source

    def resolve(self, tokens: Iterable[str]) -> HelpResult:
        for token in tokens:
            if token == "" or token.upper() == "HELP":
                continue

            if token.startswith(ARTIFACT_PREFIX):
                return self._resolve_artifact(token.removeprefix(ARTIFACT_PREFIX))

            function = self._source.find_function(token)
            if function is not None:
                return _entry_result("function", function)

            plugin = self._source.find_plugin(token)
            if plugin is not None:
                return _entry_result("plugin", plugin)

        logger.debug("help.unknown")
        return HelpResult(kind="unknown")

    def _resolve_artifact(self, name: str) -> HelpResult:
        artifact = self._source.find_artifact(name)
        if artifact is None:
            logger.debug("help.unknown_artifact name={}", name)
            return HelpResult(kind="unknown_artifact", name=name)
        return HelpResult(kind="artifact", name=artifact.name, doc=artifact.description, raw=artifact.raw)


def _entry_result(kind: HelpKind, entry: CatalogEntry) -> HelpResult:
    return HelpResult(
        kind=kind,
        name=entry.name,
        doc=entry.doc,
        arguments=tuple(describe_arguments(entry.fields)),
    )


def resolve_help(source: SuggestionSource, tokens: Iterable[str]) -> HelpResult:
    return HelpResolver(source).resolve(tokens)
