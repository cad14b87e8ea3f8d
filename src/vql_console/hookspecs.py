"""Pluggy hook namespace and console hook specifications."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from vql_console.catalog import ArtifactRepository, Evaluator
    from vql_console.commands import CommandRegistry
    from vql_console.config import Settings

HOOK_NAMESPACE = "vql_console"
hookspec = pluggy.HookspecMarker(HOOK_NAMESPACE)
hookimpl = pluggy.HookimplMarker(HOOK_NAMESPACE)


class ConsoleHookSpecs:
    """Hook contract for console extensions."""

    @hookspec(firstresult=True)
    def provide_evaluator(self, settings: Settings) -> Evaluator | None:
        """Provide the query evaluator that parses and runs statements."""

    @hookspec(firstresult=True)
    def provide_artifacts(self, settings: Settings) -> ArtifactRepository | None:
        """Provide the repository of named query templates."""

    @hookspec
    def extend_scope(self, settings: Settings, bindings: dict[str, Any]) -> None:
        """Add startup bindings to the session scope."""

    @hookspec
    def register_commands(self, registry: CommandRegistry) -> None:
        """Register extra statement keywords with the dispatcher."""
