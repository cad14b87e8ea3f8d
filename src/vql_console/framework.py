"""Plugin loading for evaluators, artifacts, scope bindings and commands."""

from __future__ import annotations

from typing import Any

import pluggy
from loguru import logger

from vql_console.catalog import ArtifactRepository, Evaluator
from vql_console.commands import CommandRegistry
from vql_console.config import Settings
from vql_console.hookspecs import HOOK_NAMESPACE, ConsoleHookSpecs

ENTRY_POINT_GROUP = "vql_console"


class ConsoleFramework:
    """Own the plugin manager and ask plugins for the console's collaborators."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._plugin_manager = pluggy.PluginManager(HOOK_NAMESPACE)
        self._plugin_manager.add_hookspecs(ConsoleHookSpecs)

    @property
    def plugin_manager(self) -> pluggy.PluginManager:
        return self._plugin_manager

    def register(self, plugin: object, name: str | None = None) -> None:
        self._plugin_manager.register(plugin, name=name)

    def load_plugins(self) -> int:
        """Register plugins advertised under the console entry point group."""

        loaded = self._plugin_manager.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        logger.debug("plugins.loaded count={}", loaded)
        return loaded

    def create_evaluator(self) -> Evaluator | None:
        evaluator = self._plugin_manager.hook.provide_evaluator(settings=self.settings)
        if evaluator is None:
            logger.warning("evaluator.missing group={}", ENTRY_POINT_GROUP)
        return evaluator

    def create_artifacts(self) -> ArtifactRepository | None:
        return self._plugin_manager.hook.provide_artifacts(settings=self.settings)

    def extend_scope(self, bindings: dict[str, Any]) -> dict[str, Any]:
        self._plugin_manager.hook.extend_scope(settings=self.settings, bindings=bindings)
        return bindings

    def register_commands(self, registry: CommandRegistry) -> CommandRegistry:
        self._plugin_manager.hook.register_commands(registry=registry)
        return registry

    def hook_report(self) -> dict[str, list[str]]:
        report: dict[str, list[str]] = {}
        for hook_name in ("provide_evaluator", "provide_artifacts", "extend_scope", "register_commands"):
            caller = getattr(self._plugin_manager.hook, hook_name)
            report[hook_name] = [impl.plugin_name for impl in caller.get_hookimpls()]
        return report
