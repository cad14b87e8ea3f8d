"""Variable scope shared by statements of one console session."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from loguru import logger

CACHE_VAR = "$cache"
UPLOADER_VAR = "$uploader"
CONFIG_VAR = "config"
SERVER_CONFIG_VAR = "server_config"
CLIENT_CONFIG_SECTION = "Client"


class ScopeCache:
    """Evaluation cache shared by every statement in the session."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._items.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._items[key] = value

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class Scope:
    """Named bindings visible to statements.

    Evaluators bind ``LET`` results here; the console itself only reads keys
    for completion.
    """

    def __init__(self, bindings: Mapping[str, Any] | None = None) -> None:
        self._vars: dict[str, Any] = dict(bindings or {})
        self._destructors: list[Callable[[], None]] = []
        self.logger = logger.bind(component="vql")

    def keys(self) -> list[str]:
        return list(self._vars)

    def get(self, name: str, default: Any = None) -> Any:
        return self._vars.get(name, default)

    def set(self, name: str, value: Any) -> Scope:
        self._vars[name] = value
        return self

    def update(self, bindings: Mapping[str, Any]) -> Scope:
        self._vars.update(bindings)
        return self

    def add_destructor(self, destructor: Callable[[], None]) -> None:
        self._destructors.append(destructor)

    def close(self) -> None:
        while self._destructors:
            destructor = self._destructors.pop()
            try:
                destructor()
            except Exception:
                self.logger.opt(exception=True).warning("scope.destructor_failed")

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __enter__(self) -> Scope:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def build_bindings(
    config: Mapping[str, Any],
    *,
    uploader: Any,
    env: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Startup bindings: configuration, uploader, cache and user supplied env."""

    bindings: dict[str, Any] = {
        CONFIG_VAR: config.get(CLIENT_CONFIG_SECTION, {}),
        SERVER_CONFIG_VAR: dict(config),
        UPLOADER_VAR: uploader,
        CACHE_VAR: ScopeCache(),
    }
    if env:
        bindings.update(env)
    return bindings
