"""Console session state and its history file."""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

HISTORY_FILE_MODE = 0o600


class ConsoleState(BaseModel):
    """Statements accepted during this and previous sessions, oldest first."""

    model_config = ConfigDict(populate_by_name=True)

    history: list[str] = Field(default_factory=list, alias="History")

    def append(self, text: str) -> None:
        if not text:
            return
        self.history.append(text)


def load_state(path: Path) -> ConsoleState:
    """Read the history file, falling back to an empty state on any failure."""

    try:
        data = path.read_text(encoding="utf-8")
        state = ConsoleState.model_validate_json(data)
    except (OSError, UnicodeDecodeError, ValidationError) as exc:
        logger.debug("state.load_failed path={} error={}", path, exc)
        return ConsoleState()

    state.history = [entry for entry in state.history if entry]
    logger.debug("state.loaded path={} entries={}", path, len(state.history))
    return state


def save_state(path: Path, state: ConsoleState) -> None:
    """Write the history file. Failures are logged and dropped."""

    try:
        serialized = state.model_dump_json(by_alias=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, HISTORY_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(serialized)
    except (OSError, ValueError) as exc:
        logger.debug("state.save_failed path={} error={}", path, exc)
        return
    logger.debug("state.saved path={} entries={}", path, len(state.history))
