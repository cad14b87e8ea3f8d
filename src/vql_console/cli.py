"""Command line entry point for the VQL console."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

from vql_console.bootstrap import build_console
from vql_console.config import OutputFormat, load_settings, parse_env_pairs
from vql_console.errors import ConfigurationError
from vql_console.framework import ConsoleFramework
from vql_console.logging_utils import configure_logging
from vql_console.render import Renderer

app = typer.Typer(
    name="vql-console",
    help="Interactive console for VQL queries.",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        console()


@app.command()
def console(
    output_format: Annotated[Optional[str], typer.Option("--format", help="Output format to use: text, json or csv.")] = None,
    dump_dir: Annotated[Optional[Path], typer.Option("--dump-dir", help="Directory to dump output files.")] = None,
    history: Annotated[Optional[Path], typer.Option("--history", help="Filename to store history in.")] = None,
    config: Annotated[Optional[Path], typer.Option("--config", help="YAML configuration bound into scope.")] = None,
    env: Annotated[Optional[list[str]], typer.Option("--env", help="Extra scope binding as KEY=VALUE.")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Log level.")] = None,
) -> None:
    """Enter the interactive console."""

    renderer = Renderer()
    try:
        settings = load_settings(
            format=_output_format(output_format),
            dump_dir=dump_dir,
            history_file=history,
            config_file=config,
            env=parse_env_pairs(env) if env else None,
            log_level=log_level,
        )
        configure_logging(level=settings.log_level, profile="console")
        renderer.output_format = settings.format

        framework = ConsoleFramework(settings)
        framework.load_plugins()
        repl = build_console(settings, framework, renderer=renderer)
    except ConfigurationError as exc:
        renderer.error(str(exc))
        raise typer.Exit(1) from exc

    renderer.welcome()
    repl.run()


def _output_format(value: str | None) -> OutputFormat | None:
    if value is None:
        return None
    lowered = value.lower()
    if lowered not in ("text", "json", "csv"):
        raise ConfigurationError(f"unknown output format: {value}")
    return lowered  # type: ignore[return-value]


if __name__ == "__main__":
    app()
