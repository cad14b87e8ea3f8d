import importlib
from pathlib import Path

from typer.testing import CliRunner

cli_app_module = importlib.import_module("vql_console.cli")


class _FakeRepl:
    def __init__(self) -> None:
        self.ran = False

    def run(self) -> None:
        self.ran = True


def test_console_command_builds_and_runs(monkeypatch, tmp_path: Path) -> None:
    captured: dict[str, object] = {}
    repl = _FakeRepl()

    def _fake_build_console(settings, framework, *, renderer=None, reader=None, interrupts=None):
        captured["settings"] = settings
        captured["framework"] = framework
        return repl

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli_app_module, "build_console", _fake_build_console)
    runner = CliRunner()
    result = runner.invoke(
        cli_app_module.app,
        [
            "console",
            "--format",
            "CSV",
            "--history",
            str(tmp_path / "history"),
            "--dump-dir",
            str(tmp_path),
            "--env",
            "Hostname=box",
            "--env",
            "Mode=test",
        ],
    )

    assert result.exit_code == 0, result.output
    assert repl.ran is True
    settings = captured["settings"]
    assert settings.format == "csv"
    assert settings.history_file == tmp_path / "history"
    assert settings.dump_dir == tmp_path
    assert settings.env == {"Hostname": "box", "Mode": "test"}


def test_console_is_the_default_command(monkeypatch, tmp_path: Path) -> None:
    repl = _FakeRepl()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli_app_module, "build_console", lambda settings, framework, **_: repl)

    result = CliRunner().invoke(cli_app_module.app, [])

    assert result.exit_code == 0, result.output
    assert repl.ran is True


def test_unknown_format_is_rejected(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli_app_module.app, ["console", "--format", "xml"])

    assert result.exit_code == 1
    assert "unknown output format: xml" in result.output


def test_malformed_env_is_rejected(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli_app_module.app, ["console", "--env", "novalue"])

    assert result.exit_code == 1
    assert "invalid env binding" in result.output


def test_unknown_log_level_is_rejected(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("VQL_CONSOLE_LOG_LEVEL", raising=False)
    result = CliRunner().invoke(cli_app_module.app, ["console", "--log-level", "loud"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Error:" in result.output
    assert "log_level" in result.output


def test_invalid_environment_setting_is_rejected(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("VQL_CONSOLE_FORMAT", "xml")
    result = CliRunner().invoke(cli_app_module.app, ["console"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Error:" in result.output
    assert "format" in result.output
