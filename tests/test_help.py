from vql_console.catalog import CatalogEntry, SuggestionSource
from vql_console.help import HelpResolver, resolve_help
from vql_console.scope import Scope

from conftest import FakeEvaluator, make_artifacts


def _source(**kwargs) -> SuggestionSource:
    return SuggestionSource(Scope(), FakeEvaluator(**kwargs), make_artifacts())


def test_function_help_renders_doc() -> None:
    source = _source(function_entries=[CatalogEntry("foo", "d")])

    result = resolve_help(source, ["HELP", "foo"])

    assert result.kind == "function"
    assert result.found is True
    assert result.render() == "Function foo:\nd\n"


def test_unknown_name_reports_unknown_function_or_plugin() -> None:
    source = _source(function_entries=[CatalogEntry("foo", "d")])

    result = resolve_help(source, ["HELP", "bar"])

    assert result.found is False
    assert result.render() == "Unknown function or plugin."


def test_plugin_help_renders_argument_table(source: SuggestionSource) -> None:
    result = HelpResolver(source).resolve("HELP glob".split(" "))

    assert result.kind == "plugin"
    text = result.render()
    assert text.startswith("VQL Plugin glob:\nRetrieve files based on a list of glob expressions\n\nArgs:\n")
    assert "  globs: One or more glob patterns (string) repeated required\n" in text
    assert "  root: The root directory to glob from (default '/'). (string)\n" in text
    assert text.endswith("  accessor:  (string)\n")


def test_artifact_help_renders_raw_source(source: SuggestionSource) -> None:
    result = HelpResolver(source).resolve(["HELP", "Artifact.Linux.Sys.Users"])

    assert result.kind == "artifact"
    assert result.render() == "name: Linux.Sys.Users\n"


def test_unknown_artifact_stops_resolution(source: SuggestionSource) -> None:
    result = HelpResolver(source).resolve(["HELP", "Artifact.Missing", "glob"])

    assert result.kind == "unknown_artifact"
    assert result.render() == "Unknown artifact"


def test_artifact_lookup_without_repository() -> None:
    source = SuggestionSource(Scope(), FakeEvaluator())

    assert resolve_help(source, ["HELP", "Artifact.Linux.Sys.Users"]).kind == "unknown_artifact"


def test_first_resolvable_token_wins(source: SuggestionSource) -> None:
    result = HelpResolver(source).resolve(["HELP", "count", "glob"])

    assert result.kind == "function"
    assert result.name == "count"


def test_unresolved_tokens_are_skipped(source: SuggestionSource) -> None:
    result = HelpResolver(source).resolve(["help", "", "nope", "glob"])

    assert result.kind == "plugin"
    assert result.name == "glob"


def test_functions_shadow_plugins_of_the_same_name() -> None:
    source = _source(
        function_entries=[CatalogEntry("info", "function doc")],
        plugin_entries=[CatalogEntry("info", "plugin doc")],
    )

    assert resolve_help(source, ["HELP", "info"]).doc == "function doc"


def test_lookup_is_case_sensitive(source: SuggestionSource) -> None:
    assert resolve_help(source, ["HELP", "COUNT"]).kind == "unknown"


def test_help_without_names_is_unknown(source: SuggestionSource) -> None:
    assert resolve_help(source, ["HELP", ""]).kind == "unknown"
