"""Context-aware statement completion.

Completion runs on every keystroke, so the classifier is a small state
machine keyed on the leading keyword, the presence of ``FROM``/``WHERE`` and
the word next to the cursor. It never parses the statement and tolerates any
partial input.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

from vql_console.catalog import Suggestion, SuggestionSource

TOKEN_SEPARATOR = " "

TOPLEVEL_COMMANDS: tuple[Suggestion, ...] = (
    Suggestion("SELECT", "Start a query"),
    Suggestion("LET", "Assign a stored query"),
    Suggestion("HELP", "Show help about plugins, functions etc"),
)
FROM_KEYWORD = Suggestion("FROM", "Select from plugin")
WILDCARD = Suggestion("*", "All columns")
WHERE_KEYWORD = Suggestion("WHERE", "Condition to filter the result set")
POST_PREDICATE_KEYWORDS: tuple[Suggestion, ...] = (
    Suggestion("LIMIT", "Limit to this many rows"),
    Suggestion("ORDER BY", "order results by a column"),
)
LET_OPERATORS: tuple[Suggestion, ...] = (
    Suggestion("=", "Store query in scope"),
    Suggestion("<=", "Materialize query in scope"),
)
LET_SELECT = Suggestion("SELECT", "Start Query")

LET_OPERATOR_POSITION = 3
LET_QUERY_POSITION = 4


@dataclass(frozen=True)
class ParsePosition:
    """Cursor position derived from the text typed so far."""

    tokens: list[str]
    last_word: str
    previous_word: str
    current_word: str

    @classmethod
    def from_tokens(cls, tokens: Sequence[str]) -> ParsePosition:
        last_word = ""
        previous_word = ""
        for token in tokens:
            if token:
                previous_word = last_word
                last_word = token
        return cls(
            tokens=list(tokens),
            last_word=last_word,
            previous_word=previous_word,
            current_word=tokens[-1] if tokens else "",
        )

    def has_keyword(self, keyword: str) -> bool:
        return contains_keyword(self.tokens, keyword)


def contains_keyword(tokens: Iterable[str], keyword: str) -> bool:
    needle = keyword.upper()
    return any(token.upper() == needle for token in tokens)


def filter_has_prefix(suggestions: Iterable[Suggestion], word: str) -> list[Suggestion]:
    """Keep suggestions whose text starts with ``word``, ignoring case."""

    if not word:
        return list(suggestions)
    needle = word.upper()
    return [item for item in suggestions if item.text.upper().startswith(needle)]


def _finish(columns: Iterable[Suggestion], current_word: str) -> list[Suggestion]:
    return filter_has_prefix(sorted(columns, key=lambda item: item.text), current_word)


def classify(text: str, source: SuggestionSource) -> list[Suggestion]:
    """Return the candidate set for ``text``, the input before the cursor."""

    if text == "":
        return []

    tokens = text.split(TOKEN_SEPARATOR)
    if len(tokens) <= 1:
        return filter_has_prefix(TOPLEVEL_COMMANDS, tokens[0])

    current_word = tokens[-1]
    keyword = tokens[0].upper()
    if keyword == "SELECT":
        return complete_select(source, tokens, current_word)
    if keyword == "LET":
        return complete_let(source, tokens, current_word)
    if keyword == "HELP":
        return complete_help(source, tokens, current_word)
    return []


def complete_help(source: SuggestionSource, tokens: Sequence[str], current_word: str) -> list[Suggestion]:
    columns = source.functions(add_bracket=False) + source.plugins(add_bracket=False)
    return _finish(columns, current_word)


def complete_let(source: SuggestionSource, tokens: Sequence[str], current_word: str) -> list[Suggestion]:
    columns: list[Suggestion] = []
    if len(tokens) == LET_OPERATOR_POSITION:
        columns = list(LET_OPERATORS)
    elif len(tokens) == LET_QUERY_POSITION:
        columns = [LET_SELECT]
    elif len(tokens) > LET_QUERY_POSITION and tokens[LET_OPERATOR_POSITION].upper() == "SELECT":
        return complete_select(source, tokens[LET_OPERATOR_POSITION:], current_word)
    return _finish(columns, current_word)


def complete_select(source: SuggestionSource, tokens: Sequence[str], current_word: str) -> list[Suggestion]:
    position = ParsePosition.from_tokens(tokens)
    last_word = position.last_word.upper()
    columns: list[Suggestion] = []

    if not position.has_keyword("FROM"):
        columns.append(FROM_KEYWORD)
        if last_word == "SELECT":
            # * is only valid immediately after SELECT
            columns.append(WILDCARD)
            columns.extend(source.variables())
            columns.extend(source.functions(add_bracket=True))
        elif position.last_word.endswith(",") or current_word != "":
            columns.extend(source.variables())
            columns.extend(source.functions(add_bracket=True))
        return _finish(columns, current_word)

    after_from = last_word == "FROM" or (current_word != "" and position.previous_word.upper() == "FROM")
    if after_from:
        columns.extend(source.variables())
        columns.extend(source.plugins(add_bracket=True))
    elif not position.has_keyword("WHERE"):
        columns.append(WHERE_KEYWORD)
        columns.extend(POST_PREDICATE_KEYWORDS)
    else:
        columns.extend(POST_PREDICATE_KEYWORDS)
        columns.extend(source.variables())
        columns.extend(source.functions(add_bracket=True))
    return _finish(columns, current_word)


class StatementCompleter(Completer):
    """prompt_toolkit adapter over :func:`classify`."""

    def __init__(self, source: SuggestionSource) -> None:
        self._source = source

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterator[Completion]:
        text = document.text_before_cursor
        current_word = text.split(TOKEN_SEPARATOR)[-1]
        for suggestion in classify(text, self._source):
            yield Completion(
                suggestion.text,
                start_position=-len(current_word),
                display_meta=suggestion.description,
            )
