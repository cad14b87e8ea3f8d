"""Argument field tag parsing.

Field tags are comma separated segments, each either a bare flag
(``required``) or a ``key=value`` option (``doc=Path to read``). A value
always ends at the next comma.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from vql_console.catalog import FieldDescriptor

TAG_SEPARATOR = ","
OPTION_SEPARATOR = "="
REQUIRED_FLAG = "required"
DOC_OPTION = "doc"


@dataclass(frozen=True)
class FieldTag:
    options: dict[str, str] = field(default_factory=dict)
    flags: frozenset[str] = frozenset()

    @property
    def doc(self) -> str:
        return self.options.get(DOC_OPTION, "")

    @property
    def required(self) -> bool:
        return REQUIRED_FLAG in self.flags


@dataclass(frozen=True)
class ArgumentDescriptor:
    """One row of a rendered argument table."""

    field_name: str
    doc: str
    target_type: str
    repeated: bool
    required: bool


def parse_field_tag(tag: str) -> FieldTag:
    options: dict[str, str] = {}
    flags: set[str] = set()
    if not tag:
        return FieldTag()

    for segment in tag.split(TAG_SEPARATOR):
        if OPTION_SEPARATOR in segment:
            key, value = segment.split(OPTION_SEPARATOR, 1)
            # First occurrence wins, matching a left-to-right scan.
            options.setdefault(key, value)
        elif segment:
            flags.add(segment)
    return FieldTag(options=options, flags=frozenset(flags))


def describe_arguments(fields: Iterable[FieldDescriptor]) -> list[ArgumentDescriptor]:
    rows: list[ArgumentDescriptor] = []
    for descriptor in fields:
        tag = parse_field_tag(descriptor.tag)
        rows.append(
            ArgumentDescriptor(
                field_name=descriptor.name,
                doc=tag.doc,
                target_type=descriptor.target,
                repeated=descriptor.repeated,
                required=tag.required,
            )
        )
    return rows
