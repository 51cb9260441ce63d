"""Step keywords and pattern naming rules.

This module defines the closed set of step keywords, the marker used to
distinguish table-signature transforms from value transforms, and the
helpers used to split a scenario line into its keyword and text.

Keywords are informational only: the engine never matches against them
and all of them are treated identically.
"""

from re import compile as regexp
from re import escape
from typing import Annotated, Literal

from pydantic import Field

#: Closed set of step keyword categories.
type Keyword = Literal['Given', 'When', 'Then', 'And', 'But', '*']

KEYWORDS: tuple[str, ...] = ('Given', 'When', 'Then', 'And', 'But', '*')

#: Keyword assigned to lines that carry no keyword of their own.
DEFAULT_KEYWORD = '*'

#: Prefix of a table-signature transform pattern, e.g. `table:name,email`.
TABLE_PREFIX = 'table:'

#: Separator of column names in a table signature.
SIGNATURE_SEPARATOR = ','

#: Compiled pattern splitting a scenario line into keyword and text.
LINE_PATTERN = regexp(
    rf'^\s*(?P<keyword>{'|'.join(escape(keyword) for keyword in KEYWORDS)})\s+(?P<text>.*?)\s*$',
)


PatternString = Annotated[
    str, Field(
        min_length=1,
        title='Pattern string',
        description=(
            'Regular expression matched against step text or a captured value. '
            'Patterns are applied exactly as written; anchors must be part of '
            'the pattern when a full-text match is intended.'
        ),
        examples=[
            r'^I have (\d+) apples$',
            r'table:name,email',
        ],
    ),
]


#: Scenario tag usable as a pytest marker, with an optional leading `@`.
TagString = Annotated[
    str, Field(
        pattern=r'^@?[A-Za-z_][A-Za-z0-9_]*$',
        title='Tag',
        description='Scenario tag. The leading `@` is dropped for the marker name.',
        examples=['smoke', '@slow'],
    ),
]

def split_line(line: str) -> tuple[str, str]:
    """Split a scenario line into a keyword and a step text.

    Args:
        line: Scenario line, optionally starting with a keyword.

    Returns:
        A tuple of the keyword and the remaining text. Lines without
        a known keyword get the default keyword and are kept as is.
    """
    if match := LINE_PATTERN.match(line):
        return match.group('keyword'), match.group('text')

    return DEFAULT_KEYWORD, line.strip()


def is_table_signature(pattern: str) -> bool:
    """Check whether a transform pattern is a table signature."""
    return pattern.startswith(TABLE_PREFIX)


def normalize_signature(pattern: str) -> str:
    """Normalize a table-signature pattern to its column list.

    Whitespace around column names is ignored.

    Args:
        pattern: Transform pattern with or without the `table:` prefix.

    Returns:
        Comma-separated column names.
    """
    if is_table_signature(pattern):
        pattern = pattern[len(TABLE_PREFIX):]

    return SIGNATURE_SEPARATOR.join(
        column.strip()
        for column in pattern.split(SIGNATURE_SEPARATOR)
    )
