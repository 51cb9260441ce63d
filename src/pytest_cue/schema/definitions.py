"""Step definition and transform rule models.

Definitions and rules are created by the registries from registration
input and owned by them for the lifetime of a run. Both are immutable
and compare by pattern string, compiled pattern and handler identity.
"""

from re import Match, Pattern
from typing import TYPE_CHECKING

from pydantic import Field

from pytest_cue.models import SchemaModel
from pytest_cue.names import DEFAULT_KEYWORD, Keyword
from pytest_cue.values import Captures, RuntimeValue, StepHandler, TransformHandler  # noqa: TC001

if TYPE_CHECKING:
    from .steps import Table


def describe_handler(handler: object) -> str:
    """Return a dotted name identifying a handler for diagnostics."""
    module = getattr(handler, '__module__', None) or '<unknown>'
    qualname = getattr(handler, '__qualname__', None) or type(handler).__qualname__

    return f'{module}.{qualname}'


class StepDefinition(SchemaModel):
    """Registered step definition."""

    keyword: Keyword = Field(
        default=DEFAULT_KEYWORD,
        title='Keyword',
        description='Keyword category of the declaration. Advisory only.',
    )

    pattern: str = Field(
        title='Pattern string',
        description='Unique pattern string the definition is registered under.',
    )

    regex: Pattern[str] = Field(
        title='Compiled pattern',
        description='Compiled form of the pattern string.',
    )

    handler: StepHandler = Field(
        title='Handler',
        description='Callable invoked with bound arguments.',
    )

    arity: int = Field(
        ge=0,
        title='Arity',
        description='Number of captured argument slots.',
    )

    @property
    def origin(self) -> str:
        """Dotted name of the handler."""
        return describe_handler(self.handler)

    def match(self, text: str) -> Captures | None:
        """Match step text against the pattern.

        The pattern is applied exactly as written: anchors are
        the responsibility of the pattern itself.

        Args:
            text: Step text without keyword.

        Returns:
            Captured groups in left-to-right order, or `None`.
        """
        if found := self.regex.search(text):
            return found.groups()

        return None

    def __str__(self) -> str:
        """Return the definition as it is declared."""
        return f'{self.keyword} /{self.pattern}/'


class TransformRule(SchemaModel):
    """Registered transform rule.

    A rule is either a value rule, matching a single captured string by
    regular expression, or a table rule, matching the exact column
    signature of an attached table.
    """

    pattern: str = Field(
        title='Pattern string',
        description='Pattern string the rule is registered under.',
    )

    regex: Pattern[str] | None = Field(
        default=None,
        title='Compiled value pattern',
        description='Compiled pattern of a value rule. Unset for table rules.',
    )

    signature: str | None = Field(
        default=None,
        title='Table signature',
        description='Comma-separated column names of a table rule.',
    )

    handler: TransformHandler = Field(
        title='Handler',
        description='Pure mapping from a raw value to a replacement value.',
    )

    @property
    def is_table(self) -> bool:
        """Whether the rule applies to tables."""
        return self.signature is not None

    @property
    def origin(self) -> str:
        """Dotted name of the handler."""
        return describe_handler(self.handler)

    def match_value(self, value: str) -> Match[str] | None:
        """Match a captured value against a value rule."""
        if self.regex is None:
            return None

        return self.regex.search(value)

    def apply_value(self, found: Match[str]) -> RuntimeValue:
        """Run the handler for a matched value.

        Groups of the rule pattern are passed positionally; a pattern
        without groups passes the whole value.
        """
        if groups := found.groups():
            return self.handler(*groups)

        return self.handler(found.string)

    def apply_table(self, table: 'Table') -> RuntimeValue:
        """Run the handler for a matched table."""
        return self.handler(table)

    def __str__(self) -> str:
        """Return the rule pattern."""
        return self.pattern
