"""Declarative step and transform definitions.

Declarations are the registration input collected by step libraries.
They carry no behavior of their own: the engine feeds them into its
registries during the registration pass.
"""

from pydantic import Field

from pytest_cue.models import SchemaModel
from pytest_cue.names import DEFAULT_KEYWORD, Keyword, PatternString
from pytest_cue.values import StepHandler, TransformHandler  # noqa: TC001


class StepDeclaration(SchemaModel):
    """Declarative step definition."""

    keyword: Keyword = Field(
        default=DEFAULT_KEYWORD,
        title='Keyword',
        description='Keyword category the step is declared under. Advisory only.',
    )

    pattern: PatternString

    handler: StepHandler = Field(
        title='Step handler',
        description=(
            'Callable implementing the step.\n'
            'Receives captured groups positionally, followed by the attached '
            'table or block of text when the step carries one.'
        ),
    )

    arity: int | None = Field(
        default=None,
        ge=0,
        title='Arity',
        description='Expected number of captured arguments. Derived from the pattern when unset.',
    )


class TransformDeclaration(SchemaModel):
    """Declarative transform rule."""

    pattern: PatternString

    handler: TransformHandler = Field(
        title='Transform handler',
        description=(
            'Pure mapping from a raw value to a replacement value.\n'
            'Value transforms receive the groups of their pattern, or the whole '
            'value when the pattern has none; table transforms receive the table.'
        ),
    )
