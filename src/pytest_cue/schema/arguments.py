"""Tagged argument values produced by the binder.

Every argument passed to a step handler is either the raw value taken
from the step (a captured string, `None` for a non-participating group,
or the attached table or block) or the output of exactly one transform
rule applied to that raw value. Nothing else converts arguments: there
is no implicit numeric or boolean coercion.
"""

from typing import Literal

from pydantic import Field

from pytest_cue.models import SchemaModel
from pytest_cue.values import RuntimeValue  # noqa: TC001

from .steps import Block, Table  # noqa: TC001


class RawArgument(SchemaModel):
    """Argument passed to the handler unchanged."""

    tag: Literal['raw'] = 'raw'
    value: str | Table | Block | None = None

    @property
    def raw(self) -> str | Table | Block | None:
        """The original value taken from the step."""
        return self.value


class TransformedArgument(SchemaModel):
    """Argument replaced by the output of a transform rule."""

    tag: Literal['transformed'] = 'transformed'

    raw: str | Table | Block = Field(
        title='Raw value',
        description='Original value taken from the step.',
    )

    value: RuntimeValue = Field(
        title='Transformed value',
        description='Output of the transform handler.',
    )

    rule: str = Field(
        title='Transform pattern',
        description='Pattern string of the applied transform rule.',
    )


#: Argument bound to a handler slot.
type Argument = RawArgument | TransformedArgument
