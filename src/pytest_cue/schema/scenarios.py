"""YAML scenario document model.

A scenario file holds one or more YAML documents; each document is a
scenario with a title and an ordered list of steps. A step is either a
plain line (`Given I have 3 apples`) or a mapping carrying the line
together with an attached table or block of text:

    scenario: Buying apples
    steps:
      - Given I have 3 apples
      - step: When I buy
        table:
          - [name, amount]
          - [apple, 2]
      - step: Then the receipt says
        text: |
          2 apples
"""

from typing import Any, Self

from pydantic import Field, field_validator, model_validator

from pytest_cue.models import SchemaModel
from pytest_cue.names import TagString

from .steps import Block, StepText, Table


class StepEntry(SchemaModel):
    """Scenario step with an optional attached argument."""

    step: str = Field(
        min_length=1,
        title='Step line',
        description='Step line with a leading keyword.',
    )

    table: Table | None = Field(
        default=None,
        title='Table argument',
        description='Rows of a table attached to the step. First row holds column names.',
    )

    text: str | None = Field(
        default=None,
        title='Block argument',
        description='Multiline text attached to the step.',
    )

    @field_validator('table', mode='before')
    @classmethod
    def wrap_rows(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept a plain list of rows as a table."""
        if isinstance(value, list):
            return {'rows': value}

        return value

    @model_validator(mode='after')
    def check_argument(self) -> Self:
        """Ensure at most one argument is attached."""
        if self.table is not None and self.text is not None:
            raise ValueError('A step can carry either a table or a text block, not both')

        return self

    def to_step(self) -> StepText:
        """Convert the entry to a step text."""
        argument: Table | Block | None = self.table
        if self.text is not None:
            argument = Block(text=self.text)

        return StepText.from_line(self.step, argument)


class ScenarioDocument(SchemaModel):
    """Single scenario of a YAML scenario file."""

    scenario: str = Field(
        min_length=1,
        title='Scenario title',
        description='Human-readable title, used as the pytest item name.',
    )

    description: str | None = Field(
        default=None,
        title='Description',
        description='Detailed human-readable description of the scenario.',
    )

    tags: list[TagString] = Field(
        default_factory=list,
        title='Tags',
        description='Tags applied to the scenario as pytest markers.',
    )

    steps: list[StepEntry] = Field(
        min_length=1,
        title='Steps',
        description='Ordered scenario steps. Plain lines are steps without arguments.',
    )

    @field_validator('steps', mode='before')
    @classmethod
    def wrap_lines(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept plain step lines as steps without arguments."""
        if not isinstance(value, list):
            return value

        return [
            {'step': entry} if isinstance(entry, str) else entry
            for entry in value
        ]

    def to_steps(self) -> tuple[StepText, ...]:
        """Convert all entries to step texts, in order."""
        return tuple(entry.to_step() for entry in self.steps)
