"""Step text and attached argument models.

A step text is an immutable scenario line produced by a scenario parser:
a keyword, the text matched against step definitions, and an optional
attached multiline argument (a table of strings or a block of text).

Chained step requests share the same shape and are converted back into
step texts before they re-enter the matching pipeline.
"""

from typing import Any, Self

from pydantic import Field, field_validator, model_validator

from pytest_cue.models import SchemaModel
from pytest_cue.names import DEFAULT_KEYWORD, SIGNATURE_SEPARATOR, Keyword, split_line


class Table(SchemaModel):
    """Table argument attached to a step.

    The first row is the header row. Cells are always text; scalar
    cells coming from a loader are converted to strings.
    """

    rows: tuple[tuple[str, ...], ...] = Field(
        min_length=1,
        title='Table rows',
        description='Ordered table rows. The first row holds column names.',
    )

    @field_validator('rows', mode='before')
    @classmethod
    def stringify_cells(cls, value: Any) -> Any:  # noqa: ANN401
        """Convert scalar cells to strings."""
        if not isinstance(value, (list, tuple)):
            return value

        return tuple(
            tuple(
                cell if isinstance(cell, str) else str(cell)
                for cell in row
            ) if isinstance(row, (list, tuple)) else row
            for row in value
        )

    @model_validator(mode='after')
    def check_width(self) -> Self:
        """Ensure all rows have the same number of cells."""
        width = len(self.rows[0])
        for position, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f'Row {position + 1} has {len(row)} cells, expected {width}',
                )

        return self

    @property
    def headers(self) -> tuple[str, ...]:
        """Column names of the table."""
        return self.rows[0]

    @property
    def signature(self) -> str:
        """Comma-separated column names, as used by table transforms."""
        return SIGNATURE_SEPARATOR.join(self.headers)

    def raw(self) -> list[list[str]]:
        """Return all rows, header row included."""
        return [list(row) for row in self.rows]

    def hashes(self) -> list[dict[str, str]]:
        """Return data rows as mappings keyed by column names."""
        return [
            dict(zip(self.headers, row, strict=True))
            for row in self.rows[1:]
        ]

    def rows_hash(self) -> dict[str, str]:
        """Return a two-column table as a mapping of first to second column.

        All rows, the first one included, become entries.

        Raises:
            ValueError: If the table does not have exactly two columns.
        """
        if len(self.headers) != 2:  # noqa: PLR2004
            raise ValueError('Rows hash requires a table with exactly two columns')

        return dict(self.rows)

    @classmethod
    def from_rows(cls, rows: Any) -> Self:  # noqa: ANN401
        """Build a table from a sequence of rows."""
        return cls(rows=rows)


class Block(SchemaModel):
    """Multiline text argument attached to a step."""

    text: str = Field(
        title='Block text',
        description='Verbatim multiline text.',
    )

    @property
    def lines(self) -> list[str]:
        """Lines of the block."""
        return self.text.splitlines()

    def __str__(self) -> str:
        """Return the block text."""
        return self.text


#: Optional argument attached to a step.
type Attachment = Table | Block


class StepText(SchemaModel):
    """Immutable scenario step consumed by the matcher and binder."""

    keyword: Keyword = Field(
        default=DEFAULT_KEYWORD,
        title='Keyword',
        description='Keyword category. Informational only, never matched.',
    )

    text: str = Field(
        title='Step text',
        description='Text matched against registered step patterns.',
    )

    argument: Table | Block | None = Field(
        default=None,
        title='Attached argument',
        description='Optional table or block of text attached to the step.',
    )

    @classmethod
    def from_line(cls, line: str, argument: Attachment | None = None) -> Self:
        """Build a step from a scenario line with a leading keyword.

        Args:
            line: Scenario line, for example `Given I have 3 apples`.
            argument: Optional attached table or block.

        Returns:
            A step text with the keyword split off.
        """
        keyword, text = split_line(line)

        return cls(keyword=keyword, text=text, argument=argument)  # type: ignore[arg-type]

    def __str__(self) -> str:
        """Return the step as a scenario line."""
        return f'{self.keyword} {self.text}'


class ChainedStep(SchemaModel):
    """Request to execute another step, returned by a step handler.

    A handler may return a single request or an ordered sequence of
    them; each is resolved through the whole matching pipeline before
    the requesting step is finalized.
    """

    keyword: Keyword = DEFAULT_KEYWORD
    text: str
    argument: Table | Block | None = None

    def as_step(self) -> StepText:
        """Convert the request to a step text."""
        return StepText(keyword=self.keyword, text=self.text, argument=self.argument)

    @classmethod
    def given(cls, text: str, argument: Attachment | None = None) -> Self:
        """Request a `Given` step."""
        return cls(keyword='Given', text=text, argument=argument)

    @classmethod
    def when(cls, text: str, argument: Attachment | None = None) -> Self:
        """Request a `When` step."""
        return cls(keyword='When', text=text, argument=argument)

    @classmethod
    def then(cls, text: str, argument: Attachment | None = None) -> Self:
        """Request a `Then` step."""
        return cls(keyword='Then', text=text, argument=argument)
