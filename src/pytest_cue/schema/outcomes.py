"""Execution outcomes and handler results.

This module defines the classification vocabulary of the engine:
- explicit handler results (`Success`, `Pending`, `Failure`);
- per-step outcomes with their diagnostic payload;
- per-scenario aggregation and the process exit-code contract.

Presentation of outcomes (colors, progress output, report formats)
belongs to reporting collaborators and is not defined here.
"""

from collections.abc import Iterable
from enum import StrEnum
from typing import Any, Self

from pydantic import Field

from pytest_cue.errors import AmbiguousMatchError, PendingStepError, UndefinedStepError
from pytest_cue.models import SchemaModel

from .definitions import StepDefinition
from .steps import StepText


class OutcomeKind(StrEnum):
    """Classification of a single step."""

    SUCCESSFUL = 'successful'
    SKIPPED = 'skipped'
    PENDING = 'pending'
    UNDEFINED = 'undefined'
    AMBIGUOUS = 'ambiguous'
    FAILED = 'failed'

    @property
    def severity(self) -> int:
        """Rank used to aggregate a scenario status."""
        return tuple(OutcomeKind).index(self)

    @property
    def is_terminal(self) -> bool:
        """Whether this classification skips the rest of a scenario."""
        return self not in {OutcomeKind.SUCCESSFUL, OutcomeKind.SKIPPED}

    def is_failure(self, strict: bool = False) -> bool:
        """Whether this classification fails a run.

        Args:
            strict: Treat undefined, pending and ambiguous steps as failures.
        """
        if self is OutcomeKind.FAILED:
            return True

        return strict and self in {
            OutcomeKind.PENDING,
            OutcomeKind.UNDEFINED,
            OutcomeKind.AMBIGUOUS,
        }


class Success(SchemaModel):
    """Explicit successful handler result."""


class Pending(SchemaModel):
    """Explicit result of a handler that is not implemented yet."""

    reason: str | None = Field(
        default=None,
        title='Reminder',
        description='Optional reminder of what is left to implement.',
    )


class Failure(SchemaModel):
    """Explicit failed handler result."""

    message: str = Field(
        title='Failure message',
        description='Human-readable failure description.',
    )

    error: Exception | None = Field(
        default=None,
        title='Original error',
        description='Exception that caused the failure, if any.',
    )


#: Explicit handler result variants.
type HandlerResult = Success | Pending | Failure


class StepOutcome(SchemaModel):
    """Classification of a single step with its diagnostic payload."""

    kind: OutcomeKind
    step: StepText

    definition: StepDefinition | None = Field(
        default=None,
        title='Resolved definition',
        description='Definition the step resolved to, if exactly one matched.',
    )

    arguments: tuple[Any, ...] = Field(
        default=(),
        title='Handler arguments',
        description='Final argument values passed to the handler.',
    )

    error: Exception | None = Field(
        default=None,
        title='Diagnostic error',
        description='Error describing any non-successful classification.',
    )

    candidates: tuple[StepDefinition, ...] = Field(
        default=(),
        title='Conflicting definitions',
        description='All matching definitions of an ambiguous step.',
    )

    chain: tuple['StepOutcome', ...] = Field(
        default=(),
        title='Chained outcomes',
        description='Outcomes of chained steps resolved for this step.',
    )

    nested: 'StepOutcome | None' = Field(
        default=None,
        title='Escalated outcome',
        description='Chained outcome whose classification replaced this one.',
    )

    duration: float = Field(
        default=0.0,
        ge=0,
        title='Duration',
        description='Wall-clock handler time in seconds, chains included.',
    )

    @property
    def diagnostic(self) -> Any:  # noqa: ANN401
        """Diagnostic payload of the outcome.

        Returns:
            The verbatim step text for an undefined step, the conflicting
            definitions for an ambiguous one, the error for any other
            non-successful one and `None` otherwise.
        """
        if self.kind is OutcomeKind.UNDEFINED and self.nested is None:
            return self.step.text

        if self.kind is OutcomeKind.AMBIGUOUS and self.nested is None:
            return self.candidates

        return self.error

    @property
    def message(self) -> str | None:
        """Human-readable diagnostic message, if any."""
        if self.error is None:
            return None

        return getattr(self.error, 'message', None) or f'{self.error!r}'

    @property
    def needs_snippet(self) -> bool:
        """Whether a definition snippet should be suggested for this step.

        Escalated undefined steps resolved from a chain never need one.
        """
        return self.kind is OutcomeKind.UNDEFINED and self.nested is None

    @classmethod
    def successful(cls, step: StepText, definition: StepDefinition, *,
                   arguments: tuple[Any, ...] = (),
                   duration: float = 0.0) -> Self:
        """Build a successful outcome."""
        return cls(
            kind=OutcomeKind.SUCCESSFUL,
            step=step,
            definition=definition,
            arguments=arguments,
            duration=duration,
        )

    @classmethod
    def failed(cls, step: StepText, error: Exception, *,
               definition: StepDefinition | None = None,
               arguments: tuple[Any, ...] = (),
               duration: float = 0.0) -> Self:
        """Build a failed outcome."""
        return cls(
            kind=OutcomeKind.FAILED,
            step=step,
            definition=definition,
            arguments=arguments,
            error=error,
            duration=duration,
        )

    @classmethod
    def pending(cls, step: StepText, error: PendingStepError, *,
                definition: StepDefinition | None = None,
                arguments: tuple[Any, ...] = (),
                duration: float = 0.0) -> Self:
        """Build a pending outcome."""
        return cls(
            kind=OutcomeKind.PENDING,
            step=step,
            definition=definition,
            arguments=arguments,
            error=error,
            duration=duration,
        )

    @classmethod
    def undefined(cls, step: StepText) -> Self:
        """Build an undefined outcome carrying the verbatim step text."""
        return cls(
            kind=OutcomeKind.UNDEFINED,
            step=step,
            error=UndefinedStepError(step.text),
        )

    @classmethod
    def ambiguous(cls, step: StepText, candidates: Iterable[StepDefinition]) -> Self:
        """Build an ambiguous outcome listing all conflicting definitions."""
        candidates = tuple(candidates)

        return cls(
            kind=OutcomeKind.AMBIGUOUS,
            step=step,
            error=AmbiguousMatchError(step.text, candidates),
            candidates=candidates,
        )

    @classmethod
    def skipped(cls, step: StepText, *,
                definition: StepDefinition | None = None,
                arguments: tuple[Any, ...] = ()) -> Self:
        """Build a skipped outcome."""
        return cls(
            kind=OutcomeKind.SKIPPED,
            step=step,
            definition=definition,
            arguments=arguments,
        )

    def escalate(self, nested: 'StepOutcome', *, duration: float | None = None) -> Self:
        """Replace this classification with a chained step classification.

        Args:
            nested: Non-successful outcome of a chained step.
            duration: Optional total duration of this step.

        Returns:
            A copy of this outcome classified as the chained one.
        """
        return self.model_copy(update={
            'kind': nested.kind,
            'error': nested.error,
            'nested': nested,
            'duration': self.duration if duration is None else duration,
        })


class ScenarioResult(SchemaModel):
    """Ordered outcomes of a single scenario."""

    title: str | None = None
    outcomes: tuple[StepOutcome, ...] = ()

    @property
    def status(self) -> OutcomeKind:
        """Aggregate status: the most severe step classification."""
        if not self.outcomes:
            return OutcomeKind.SUCCESSFUL

        return max(
            (outcome.kind for outcome in self.outcomes),
            key=lambda kind: kind.severity,
        )

    @property
    def terminal(self) -> StepOutcome | None:
        """First outcome that stopped the scenario, if any."""
        for outcome in self.outcomes:
            if outcome.kind.is_terminal:
                return outcome

        return None

    @property
    def undefined(self) -> tuple[StepOutcome, ...]:
        """Outcomes that need a definition snippet."""
        return tuple(
            outcome
            for outcome in self.outcomes
            if outcome.needs_snippet
        )

    def passed(self, strict: bool = False) -> bool:
        """Whether the scenario passes the run.

        Args:
            strict: Treat undefined, pending and ambiguous steps as failures.
        """
        return not self.status.is_failure(strict)


def exit_code(results: Iterable[ScenarioResult], strict: bool = False) -> int:
    """Map scenario results to a process exit code.

    Args:
        results: Results of all scenarios of a run.
        strict: Treat undefined, pending and ambiguous steps as failures.

    Returns:
        `1` if any scenario fails the run, otherwise `0`.
    """
    if any(not result.passed(strict) for result in results):
        return 1

    return 0
