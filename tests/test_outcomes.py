"""Tests for outcome classification and aggregation."""

import pytest

from pytest_cue.errors import PendingStepError, StepFailure
from pytest_cue.schema import OutcomeKind, ScenarioResult, StepOutcome, StepText, exit_code

STEP = StepText(text='a step')


def make_result(*kinds: OutcomeKind) -> ScenarioResult:
    outcomes = []
    for kind in kinds:
        match kind:
            case OutcomeKind.FAILED:
                outcomes.append(StepOutcome.failed(STEP, StepFailure('broken')))
            case OutcomeKind.PENDING:
                outcomes.append(StepOutcome.pending(STEP, PendingStepError()))
            case OutcomeKind.UNDEFINED:
                outcomes.append(StepOutcome.undefined(STEP))
            case OutcomeKind.AMBIGUOUS:
                outcomes.append(StepOutcome.ambiguous(STEP, ()))
            case _:
                outcomes.append(StepOutcome(kind=kind, step=STEP))

    return ScenarioResult(outcomes=tuple(outcomes))


def test_severity() -> None:
    """Order classifications from successful to failed."""
    assert sorted(OutcomeKind, key=lambda kind: kind.severity) == [
        OutcomeKind.SUCCESSFUL,
        OutcomeKind.SKIPPED,
        OutcomeKind.PENDING,
        OutcomeKind.UNDEFINED,
        OutcomeKind.AMBIGUOUS,
        OutcomeKind.FAILED,
    ]


@pytest.mark.parametrize('kinds, expect_status', (
    pytest.param((), OutcomeKind.SUCCESSFUL, id='empty'),
    pytest.param((OutcomeKind.SUCCESSFUL, OutcomeKind.SKIPPED), OutcomeKind.SKIPPED, id='skipped'),
    pytest.param((OutcomeKind.PENDING, OutcomeKind.SKIPPED), OutcomeKind.PENDING, id='pending'),
    pytest.param((OutcomeKind.SUCCESSFUL, OutcomeKind.FAILED, OutcomeKind.SKIPPED), OutcomeKind.FAILED, id='failed'),
))
def test_status(kinds: tuple[OutcomeKind, ...], expect_status: OutcomeKind) -> None:
    """Aggregate the most severe classification."""
    assert make_result(*kinds).status is expect_status


@pytest.mark.parametrize('kind, expect_relaxed, expect_strict', (
    pytest.param(OutcomeKind.SUCCESSFUL, 0, 0, id='successful'),
    pytest.param(OutcomeKind.SKIPPED, 0, 0, id='skipped'),
    pytest.param(OutcomeKind.PENDING, 0, 1, id='pending'),
    pytest.param(OutcomeKind.UNDEFINED, 0, 1, id='undefined'),
    pytest.param(OutcomeKind.AMBIGUOUS, 0, 1, id='ambiguous'),
    pytest.param(OutcomeKind.FAILED, 1, 1, id='failed'),
))
def test_exit_code(kind: OutcomeKind, expect_relaxed: int, expect_strict: int) -> None:
    """Map scenario results to process exit codes."""
    results = [make_result(OutcomeKind.SUCCESSFUL), make_result(kind)]

    assert exit_code(results) == expect_relaxed
    assert exit_code(results, strict=True) == expect_strict


def test_diagnostic() -> None:
    """Expose the diagnostic payload of each classification."""
    assert make_result(OutcomeKind.SUCCESSFUL).outcomes[0].diagnostic is None
    assert make_result(OutcomeKind.UNDEFINED).outcomes[0].diagnostic == 'a step'
    assert make_result(OutcomeKind.AMBIGUOUS).outcomes[0].diagnostic == ()

    failed = make_result(OutcomeKind.FAILED).outcomes[0]

    assert isinstance(failed.diagnostic, StepFailure)
    assert failed.message == 'broken'

    pending = make_result(OutcomeKind.PENDING).outcomes[0]

    assert pending.message == 'TODO: write pending definition'


def test_escalate() -> None:
    """Replace a classification with a chained one."""
    outer = StepOutcome(kind=OutcomeKind.SUCCESSFUL, step=STEP, duration=1.0)
    nested = StepOutcome.undefined(StepText(text='another step'))

    escalated = outer.escalate(nested, duration=2.0)

    assert escalated.kind is OutcomeKind.UNDEFINED
    assert escalated.nested is nested
    assert escalated.error is nested.error
    assert escalated.duration == 2.0
    assert escalated.diagnostic is nested.error
    assert not escalated.needs_snippet
    assert outer.kind is OutcomeKind.SUCCESSFUL
