"""Scenario step sequencing.

The sequencer drives the ordered steps of one scenario through the step
pipeline and is the only place implementing skip propagation: once a
step is failed, pending, undefined or ambiguous, every later step of the
scenario is skipped without invoking any handler.
"""

from logging import getLogger
from typing import TYPE_CHECKING

from pytest_cue.schema import ScenarioResult, StepOutcome

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from pytest_cue.schema import StepText

    from .pipeline import StepPipeline

logger = getLogger(__name__)


class RunSequencer:
    """Run the steps of a scenario strictly in order."""

    def __init__(self, pipeline: 'StepPipeline', *, dry_run: bool = False) -> None:
        """Initialize a sequencer.

        Args:
            pipeline: Per-step pipeline.
            dry_run: Whether to match and bind steps without executing them.
        """
        self.pipeline = pipeline
        self.dry_run = dry_run

    def run(self, steps: 'Iterable[StepText]') -> list[StepOutcome]:
        """Run steps in order.

        The run always completes: no step classification aborts it, and
        deciding whether outcomes fail a test run is left to callers.

        Args:
            steps: Ordered steps of a single scenario.

        Returns:
            One outcome per step, in input order.
        """
        outcomes: list[StepOutcome] = []
        terminal: StepOutcome | None = None

        for position, step in enumerate(steps):
            if terminal is not None:
                outcomes.append(self.skip(step))
                continue

            outcome = self.pipeline.process(step, execute=not self.dry_run)
            logger.debug('Step %d "%s" is %s', position + 1, step.text, outcome.kind)

            if outcome.kind.is_terminal:
                logger.debug('Skipping steps after step %d', position + 1)
                terminal = outcome

            outcomes.append(outcome)

        return outcomes

    def run_scenario(self, steps: 'Iterable[StepText]',
                     title: str | None = None) -> ScenarioResult:
        """Run steps and aggregate them into a scenario result."""
        return ScenarioResult(title=title, outcomes=tuple(self.run(steps)))

    def skip(self, step: 'StepText') -> StepOutcome:
        """Mark a step as skipped.

        The step is still resolved so that a single matching definition
        can be reported, but it is neither bound nor executed.
        """
        match = self.pipeline.matcher.resolve(step)
        if not match.is_undefined and not match.is_ambiguous:
            return StepOutcome.skipped(step, definition=match.definition)

        return StepOutcome.skipped(step)
