"""Step text resolution.

The matcher aggregates the pattern registry lookup into a match result:
no candidates is an undefined step, more than one candidate is an
ambiguous step, and exactly one candidate proceeds to binding. The
matcher never imposes anchoring of its own.
"""

from logging import getLogger
from typing import TYPE_CHECKING

from pytest_cue.models import SchemaModel
from pytest_cue.schema import StepDefinition, StepOutcome, StepText
from pytest_cue.values import Captures  # noqa: TC001

if TYPE_CHECKING:
    from .registry import PatternRegistry

logger = getLogger(__name__)


class MatchResult(SchemaModel):
    """All definitions matching a step text, with their captures.

    Match results are transient: they are recomputed for every step
    and never stored.
    """

    step: StepText
    candidates: tuple[tuple[StepDefinition, Captures], ...] = ()

    @property
    def is_undefined(self) -> bool:
        """Whether no definition matches."""
        return not self.candidates

    @property
    def is_ambiguous(self) -> bool:
        """Whether several definitions match."""
        return len(self.candidates) > 1

    @property
    def definition(self) -> StepDefinition:
        """The single resolved definition.

        Raises:
            LookupError: If the step is undefined or ambiguous.
        """
        return self._single()[0]

    @property
    def captures(self) -> Captures:
        """Captures of the single resolved definition.

        Raises:
            LookupError: If the step is undefined or ambiguous.
        """
        return self._single()[1]

    def outcome(self) -> StepOutcome | None:
        """Classify an unresolvable step.

        Returns:
            An undefined or ambiguous outcome, or `None` when exactly
            one definition matches.
        """
        if self.is_undefined:
            return StepOutcome.undefined(self.step)

        if self.is_ambiguous:
            return StepOutcome.ambiguous(
                self.step,
                (definition for definition, _ in self.candidates),
            )

        return None

    def _single(self) -> tuple[StepDefinition, Captures]:
        if len(self.candidates) != 1:
            raise LookupError(f'Step "{self.step.text}" matches {len(self.candidates)} definitions')

        return self.candidates[0]


class Matcher:
    """Resolve step texts against a pattern registry."""

    def __init__(self, registry: 'PatternRegistry') -> None:
        """Initialize a matcher.

        Args:
            registry: Registry of step definitions.
        """
        self.registry = registry

    def resolve(self, step: StepText) -> MatchResult:
        """Find all definitions matching a step.

        Matching is case-sensitive and uses each pattern exactly as
        written. Only the step text participates; the keyword does not.

        Args:
            step: Step to resolve.

        Returns:
            Match result with zero, one or several candidates.
        """
        result = MatchResult(
            step=step,
            candidates=tuple(self.registry.lookup(step.text)),
        )

        if result.is_undefined:
            logger.debug('Step "%s" is undefined', step.text)
        elif result.is_ambiguous:
            logger.debug('Step "%s" is ambiguous: %d candidates', step.text, len(result.candidates))

        return result
