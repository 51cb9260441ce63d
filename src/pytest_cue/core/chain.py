"""Chained step resolution.

A handler may return chained step requests instead of a plain result.
Each request is resolved in declared order through the whole matching
pipeline before the requesting step is finalized. The first request
that does not succeed escalates its classification to the requesting
step and the remaining requests are not executed.
"""

from logging import getLogger
from typing import TYPE_CHECKING

from pytest_cue.errors import ChainDepthExceededError
from pytest_cue.schema import OutcomeKind, StepOutcome

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_cue.schema import ChainedStep, StepText

logger = getLogger(__name__)

#: Resolves a step at a given chain depth.
type StepProcessor = Callable[[StepText, int], StepOutcome]


class ChainResolver:
    """Resolve chained step requests with a recursion ceiling."""

    def __init__(self, process: 'StepProcessor', max_depth: int) -> None:
        """Initialize a chain resolver.

        Args:
            process: Callable resolving a step at a given depth.
            max_depth: Maximum nesting of chained steps.
        """
        self.process = process
        self.max_depth = max_depth

    def resolve(self, outcome: StepOutcome, requests: tuple['ChainedStep', ...],
                depth: int = 0) -> StepOutcome:
        """Resolve the requests of a successfully invoked step.

        Args:
            outcome: Successful outcome of the requesting step.
            requests: Chained step requests in declared order.
            depth: Chain depth of the requesting step.

        Returns:
            The requesting outcome with its chain attached, or escalated
            to the classification of the first non-successful request.
        """
        if depth >= self.max_depth:
            logger.debug('Chain of "%s" exceeds depth %d', outcome.step.text, self.max_depth)
            return StepOutcome.failed(
                outcome.step,
                ChainDepthExceededError(self.max_depth),
                definition=outcome.definition,
                arguments=outcome.arguments,
                duration=outcome.duration,
            )

        duration = outcome.duration
        chain: list[StepOutcome] = []

        for request in requests:
            nested = self.process(request.as_step(), depth + 1)
            duration += nested.duration

            if nested.kind is not OutcomeKind.SUCCESSFUL:
                logger.debug(
                    'Chained step "%s" of "%s" is %s',
                    nested.step.text,
                    outcome.step.text,
                    nested.kind,
                )
                return outcome.escalate(nested, duration=duration)

            chain.append(nested)

        return outcome.model_copy(update={
            'chain': tuple(chain),
            'duration': duration,
        })
