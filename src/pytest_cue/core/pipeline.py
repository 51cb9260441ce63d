"""Per-step resolution pipeline.

A step goes through the matcher, the binder and the executor, and any
chained step requests its handler returns go through the same pipeline
again one level deeper.
"""

from logging import getLogger
from typing import TYPE_CHECKING

from pytest_cue.errors import ConfigurationError, StepFailure
from pytest_cue.schema import StepOutcome

from .binder import unwrap
from .chain import ChainResolver

if TYPE_CHECKING:
    from pytest_cue.schema import StepText

    from .binder import ArgumentBinder
    from .executor import Executor
    from .matcher import Matcher

logger = getLogger(__name__)


class StepPipeline:
    """Matcher, binder, executor and chain resolver of a single step."""

    def __init__(self, matcher: 'Matcher', binder: 'ArgumentBinder',
                 executor: 'Executor', *, max_chain_depth: int) -> None:
        """Initialize a step pipeline.

        Args:
            matcher: Step text matcher.
            binder: Argument binder.
            executor: Handler executor.
            max_chain_depth: Maximum nesting of chained steps.
        """
        self.matcher = matcher
        self.binder = binder
        self.executor = executor
        self.chain = ChainResolver(self.process, max_chain_depth)

    def process(self, step: 'StepText', depth: int = 0, *,
                execute: bool = True) -> StepOutcome:
        """Resolve, bind and execute a single step.

        Args:
            step: Step to process.
            depth: Chain depth of the step; zero for scenario steps.
            execute: Whether to invoke the handler. A matched step that
                is not executed is reported as skipped.

        Returns:
            Final outcome of the step, chained steps included.
        """
        match = self.matcher.resolve(step)
        if (outcome := match.outcome()) is not None:
            return outcome

        definition = match.definition

        try:
            arguments = self.binder.bind(definition, match.captures, step.argument)

        except (ConfigurationError, StepFailure) as error:
            logger.debug('Binding of "%s" failed: %s', step.text, error.message)
            return StepOutcome.failed(step, error, definition=definition)

        if not execute:
            return StepOutcome.skipped(
                step,
                definition=definition,
                arguments=unwrap(arguments),
            )

        invocation = self.executor.execute(step, definition, arguments)
        if invocation.requests:
            return self.chain.resolve(invocation.outcome, invocation.requests, depth)

        return invocation.outcome
