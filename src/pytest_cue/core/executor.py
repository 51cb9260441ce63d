"""Handler invocation and outcome classification.

The executor invokes a resolved handler with its bound arguments and
classifies what it observes:
- a normal return is successful, whatever the returned value, unless
  the value is one or more chained step requests;
- a `Pending` result, a raised `PendingStepError` or a `pytest.skip()`
  call is pending;
- a `Failure` result, a `pytest.fail()` call or any other raised
  exception is failed.

Handlers are opaque synchronous calls. An optional timeout runs the
handler on a worker thread and fails the step when it expires.
"""

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from logging import getLogger
from time import perf_counter
from typing import TYPE_CHECKING

import pytest

from pytest_cue.errors import PendingStepError, StepFailure, StepTimeoutError
from pytest_cue.models import SchemaModel
from pytest_cue.schema import ChainedStep, Failure, Pending, StepOutcome

from .binder import unwrap

if TYPE_CHECKING:
    from pytest_cue.schema import Argument, StepDefinition, StepText
    from pytest_cue.values import RuntimeValue, StepHandler

logger = getLogger(__name__)


class Invocation(SchemaModel):
    """Classified handler invocation.

    Chained step requests are kept apart from the outcome: the outcome
    is final only once every request has been resolved.
    """

    outcome: StepOutcome
    requests: tuple[ChainedStep, ...] = ()


def as_requests(value: 'RuntimeValue') -> tuple[ChainedStep, ...]:
    """Recognize chained step requests in a handler return value.

    Args:
        value: Value returned by a handler.

    Returns:
        The requests in declared order, or an empty tuple when the
        value holds no request.

    Raises:
        StepFailure: If a sequence mixes requests with other values.
    """
    if isinstance(value, ChainedStep):
        return (value,)

    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        return ()

    requests = tuple(item for item in value if isinstance(item, ChainedStep))
    if requests and len(requests) != len(value):
        raise StepFailure(
            f'Malformed chain: {len(value) - len(requests)} of {len(value)} '
            'returned items are not chained step requests',
        )

    return requests


class Executor:
    """Invoke step handlers and classify their outcome."""

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize an executor.

        Args:
            timeout: Optional number of seconds a handler may run.
        """
        self.timeout = timeout

    def execute(self, step: 'StepText', definition: 'StepDefinition',
                arguments: tuple['Argument', ...]) -> Invocation:
        """Invoke a handler and classify the result.

        Args:
            step: Step being executed.
            definition: Resolved definition.
            arguments: Bound arguments in handler order.

        Returns:
            Classified invocation with any chained step requests.
        """
        values = unwrap(arguments)
        started = perf_counter()

        try:
            result = self.invoke(definition.handler, values)

        except PendingStepError as error:
            outcome = StepOutcome.pending(
                step,
                error,
                definition=definition,
                arguments=values,
                duration=perf_counter() - started,
            )

        except pytest.skip.Exception as error:
            outcome = StepOutcome.pending(
                step,
                PendingStepError(error.msg or None),
                definition=definition,
                arguments=values,
                duration=perf_counter() - started,
            )

        except StepFailure as error:
            outcome = StepOutcome.failed(
                step,
                error,
                definition=definition,
                arguments=values,
                duration=perf_counter() - started,
            )

        except pytest.fail.Exception as error:
            outcome = StepOutcome.failed(
                step,
                StepFailure(error.msg or 'Step failed', cause=error),
                definition=definition,
                arguments=values,
                duration=perf_counter() - started,
            )

        except Exception as error:
            outcome = StepOutcome.failed(
                step,
                StepFailure.from_exception(error),
                definition=definition,
                arguments=values,
                duration=perf_counter() - started,
            )

        else:
            return self.classify(
                step,
                definition,
                values,
                result,
                duration=perf_counter() - started,
            )

        return Invocation(outcome=outcome)

    def classify(self, step: 'StepText', definition: 'StepDefinition',
                 values: tuple['RuntimeValue', ...], result: 'RuntimeValue', *,
                 duration: float = 0.0) -> Invocation:
        """Classify a normal handler return value.

        Args:
            step: Step being executed.
            definition: Resolved definition.
            values: Argument values passed to the handler.
            result: Value returned by the handler.
            duration: Handler time in seconds.

        Returns:
            Classified invocation.
        """
        if isinstance(result, Pending):
            outcome = StepOutcome.pending(
                step,
                PendingStepError(result.reason),
                definition=definition,
                arguments=values,
                duration=duration,
            )
            return Invocation(outcome=outcome)

        if isinstance(result, Failure):
            outcome = StepOutcome.failed(
                step,
                StepFailure(result.message, cause=result.error),
                definition=definition,
                arguments=values,
                duration=duration,
            )
            return Invocation(outcome=outcome)

        try:
            requests = as_requests(result)

        except StepFailure as error:
            outcome = StepOutcome.failed(
                step,
                error,
                definition=definition,
                arguments=values,
                duration=duration,
            )
            return Invocation(outcome=outcome)

        outcome = StepOutcome.successful(
            step,
            definition,
            arguments=values,
            duration=duration,
        )

        return Invocation(outcome=outcome, requests=requests)

    def invoke(self, handler: 'StepHandler',
               values: tuple['RuntimeValue', ...]) -> 'RuntimeValue':
        """Call a handler, applying the timeout if configured.

        Raises:
            StepTimeoutError: If the handler does not complete in time.
            Exception: Anything raised by the handler itself.
        """
        if self.timeout is None:
            return handler(*values)

        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix='cue-step')
        future = pool.submit(handler, *values)

        try:
            return future.result(timeout=self.timeout)

        except TimeoutError as base:
            if future.done() and isinstance(future.exception(), TimeoutError):
                raise
            logger.debug('Handler %r exceeded %s seconds', handler, self.timeout)
            raise StepTimeoutError(f'Step timed out after {self.timeout} seconds') from base

        finally:
            pool.shutdown(wait=False, cancel_futures=True)
