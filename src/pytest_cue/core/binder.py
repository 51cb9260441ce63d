"""Argument binding and transformation.

The binder turns the captures of a resolved definition and the step's
attached argument into the ordered argument list of a handler. Each
argument goes through the transform registry at most once: a single
matching rule replaces the value, no matching rule keeps the raw value,
and several matching rules are a configuration conflict.
"""

from logging import getLogger
from typing import TYPE_CHECKING

import pytest

from pytest_cue.errors import TransformConflictError, TransformError
from pytest_cue.schema import RawArgument, Table, TransformedArgument

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from pytest_cue.schema import Argument, Attachment, StepDefinition, TransformRule
    from pytest_cue.values import Capture, Captures, RuntimeValue

    from .registry import TransformRegistry

logger = getLogger(__name__)


def unwrap(arguments: 'Iterable[Argument]') -> tuple['RuntimeValue', ...]:
    """Return the final values of bound arguments, in order."""
    return tuple(argument.value for argument in arguments)


class ArgumentBinder:
    """Bind captured values and attachments through transform rules."""

    def __init__(self, registry: 'TransformRegistry') -> None:
        """Initialize a binder.

        Args:
            registry: Registry of transform rules.
        """
        self.registry = registry

    def bind(self, definition: 'StepDefinition', captures: 'Captures',
             argument: 'Attachment | None' = None) -> tuple['Argument', ...]:
        """Build the ordered argument list of a handler.

        Captures come first, in left-to-right group order, followed by
        the attached table or block, if any.

        Args:
            definition: Resolved step definition.
            captures: Captured values of the definition pattern.
            argument: Optional attached table or block.

        Returns:
            Tagged arguments in handler order.

        Raises:
            TransformConflictError: If several value rules match one capture.
            TransformError: If a transform handler fails.
        """
        arguments = [self.bind_value(capture) for capture in captures]
        if argument is not None:
            arguments.append(self.bind_attachment(argument))

        logger.debug(
            'Bound %d arguments for %s (%d transformed)',
            len(arguments),
            definition,
            sum(isinstance(item, TransformedArgument) for item in arguments),
        )

        return tuple(arguments)

    def bind_value(self, value: 'Capture') -> 'Argument':
        """Bind a single captured value.

        Non-participating groups (`None`) bypass transforms.

        Raises:
            TransformConflictError: If several value rules match the value.
            TransformError: If the transform handler fails.
        """
        if value is None:
            return RawArgument(value=None)

        found = self.registry.find_value(value)
        if not found:
            return RawArgument(value=value)

        if len(found) > 1:
            raise TransformConflictError(value, (rule for rule, _ in found))

        rule, match = found[0]

        return TransformedArgument(
            raw=value,
            value=self._apply(rule, rule.apply_value, match),
            rule=rule.pattern,
        )

    def bind_attachment(self, argument: 'Attachment') -> 'Argument':
        """Bind an attached table or block.

        Tables whose column signature matches a table rule are replaced
        by the rule output; anything else is passed unchanged.

        Raises:
            TransformError: If the transform handler fails.
        """
        if isinstance(argument, Table) and (rule := self.registry.find_table(argument)):
            return TransformedArgument(
                raw=argument,
                value=self._apply(rule, rule.apply_table, argument),
                rule=rule.pattern,
            )

        return RawArgument(value=argument)

    @staticmethod
    def _apply[T](rule: 'TransformRule', apply: 'Callable[[T], RuntimeValue]',
                  value: T) -> 'RuntimeValue':
        """Run a transform handler, wrapping its failures."""
        try:
            return apply(value)

        except (Exception, pytest.fail.Exception, pytest.skip.Exception) as base:
            raise TransformError(
                f'Transform {rule.pattern!r} failed: {base!r}',
                cause=base,
            ) from base
