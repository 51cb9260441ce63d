"""Declarative step library definition.

This module defines the top-level declarative container used to describe
step definitions and transforms provided by a step library.

A library is collected explicitly, by decorating plain functions or by
passing declarations, and contains no execution logic. The engine loads
libraries in a registration pass before any scenario runs, either from
the `cue_steps` entry point group or from `module:attribute` references.

Example:
    from pytest_cue.extensions import ChainedStep, StepLibrary

    steps = StepLibrary(name='shop')

    @steps.transform(r'^\\d+$')
    def to_int(value):
        return int(value)

    @steps.given(r'^I have (\\d+) apples$')
    def have_apples(count):
        ...

    @steps.when(r'^I buy an apple$')
    def buy_apple():
        return ChainedStep.given('I have 1 apples')
"""

from typing import TYPE_CHECKING

from pydantic import Field

from pytest_cue.errors import PendingStepError
from pytest_cue.models import SchemaModel
from pytest_cue.names import DEFAULT_KEYWORD
from pytest_cue.schema import Block, ChainedStep, Failure, Pending, Success, Table

from .declarations import StepDeclaration, TransformDeclaration

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_cue.names import Keyword

__all__ = (
    'Block',
    'ChainedStep',
    'Failure',
    'Pending',
    'PendingStepError',
    'StepDeclaration',
    'StepLibrary',
    'Success',
    'Table',
    'TransformDeclaration',
)


class StepLibrary(SchemaModel):
    """Declarative container for step definitions and transforms.

    A library represents a logical group of steps contributed by one
    module. Its decorators register declarations and return the
    decorated function unchanged, so handlers stay plain callables.
    """

    name: str = Field(
        min_length=1,
        title='Library name',
        description='Unique name of the library, used in diagnostics.',
    )

    steps: list[StepDeclaration] = Field(
        default_factory=list,
        title='Step declarations',
        description='Step definitions provided by the library.',
    )

    transforms: list[TransformDeclaration] = Field(
        default_factory=list,
        title='Transform declarations',
        description='Transform rules provided by the library.',
    )

    def step[F: Callable[..., object]](self, pattern: str, *,
                                       keyword: 'Keyword' = DEFAULT_KEYWORD,
                                       arity: int | None = None) -> 'Callable[[F], F]':
        """Declare a step definition.

        Args:
            pattern: Regular expression matched against step texts.
            keyword: Advisory keyword category.
            arity: Optional expected number of captured arguments.

        Returns:
            Decorator registering the handler.
        """
        def decorator(handler: F) -> F:
            self.steps.append(StepDeclaration(
                keyword=keyword,
                pattern=pattern,
                handler=handler,
                arity=arity,
            ))
            return handler

        return decorator

    def given[F: Callable[..., object]](self, pattern: str, *,
                                        arity: int | None = None) -> 'Callable[[F], F]':
        """Declare a step definition under the `Given` keyword."""
        return self.step(pattern, keyword='Given', arity=arity)

    def when[F: Callable[..., object]](self, pattern: str, *,
                                       arity: int | None = None) -> 'Callable[[F], F]':
        """Declare a step definition under the `When` keyword."""
        return self.step(pattern, keyword='When', arity=arity)

    def then[F: Callable[..., object]](self, pattern: str, *,
                                       arity: int | None = None) -> 'Callable[[F], F]':
        """Declare a step definition under the `Then` keyword."""
        return self.step(pattern, keyword='Then', arity=arity)

    def transform[F: Callable[..., object]](self, pattern: str) -> 'Callable[[F], F]':
        """Declare a transform rule.

        Args:
            pattern: Value regular expression, or a `table:`-prefixed
                comma-separated column signature.

        Returns:
            Decorator registering the handler.
        """
        def decorator(handler: F) -> F:
            self.transforms.append(TransformDeclaration(
                pattern=pattern,
                handler=handler,
            ))
            return handler

        return decorator
