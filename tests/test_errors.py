"""Tests for error formatting."""

import pytest
from yaml import SafeLoader, load
from yaml.error import MarkedYAMLError

from pytest_cue.errors import (
    CueError,
    DuplicatePatternError,
    ErrorContext,
    ScenarioSchemaError,
    StepFailure,
    UndefinedStepError,
)


def test_format_without_context() -> None:
    """Keep messages without context unchanged."""
    assert f'{CueError("Something failed")}' == 'Something failed'


def test_format_location() -> None:
    """Render file, scenario and step locations."""
    error = CueError('Step failed', context=ErrorContext(
        filename='test_shop.yaml',
        line_num=4,
        column_num=2,
        scenario='Buying apples',
        step_num=1,
    ))

    lines = f'{error}'.splitlines()

    assert lines[0] == 'Step failed'
    assert lines[1] == '    in "test_shop.yaml", line 5, column 3'
    assert lines[2] == '    on scenario "Buying apples", step 2'


def test_format_snippet() -> None:
    """Render elements as YAML, hiding runtime objects."""
    error = CueError('Step failed', context=ErrorContext(
        step_num=0,
        element={'step': 'Given a step', 'handler': object()},
    ))

    message = f'{error}'

    assert '    in "<unicode string>"' in message
    assert '    on step 1' in message
    assert 'step: Given a step' in message
    assert 'handler: <runtime object>' in message


def test_yaml_error() -> None:
    """Point YAML errors at the broken line."""
    with pytest.raises(MarkedYAMLError) as base:
        load('steps: [\n', Loader=SafeLoader)

    error = ScenarioSchemaError.from_yaml_error(base.value)

    assert error.message.startswith('Invalid YAML')
    assert error.context is not None
    assert error.context.get('line_num') is not None
    assert 'in "<unicode string>", line ' in f'{error}'


def test_step_errors() -> None:
    """Describe step classifications."""
    assert UndefinedStepError('a step').message == 'Undefined step "a step"'

    failure = StepFailure.from_exception(KeyError('name'))

    assert failure.message == "KeyError('name')"
    assert isinstance(failure.cause, KeyError)


def test_duplicate_origin() -> None:
    """Name the handler already owning a duplicate pattern."""
    error = DuplicatePatternError('^a step$', origin='tests.steps.a_step')

    assert error.message == "Pattern '^a step$' is already registered by tests.steps.a_step"
    assert error.pattern == '^a step$'
