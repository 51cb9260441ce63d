"""Tests for step resolution."""

import pytest

from pytest_cue.core import Matcher, PatternRegistry
from pytest_cue.errors import AmbiguousMatchError, UndefinedStepError
from pytest_cue.schema import OutcomeKind, StepText


def handler(*args: object) -> None:
    """Do nothing."""


@pytest.fixture
def registry() -> PatternRegistry:
    """Provide a registry with a generic and a specific definition."""
    registry = PatternRegistry()
    registry.register(r'^some step with "(.+)" argument$', handler)
    registry.register(r'^number step with (\d+)$', handler)
    registry.register(r'^number step with 42$', handler)

    return registry


def test_resolve_single(registry: PatternRegistry) -> None:
    """Resolve a step matched by exactly one definition."""
    result = Matcher(registry).resolve(StepText.from_line('Given some step with "string" argument'))

    assert not result.is_undefined
    assert not result.is_ambiguous
    assert result.outcome() is None
    assert result.definition.pattern == r'^some step with "(.+)" argument$'
    assert result.captures == ('string',)


def test_resolve_ignores_keyword(registry: PatternRegistry) -> None:
    """Resolve the same definition under every keyword."""
    matcher = Matcher(registry)

    definitions = {
        matcher.resolve(StepText.from_line(f'{keyword} number step with 7')).definition
        for keyword in ('Given', 'When', 'Then', 'And', 'But', '*')
    }

    assert len(definitions) == 1


def test_resolve_undefined(registry: PatternRegistry) -> None:
    """Classify a step matched by no definition as undefined."""
    result = Matcher(registry).resolve(StepText.from_line('Then Number step with 7'))

    assert result.is_undefined

    outcome = result.outcome()

    assert outcome is not None
    assert outcome.kind is OutcomeKind.UNDEFINED
    assert outcome.diagnostic == 'Number step with 7'
    assert isinstance(outcome.error, UndefinedStepError)

    with pytest.raises(LookupError, match=r'matches 0 definitions'):
        _ = result.definition


def test_resolve_ambiguous(registry: PatternRegistry) -> None:
    """Classify a step matched by several definitions as ambiguous."""
    result = Matcher(registry).resolve(StepText(text='number step with 42'))

    assert result.is_ambiguous

    outcome = result.outcome()

    assert outcome is not None
    assert outcome.kind is OutcomeKind.AMBIGUOUS
    assert [definition.pattern for definition in outcome.diagnostic] == [
        r'^number step with (\d+)$',
        r'^number step with 42$',
    ]
    assert isinstance(outcome.error, AmbiguousMatchError)
    assert outcome.message is not None
    assert r'to `^number step with (\d+)$` from tests.test_matcher.handler' in outcome.message
    assert 'to `^number step with 42$` from tests.test_matcher.handler' in outcome.message

    with pytest.raises(LookupError, match=r'matches 2 definitions'):
        _ = result.captures
