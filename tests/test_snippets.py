"""Tests for definition snippets of undefined steps."""

import re

import pytest

from pytest_cue.core import StepEngine, collect_snippets, make_snippet
from pytest_cue.core.snippets import make_name, make_pattern
from pytest_cue.schema import Block, ChainedStep, StepText, Table


@pytest.mark.parametrize('text, expect_pattern, expect_groups', (
    pytest.param('a simple step', r'^a\ simple\ step$', 0, id='plain'),
    pytest.param('some step with "string" argument', r'^some\ step\ with\ "([^"]*)"\ argument$', 1, id='double quotes'),
    pytest.param("I am 'Alice'", r"^I\ am\ '([^']*)'$", 1, id='single quotes'),
    pytest.param('number step with 23', r'^number\ step\ with\ (-?\d+(?:\.\d+)?)$', 1, id='number'),
    pytest.param('I pay 2.5 for item3', r'^I\ pay\ (-?\d+(?:\.\d+)?)\ for\ item3$', 1, id='decimal'),
    pytest.param('costs $5 (total)?', r'^costs\ \$(-?\d+(?:\.\d+)?)\ \(total\)\?$', 1, id='escaped'),
))
def test_make_pattern(text: str, expect_pattern: str, expect_groups: int) -> None:
    """Build anchored patterns matching the original text."""
    pattern, groups = make_pattern(text)

    assert pattern == expect_pattern
    assert groups == expect_groups
    assert re.search(pattern, text) is not None


@pytest.mark.parametrize('text, expect_name', (
    pytest.param('I have 3 "red" apples', 'i_have_apples', id='tokens'),
    pytest.param('42', 'step', id='empty'),
    pytest.param('3rd attempt fails', 'step_3rd_attempt_fails', id='leading digit'),
))
def test_make_name(text: str, expect_name: str) -> None:
    """Build function names from step texts."""
    assert make_name(text) == expect_name


def test_make_snippet() -> None:
    """Build pending definitions for undefined steps."""
    snippet = make_snippet(StepText.from_line('Given some step with "string" argument'))

    assert snippet == (
        '@steps.given(r\'^some\\ step\\ with\\ "([^"]*)"\\ argument$\')\n'
        'def some_step_with_argument(arg1):\n'
        '    raise PendingStepError()\n'
    )


@pytest.mark.parametrize('step, expect_signature', (
    pytest.param(StepText.from_line('When I buy', Table.from_rows([['name']])), 'def i_buy(table):', id='table'),
    pytest.param(StepText.from_line('Then I read', Block(text='text')), 'def i_read(text):', id='block'),
    pytest.param(StepText.from_line('And I pay 3'), 'def i_pay(arg1):', id='and'),
))
def test_make_snippet_signature(step: StepText, expect_signature: str) -> None:
    """Add attached arguments after captured values."""
    snippet = make_snippet(step, library='shop')

    assert expect_signature in snippet
    assert snippet.startswith('@shop.step(' if step.keyword == 'And' else '@shop.')


def test_snippet_matches_step(engine: StepEngine) -> None:
    """Register a snippet pattern and match the original step."""
    pattern, _ = make_pattern('I have 3 "red" apples')
    engine.register_step(pattern, lambda count, color: None)

    assert engine.run(['Given I have 3 "red" apples'])[0].kind == 'successful'


def test_collect_snippets(engine: StepEngine) -> None:
    """Collect unique snippets for top-level undefined steps only."""
    engine.register_step(r'^a chain$', lambda: ChainedStep.given('chained 1'))

    first = engine.run(['Given unknown 1', 'Given unknown 2'])
    second = engine.run(['Given unknown 3'])
    chained = engine.run(['Given a chain'])

    snippets = collect_snippets([*first, *second, *chained])

    assert len(snippets) == 1
    assert snippets[0].startswith(r"@steps.given(r'^unknown\ (-?\d+(?:\.\d+)?)$')")
