"""Tests for YAML scenario documents."""

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from pytest_cue.errors import ScenarioSchemaError
from pytest_cue.plugin.spec import ScenarioFile
from pytest_cue.schema import Block, ScenarioDocument, StepText, Table

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem


TEST_SCENARIOS_CONTENT = '''
---
scenario: Buying apples
description: A basket grows with every purchase
tags:
  - shop
  - '@slow'
steps:
  - Given an empty basket
  - step: When I buy
    table:
      - [name, amount]
      - [apple, 2]
  - step: Then the receipt says
    text: |
      2 apples
      total 4

---

---
scenario: Looking around
steps:
  - '* I look around'
  - I do nothing
'''

TEST_INVALID_YAML = '''
scenario: Broken
steps: [
'''

TEST_INVALID_STEPS = '''
scenario: No steps
steps: []
'''

TEST_INVALID_ARGUMENT = '''
scenario: Two arguments
steps:
  - step: Given a step
    table:
      - [name]
    text: more
'''

TEST_INVALID_TABLE = '''
scenario: Ragged table
steps:
  - step: Given a step
    table:
      - [name, amount]
      - [apple]
'''

TEST_INVALID_FIELD = '''
scenario: Extra field
author: Tester
steps:
  - Given a step
'''

TEST_INVALID_TAG = '''
scenario: Spaced tag
tags:
  - needs review
steps:
  - Given a step
'''

TEST_VERBATIM_CELLS = '''
scenario: Codes
steps:
  - step: Given the codes
    table:
      - [code, flag, note, amount]
      - [010, off, ~, 1_000]
'''

TEST_INVALID_DOCUMENT = '''
- 1
- 2
'''


def test_parse() -> None:
    """Parse multi-document scenario files, ignoring empty documents."""
    first, second = ScenarioFile.parse(TEST_SCENARIOS_CONTENT)

    assert first.scenario == 'Buying apples'
    assert first.tags == ['shop', '@slow']
    assert first.to_steps() == (
        StepText(keyword='Given', text='an empty basket'),
        StepText(keyword='When', text='I buy', argument=Table(rows=(('name', 'amount'), ('apple', '2')))),
        StepText(keyword='Then', text='the receipt says', argument=Block(text='2 apples\ntotal 4\n')),
    )

    assert second.scenario == 'Looking around'
    assert second.to_steps() == (
        StepText(keyword='*', text='I look around'),
        StepText(keyword='*', text='I do nothing'),
    )


def test_parse_verbatim_cells() -> None:
    """Keep table cells as written, without scalar resolution."""
    scenario, = ScenarioFile.parse(TEST_VERBATIM_CELLS)
    step, = scenario.to_steps()

    assert isinstance(step.argument, Table)
    assert step.argument.hashes() == [
        {'code': '010', 'flag': 'off', 'note': '~', 'amount': '1_000'},
    ]


def test_parse_file(fs: 'FakeFilesystem') -> None:
    """Parse scenarios from a file."""
    fs.create_file('features/test_shop.yaml', contents=TEST_SCENARIOS_CONTENT)

    with open('features/test_shop.yaml') as content:
        scenarios = ScenarioFile.parse(content, filename='features/test_shop.yaml')

    assert [scenario.scenario for scenario in scenarios] == ['Buying apples', 'Looking around']


@pytest.mark.parametrize('content, expect_message', (
    pytest.param(TEST_INVALID_YAML, r'^Invalid YAML', id='invalid yaml'),
    pytest.param(TEST_INVALID_STEPS, r'^List should have at least 1 item', id='no steps'),
    pytest.param(TEST_INVALID_ARGUMENT, r'either a table or a text block', id='two arguments'),
    pytest.param(TEST_INVALID_TABLE, r'Row 2 has 1 cells, expected 2', id='ragged table'),
    pytest.param(TEST_INVALID_FIELD, r'^Extra inputs are not permitted', id='extra field'),
    pytest.param(TEST_INVALID_DOCUMENT, r'^Type validation error', id='invalid type'),
    pytest.param(TEST_INVALID_TAG, r'^String should match pattern', id='invalid tag'),
))
def test_parse_invalid(content: str, expect_message: str) -> None:
    """Fail parsing on YAML and schema errors."""
    with pytest.raises(ScenarioSchemaError, match=expect_message):
        ScenarioFile.parse(content, filename='test_invalid.yaml')


def test_parse_invalid_location() -> None:
    """Point schema errors at the failing scenario and element."""
    with pytest.raises(ScenarioSchemaError) as error:
        ScenarioFile.parse(TEST_INVALID_FIELD, filename='test_invalid.yaml')

    message = f'{error.value}'

    assert 'in "test_invalid.yaml"' in message
    assert 'on scenario "Extra field"' in message
    assert 'author: Tester' in message


def test_table_helpers() -> None:
    """Expose table rows in several shapes."""
    table = Table.from_rows([['name', 'email'], ['Alice', 'alice@example.com']])

    assert table.headers == ('name', 'email')
    assert table.signature == 'name,email'
    assert table.raw() == [['name', 'email'], ['Alice', 'alice@example.com']]
    assert table.hashes() == [{'name': 'Alice', 'email': 'alice@example.com'}]
    assert table.rows_hash() == {'name': 'email', 'Alice': 'alice@example.com'}

    with pytest.raises(ValueError, match=r'exactly two columns'):
        Table.from_rows([['a', 'b', 'c']]).rows_hash()


def test_empty_table() -> None:
    """Reject tables without rows."""
    with pytest.raises(ValidationError):
        Table.from_rows([])


def test_document_model() -> None:
    """Accept minimal scenario documents."""
    document = ScenarioDocument.model_validate({
        'scenario': 'Minimal',
        'steps': ['Given a step'],
    })

    assert document.tags == []
    assert document.description is None
