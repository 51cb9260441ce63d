"""Definition snippets for undefined steps.

Snippets suggest a step definition for a step text no definition
matched: quoted strings and numbers become capture groups and the rest
of the text is escaped literally.
"""

from re import compile as regexp
from re import escape
from typing import TYPE_CHECKING

from pytest_cue.schema import Table

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from pytest_cue.schema import StepOutcome, StepText

#: Tokens replaced by capture groups in generated patterns.
TOKEN_PATTERN = regexp(r'"[^"]*"|\'[^\']*\'|(?<![\w.])-?\d+(?:\.\d+)?(?![\w.])')

#: Capture group of each token kind.
DOUBLE_QUOTED_GROUP = '"([^"]*)"'
SINGLE_QUOTED_GROUP = "'([^']*)'"
NUMBER_GROUP = r'(-?\d+(?:\.\d+)?)'

WORD_PATTERN = regexp(r'[a-z0-9]+')

DECORATORS = {
    'Given': 'given',
    'When': 'when',
    'Then': 'then',
}

MAX_NAME_WORDS = 6


def make_pattern(text: str) -> tuple[str, int]:
    """Build an anchored pattern for a step text.

    Args:
        text: Step text without keyword.

    Returns:
        The pattern and its number of capture groups.
    """
    pattern, position, groups = '^', 0, 0

    for token in TOKEN_PATTERN.finditer(text):
        pattern += escape(text[position:token.start()])
        value = token.group()
        if value.startswith('"'):
            pattern += DOUBLE_QUOTED_GROUP
        elif value.startswith("'"):
            pattern += SINGLE_QUOTED_GROUP
        else:
            pattern += NUMBER_GROUP
        position = token.end()
        groups += 1

    pattern += escape(text[position:]) + '$'

    return pattern, groups


def make_name(text: str) -> str:
    """Build a function name for a step text."""
    words = WORD_PATTERN.findall(TOKEN_PATTERN.sub(' ', text).lower())[:MAX_NAME_WORDS]
    name = '_'.join(words) or 'step'
    if name[0].isdigit():
        name = f'step_{name}'

    return name


def make_snippet(step: 'StepText', library: str = 'steps') -> str:
    """Build a step definition snippet for an undefined step.

    Args:
        step: Undefined step.
        library: Name of the step library variable used in the snippet.

    Returns:
        Python source of a pending step definition.
    """
    pattern, groups = make_pattern(step.text)
    params = [f'arg{position + 1}' for position in range(groups)]

    if step.argument is not None:
        params.append('table' if isinstance(step.argument, Table) else 'text')

    decorator = DECORATORS.get(step.keyword, 'step')
    pattern_literal = pattern.replace("'", "\\'")

    return (
        f"@{library}.{decorator}(r'{pattern_literal}')\n"
        f"def {make_name(step.text)}({', '.join(params)}):\n"
        f"    raise PendingStepError()\n"
    )


def collect_snippets(outcomes: 'Iterable[StepOutcome]', library: str = 'steps') -> list[str]:
    """Build unique snippets for all top-level undefined outcomes.

    Escalated undefined steps resolved from chains are ignored.
    """
    snippets: dict[str, str] = {}
    for outcome in outcomes:
        if outcome.needs_snippet:
            pattern, _ = make_pattern(outcome.step.text)
            snippets.setdefault(pattern, make_snippet(outcome.step, library))

    return list(snippets.values())
