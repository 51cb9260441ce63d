"""Command-line utilities for pytest-cue step libraries.

The utilities build a step engine the same way the pytest plugin does,
so they show exactly what a test session would register.
"""

from typing import TYPE_CHECKING

from click import ClickException, argument, echo, group, option

from pytest_cue.core import StepEngine, make_snippet
from pytest_cue.errors import CueError
from pytest_cue.schema import StepText
from pytest_cue.settings import RunnerSettings

if TYPE_CHECKING:
    from collections.abc import Iterable


@group(help='Command-line utilities for pytest-cue step libraries.')
def cli() -> None:
    """Root CLI group for pytest-cue tools."""
    return None


def _make_engine(libraries: 'Iterable[str]', *, relaxed: bool = False) -> StepEngine:
    """Build an engine with entry point and referenced libraries.

    Raises:
        ClickException: If a library can not be loaded or registered.
    """
    try:
        engine = StepEngine(RunnerSettings(relaxed=relaxed))
        for reference in libraries:
            engine.load_reference(reference)

    except CueError as base:
        raise ClickException(base.message) from base

    return engine


@cli.command(
    name='definitions',
    help='List step definitions and transforms of all loaded libraries.',
)
@option(
    '-l', '--library',
    'libraries',
    multiple=True,
    metavar='MODULE:ATTRIBUTE',
    help='Additional step library reference to load.',
)
@option(
    '--relaxed',
    is_flag=True,
    default=False,
    help='Report libraries failing to load as warnings.',
)
def list_definitions(libraries: tuple[str, ...], relaxed: bool) -> None:  # noqa: FBT001
    """Print registered step definitions and transform rules.

    Args:
        libraries: Additional `module:attribute` library references.
        relaxed: Whether loading issues are warnings.
    """
    engine = _make_engine(libraries, relaxed=relaxed)

    for definition in engine.steps:
        echo(f'{definition}  # {definition.origin}')

    for rule in engine.transforms:
        echo(f'transform {rule.pattern!r}  # {rule.origin}')


@cli.command(
    name='snippet',
    help='Print a pending step definition for a step line.',
)
@argument('line')
@option(
    '--library-name',
    default='steps',
    show_default=True,
    help='Name of the step library variable used in the snippet.',
)
def print_snippet(line: str, library_name: str) -> None:
    """Print a step definition snippet.

    Args:
        line: Step line, optionally starting with a keyword.
        library_name: Name of the step library variable.
    """
    echo(make_snippet(StepText.from_line(line), library_name), nl=False)


if __name__ == '__main__':
    cli()
