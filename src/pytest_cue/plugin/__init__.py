"""Pytest plugin for collecting and executing YAML scenario files.

This module integrates the `pytest-cue` engine with pytest by:
- registering custom command-line and ini options;
- configuring a shared `StepEngine` instance with loaded step libraries;
- collecting YAML files as executable scenarios.

YAML files matching the pattern `test_*.yml` or `test_*.yaml` are
automatically collected and every scenario in them becomes a pytest
test item.
"""

from re import match
from typing import TYPE_CHECKING

from .spec import ScenarioFile

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.config.argparsing import Parser
    from _pytest.nodes import Node


def pytest_addoption(parser: 'Parser') -> None:
    """Register pytest command-line options for pytest-cue.

    Args:
        parser: Pytest argument parser.
    """
    parser.addini(
        'cue_libraries',
        type='linelist',
        default=[],
        help='Step libraries to load, as "module:attribute" references.',
    )
    parser.addoption(
        '--cue-library',
        action='append',
        dest='cue_libraries',
        default=[],
        metavar='MODULE:ATTRIBUTE',
        help='Load a step library in addition to entry points and ini references.',
    )
    parser.addoption(
        '--cue-strict',
        action='store_true',
        dest='cue_strict',
        default=False,
        help=(
            'Fail scenarios with undefined, pending or ambiguous steps '
            'instead of skipping them.'
        ),
    )
    parser.addoption(
        '--cue-relaxed',
        action='store_true',
        dest='cue_relaxed',
        default=False,
        help=(
            'Report step libraries that fail to load as warnings '
            'instead of aborting the run.'
        ),
    )
    parser.addoption(
        '--cue-dry-run',
        action='store_true',
        dest='cue_dry_run',
        default=False,
        help='Match all steps without executing any handler.',
    )


def pytest_configure(config: 'Config') -> None:
    """Configure pytest-cue integration.

    This hook initializes a shared `StepEngine` instance, loads every
    configured step library into it and attaches it to the pytest
    configuration object as `config.cue_engine`. Library loading and
    registration errors abort the session before any scenario runs.

    Args:
        config: Pytest configuration object.
    """
    from pytest_cue.core import StepEngine  # noqa: PLC0415
    from pytest_cue.settings import RunnerSettings  # noqa: PLC0415

    overrides = {
        name: True
        for name, option in (
            ('strict', 'cue_strict'),
            ('relaxed', 'cue_relaxed'),
            ('dry_run', 'cue_dry_run'),
        )
        if config.getoption(option, default=False)
    }

    engine = StepEngine(RunnerSettings(**overrides))

    for reference in (*config.getini('cue_libraries'), *config.getoption('cue_libraries', default=[])):
        engine.load_reference(reference)

    config.cue_engine = engine  # type: ignore[attr-defined]


def pytest_collect_file(parent: 'Node', file_path: 'Path') -> ScenarioFile | None:
    """Collect YAML scenario files.

    Files matching the pattern `test_*.yml` or `test_*.yaml` are treated
    as scenario files and collected using `ScenarioFile`.

    Args:
        parent: Parent pytest collection node.
        file_path: Path to the file being considered.

    Returns:
        A `ScenarioFile` collector if the file matches the pattern, otherwise ``None``.
    """
    if match(r'^test_.+\.ya?ml$', file_path.name):
        return ScenarioFile.from_parent(
            parent,
            path=file_path,
        )

    return None
