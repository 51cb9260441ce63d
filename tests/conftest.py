"""Tests configurations and fixtures."""

from importlib.metadata import EntryPoint, EntryPoints
from typing import TYPE_CHECKING

import pytest

from pytest_cue.core import StepEngine
from pytest_cue.settings import RunnerSettings

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType

if TYPE_CHECKING:
    from pytest_cue.extensions import StepLibrary

pytest_plugins = ('pytester',)


@pytest.fixture
def patch_entrypoints(mocker: 'MockerFixture') -> 'Callable[..., MockType]':
    """Provide a factory for mocking `importlib.metadata.entry_points`.

    Returns a callable that patches `entry_points()` to simulate
    discovery of step libraries in the `cue_steps` entry point group.

    The returned factory allows configuring:
    - successfully loadable libraries,
    - or an exception raised during library loading,
    - or an empty entry point list.
    """
    def patch(*libraries: 'StepLibrary | object', raises: Exception | None = None) -> 'MockType':
        """Patch `entry_points` with a controlled library configuration.

        Args:
            libraries: Objects to be returned by `EntryPoint.load()`.
                If empty, no entry points are registered.
            raises: Exception to raise when `EntryPoint.load()` is called.
                Used to simulate library load failures.

        Returns:
            A mock patch object produced by `mocker.patch` that replaces
            `importlib.metadata.entry_points` for the duration of the test.
        """
        entrypoints = []
        for position, library in enumerate(libraries):
            ep = mocker.Mock(spec=EntryPoint)
            ep.group = 'cue_steps'
            ep.name = f'tests{position}'
            ep.value = f'tests.examples:library{position}'
            ep.load.return_value = library
            if raises is not None:
                ep.load.side_effect = raises
            entrypoints.append(ep)

        return mocker.patch(
            'importlib.metadata.entry_points',
            return_value=EntryPoints(entrypoints),
        )

    return patch


@pytest.fixture
def engine() -> StepEngine:
    """Provide an isolated engine without entry point libraries."""
    return StepEngine(RunnerSettings(), auto_load=False)
