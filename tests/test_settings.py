"""Tests for runtime settings."""

import os
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from pytest_cue.settings import DEFAULT_MAX_CHAIN_DEPTH, RunnerSettings

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


def test_defaults(mocker: 'MockerFixture') -> None:
    """Resolve defaults without environment variables."""
    mocker.patch.dict(os.environ, {}, clear=True)

    settings = RunnerSettings()

    assert not settings.strict
    assert not settings.relaxed
    assert not settings.dry_run
    assert settings.max_chain_depth == DEFAULT_MAX_CHAIN_DEPTH
    assert settings.step_timeout is None


def test_environment(mocker: 'MockerFixture') -> None:
    """Resolve settings from prefixed environment variables."""
    mocker.patch.dict(os.environ, {
        'CUE_STRICT': 'yes',
        'CUE_DRY_RUN': '1',
        'CUE_MAX_CHAIN_DEPTH': '4',
        'CUE_STEP_TIMEOUT': '2.5',
        'STRICT': 'no',
    })

    settings = RunnerSettings()

    assert settings.strict
    assert settings.dry_run
    assert settings.max_chain_depth == 4
    assert settings.step_timeout == 2.5


def test_explicit_overrides_environment(mocker: 'MockerFixture') -> None:
    """Prefer explicit values to environment variables."""
    mocker.patch.dict(os.environ, {'CUE_STRICT': 'true'})

    assert not RunnerSettings(strict=False).strict


@pytest.mark.parametrize('values', (
    pytest.param({'max_chain_depth': 0}, id='zero depth'),
    pytest.param({'step_timeout': 0}, id='zero timeout'),
    pytest.param({'step_timeout': -1}, id='negative timeout'),
))
def test_invalid(values: dict) -> None:
    """Reject out of range settings."""
    with pytest.raises(ValidationError):
        RunnerSettings(**values)


def test_frozen() -> None:
    """Keep settings immutable."""
    settings = RunnerSettings()

    with pytest.raises(ValidationError):
        settings.strict = True  # type: ignore[misc]
