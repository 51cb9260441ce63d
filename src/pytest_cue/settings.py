"""Runtime settings of the step engine.

Settings are resolved from explicit keyword arguments first and from
`CUE_`-prefixed environment variables otherwise, so the same engine can
be configured by pytest options, CI variables, or tests.
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from pytest_cue.models import SettingsModel

DEFAULT_MAX_CHAIN_DEPTH = 32


class RunnerSettings(SettingsModel):
    """Configuration of a single step engine instance."""

    model_config = SettingsConfigDict(
        env_prefix='CUE_',
        frozen=True,
        extra='ignore',
    )

    strict: bool = Field(
        default=False,
        title='Strict outcomes',
        description=(
            'Treat undefined, pending and ambiguous steps as failures '
            'of the run, in addition to failed steps.'
        ),
    )

    relaxed: bool = Field(
        default=False,
        title='Relaxed library loading',
        description=(
            'Emit warnings instead of raising when a step library '
            'can not be imported or is not a library.'
        ),
    )

    dry_run: bool = Field(
        default=False,
        title='Dry run',
        description=(
            'Match and bind every step without invoking handlers. '
            'Matched steps are reported as skipped.'
        ),
    )

    max_chain_depth: int = Field(
        default=DEFAULT_MAX_CHAIN_DEPTH,
        ge=1,
        title='Maximum chain depth',
        description='Maximum nesting of chained steps before a step fails.',
    )

    step_timeout: float | None = Field(
        default=None,
        gt=0,
        title='Step timeout',
        description=(
            'Seconds a single handler may run before its step fails. '
            'No timeout is applied when unset.'
        ),
    )
