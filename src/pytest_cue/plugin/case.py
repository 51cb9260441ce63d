"""Pytest item executing a single YAML scenario.

The item runs the scenario steps through the shared step engine and
maps the aggregated scenario status to a pytest verdict:
- a passing scenario passes;
- a failing scenario (failed steps, or any non-successful step in
  strict mode) fails with the diagnostic of its terminal step;
- undefined, pending and ambiguous scenarios are skipped otherwise.
"""

from typing import TYPE_CHECKING

import pytest

from pytest_cue.core import collect_snippets
from pytest_cue.errors import ErrorContext, ScenarioFailure
from pytest_cue.schema import OutcomeKind

if TYPE_CHECKING:
    from typing import Any

if TYPE_CHECKING:
    from _pytest._code.code import ExceptionInfo, TerminalRepr

if TYPE_CHECKING:
    from pytest_cue.core import StepEngine
    from pytest_cue.schema import ScenarioDocument, ScenarioResult, StepOutcome


class ScenarioItem(pytest.Item):
    """Pytest item backed by a scenario document."""

    __test__ = False

    def __init__(self, *,
                 document: 'ScenarioDocument',
                 engine: 'StepEngine',
                 **kwargs: 'Any') -> None:
        """Initialize a pytest item for a scenario.

        Args:
            document: Validated scenario document.
            engine: Step engine shared by the session.
            **kwargs: Keyword pytest.Item arguments.
        """
        super().__init__(**kwargs)

        self.document = document
        self.engine = engine
        self.result: ScenarioResult | None = None

        for tag in document.tags:
            name = tag.lstrip('@')
            self.config.addinivalue_line('markers', f'{name}: scenario tag')
            self.add_marker(name)

    @property
    def strict(self) -> bool:
        """Whether non-successful steps fail the scenario."""
        return self.engine.settings.strict

    def runtest(self) -> None:
        """Execute the scenario.

        Raises:
            ScenarioFailure: If the scenario does not pass.
        """
        self.result = self.engine.run_scenario(
            self.document.to_steps(),
            title=self.document.scenario,
        )

        terminal = self.result.terminal
        if terminal is None:
            if self.result.status is OutcomeKind.SKIPPED:
                pytest.skip('Steps matched but not executed')
            return None

        if not self.result.passed(self.strict):
            raise self.make_failure(self.result, terminal)

        pytest.skip(self.describe(self.result, terminal))

    @staticmethod
    def describe(result: 'ScenarioResult', terminal: 'StepOutcome') -> str:
        """Describe the terminal step of a result with definition snippets."""
        message = f'Step {terminal.kind}: {terminal.message or terminal.step.text}'

        snippets = collect_snippets(result.outcomes)
        if snippets:
            message += '\n\nYou can implement undefined steps with:\n\n'
            message += '\n'.join(snippets)

        return message

    def make_failure(self, result: 'ScenarioResult', terminal: 'StepOutcome') -> ScenarioFailure:
        """Create a scenario failure for the terminal step of a result."""
        return ScenarioFailure(
            self.describe(result, terminal),
            context=ErrorContext(
                filename=f'{self.path}',
                scenario=result.title,
                step_num=result.outcomes.index(terminal),
                error=terminal.error,
                element={'step': f'{terminal.step}'},
            ),
        )

    def repr_failure(self, excinfo: 'ExceptionInfo[BaseException]',
                     style: 'Any' = None) -> 'str | TerminalRepr':
        """Represent scenario failures without the engine traceback."""
        if isinstance(excinfo.value, ScenarioFailure):
            return f'{excinfo.value}'

        return super().repr_failure(excinfo, style=style)

    def reportinfo(self) -> tuple['Any', int | None, str]:
        """Location of the scenario for pytest reports."""
        return self.path, None, f'scenario: {self.name}'
