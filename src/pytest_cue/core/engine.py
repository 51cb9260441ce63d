"""Step engine facade.

The engine owns an explicit pair of registries, loads step libraries
into them during a registration pass and then runs scenarios. Engines
share no global state, so several independent engines can coexist in
one process.
"""

from typing import TYPE_CHECKING

from pytest_cue.names import DEFAULT_KEYWORD
from pytest_cue.schema import StepText
from pytest_cue.settings import RunnerSettings

from .binder import ArgumentBinder
from .executor import Executor
from .loader import LibraryLoaderMixin
from .matcher import Matcher
from .pipeline import StepPipeline
from .registry import PatternRegistry, TransformRegistry
from .sequencer import RunSequencer

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from pytest_cue.extensions import StepLibrary
    from pytest_cue.names import Keyword
    from pytest_cue.schema import ScenarioResult, StepDefinition, StepOutcome, TransformRule
    from pytest_cue.values import StepHandler, TransformHandler

#: Step accepted by the engine: a step text or a line with a keyword.
type StepInput = StepText | str


class StepEngine(LibraryLoaderMixin):
    """Registries, pipeline and sequencer of a test run.

    Registration happens before the first run; the registries are
    frozen when a run starts and stay read-only afterwards.
    """

    def __init__(self, settings: RunnerSettings | None = None, *,
                 libraries: 'Iterable[StepLibrary]' = (),
                 auto_load: bool = True) -> None:
        """Initialize a step engine.

        Args:
            settings: Runtime settings. Resolved from the environment
                when omitted.
            libraries: Step libraries to register immediately.
            auto_load: Whether to load libraries from the `cue_steps`
                entry point group.

        Raises:
            LibraryError: If a library can not be loaded in strict mode.
            RegistrationError: If a declaration can not be registered.
        """
        self.settings = settings if settings is not None else RunnerSettings()
        self.strict_mode = not self.settings.relaxed

        self.steps = PatternRegistry()
        self.transforms = TransformRegistry()
        self.libraries = {}

        for library in libraries:
            self.add_library(library)

        if auto_load:
            self.load_libraries()

        self.matcher = Matcher(self.steps)
        self.binder = ArgumentBinder(self.transforms)
        self.executor = Executor(timeout=self.settings.step_timeout)

        self.pipeline = StepPipeline(
            self.matcher,
            self.binder,
            self.executor,
            max_chain_depth=self.settings.max_chain_depth,
        )
        self.sequencer = RunSequencer(self.pipeline, dry_run=self.settings.dry_run)

    def register_step(self, pattern: str, handler: 'StepHandler',
                      arity: int | None = None,
                      keyword: 'Keyword' = DEFAULT_KEYWORD) -> 'StepDefinition':
        """Register a single step definition.

        Raises:
            RegistrationError: If the definition can not be registered.
        """
        return self.steps.register(pattern, handler, arity=arity, keyword=keyword)

    def register_transform(self, pattern: str, handler: 'TransformHandler') -> 'TransformRule':
        """Register a single transform rule.

        Raises:
            RegistrationError: If the rule can not be registered.
        """
        return self.transforms.register(pattern, handler)

    def freeze(self) -> None:
        """Make both registries read-only."""
        self.steps.freeze()
        self.transforms.freeze()

    def run(self, steps: 'Iterable[StepInput]') -> list['StepOutcome']:
        """Run the ordered steps of one scenario.

        Args:
            steps: Step texts, or lines starting with a keyword.

        Returns:
            One outcome per step, in input order.
        """
        self.freeze()

        return self.sequencer.run(self._coerce(step) for step in steps)

    def run_scenario(self, steps: 'Iterable[StepInput]',
                     title: str | None = None) -> 'ScenarioResult':
        """Run the ordered steps of one scenario and aggregate them."""
        self.freeze()

        return self.sequencer.run_scenario(
            (self._coerce(step) for step in steps),
            title=title,
        )

    @staticmethod
    def _coerce(step: 'StepInput') -> StepText:
        if isinstance(step, str):
            return StepText.from_line(step)

        return step
