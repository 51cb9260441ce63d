"""Core exception hierarchy.

This module defines base error and warning types used across the library
to report step library loading issues, registration conflicts, scenario
schema failures and per-step runtime classifications in a structured
and extensible way.
"""

from os import linesep
from traceback import format_exception
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump
from yaml.error import MarkedYAMLError

from pytest_cue.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from collections.abc import Iterable
    from importlib.metadata import EntryPoint
    from typing import Self

    from pydantic_core import ErrorDetails, ValidationError

    from pytest_cue.schema import StepDefinition, TransformRule

#: Indentation of location lines; snippets are indented twice as deep.
FORMAT_INDENT = 4

#: Source name shown when the filename is unknown.
UNKNOWN_SOURCE = '<unicode string>'

#: Placeholder shown in snippets instead of arbitrary runtime objects.
OPAQUE_VALUE = '<runtime object>'


class ErrorContext(TypedDict, total=False):
    """Optional location and document data attached to an error.

    Positions are zero-based, as reported by the YAML parser and by the
    scenario runner, and are shown one-based.
    """

    filename: str | None
    line_num: int | None
    column_num: int | None

    scenario: str | None
    step_num: int | None

    #: Underlying exception, used for YAML problem snippets.
    error: Exception | None
    #: Document fragment shown below the location.
    element: Any


class ErrorFormatter:
    """Render an error message followed by its location and a snippet."""

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            The message alone without a context, otherwise the message
            followed by indented location and snippet lines.
        """
        if not context:
            return message

        indent = ' ' * FORMAT_INDENT
        lines = [message]
        lines.extend(f'{indent}{line}' for line in cls.describe_location(context))
        lines.extend(f'{indent * 2}{line}' for line in cls.describe_snippet(context))

        return linesep.join(lines)

    @staticmethod
    def describe_location(context: ErrorContext) -> list[str]:
        """Describe the source position, then the scenario and step."""
        source = f'in "{context.get('filename') or UNKNOWN_SOURCE}"'
        if (line_num := context.get('line_num')) is not None:
            source += f', line {line_num + 1}'
            if (column_num := context.get('column_num')) is not None:
                source += f', column {column_num + 1}'

        position = []
        if (scenario := context.get('scenario')) is not None:
            position.append(f'scenario "{scenario}"')
        if (step_num := context.get('step_num')) is not None:
            position.append(f'step {step_num + 1}')

        if not position:
            return [source]

        return [source, f'on {', '.join(position)}']

    @classmethod
    def describe_snippet(cls, context: ErrorContext) -> list[str]:
        """Show the YAML problem region or the failing document fragment."""
        error = context.get('error')
        if isinstance(error, MarkedYAMLError) and error.problem_mark:
            snippet = error.problem_mark.get_snippet(indent=0) or ''

        elif element := context.get('element'):
            snippet = ' ...\n' + dump(
                cls.hide_opaque(element),
                indent=2,
                sort_keys=False,
                allow_unicode=True,
            )

        else:
            return []

        return [line for line in snippet.splitlines() if line.strip()]

    @classmethod
    def hide_opaque(cls, value: Any) -> Any:  # noqa: ANN401
        """Replace values YAML can not show with a placeholder."""
        if value is None or isinstance(value, SCALARS):
            return value

        if isinstance(value, MAPPINGS):
            return {key: cls.hide_opaque(item) for key, item in value.items()}

        if isinstance(value, SEQUENCES):
            return [cls.hide_opaque(item) for item in value]

        return OPAQUE_VALUE


class LibraryWarning(UserWarning):
    """Warning emitted for non-fatal step library issues.

    This warning is used when a step library cannot be loaded, but the
    error does not prevent further execution (in relaxed mode).
    """


class CueError(Exception, ErrorFormatter):
    """Base exception for all pytest-cue errors.

    All custom exceptions raised by the library inherit from this
    class to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location values.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String represenatation."""
        return self.format(self.message, self.context)


class LibraryError(CueError):
    """Error raised for fatal step library loading failures.

    This exception is raised when a library entry point or reference is
    invalid, misconfigured, or fails to load in strict mode.
    """

    def __init__(self, message: str, *,
                 entrypoint: 'EntryPoint | None' = None) -> None:
        """Initialize a library error.

        Args:
            message: Human-readable error description.
            entrypoint: Optional entry point associated with the error.
        """
        self.entrypoint = entrypoint

        super().__init__(message)


class ConfigurationError(CueError):
    """Base error for inconsistent step or transform configuration."""


class RegistrationError(ConfigurationError):
    """Error raised when a definition or transform cannot be registered.

    Registration errors are fatal: they surface before any scenario
    runs and leave the registry unchanged.
    """


class DuplicatePatternError(RegistrationError):
    """Error raised when an identical pattern string is registered twice.

    Keyword categories do not participate in uniqueness: the same pattern
    declared under `Given` and under `Then` is still a duplicate.
    """

    def __init__(self, pattern: str, *, origin: str | None = None) -> None:
        """Initialize a duplicate pattern error.

        Args:
            pattern: Offending pattern string.
            origin: Optional description of the already registered handler.
        """
        self.pattern = pattern

        message = f'Pattern {pattern!r} is already registered'
        if origin:
            message += f' by {origin}'

        super().__init__(message)


class InvalidPatternError(RegistrationError):
    """Error raised when a pattern can not be compiled or bound."""


class TransformConflictError(ConfigurationError):
    """Error raised when several transform rules match the same value.

    The conflict is never resolved silently by registration order;
    the affected step fails with this error as its diagnostic.
    """

    def __init__(self, value: str, rules: 'Iterable[TransformRule]') -> None:
        """Initialize a transform conflict error.

        Args:
            value: Raw captured value matched by several rules.
            rules: Conflicting transform rules.
        """
        self.value = value
        self.rules = tuple(rules)

        patterns = ', '.join(repr(rule.pattern) for rule in self.rules)
        super().__init__(f'Value {value!r} is matched by several transforms: {patterns}')


class ScenarioSchemaError(CueError):
    """Error raised when a scenario file is invalid or inconsistent."""

    @classmethod
    def from_yaml_error(cls, error: MarkedYAMLError) -> 'Self':
        """Create a schema error from a YAML parsing failure.

        Args:
            error: Exception raised by the YAML parser.

        Returns:
            ScenarioSchemaError representing the YAML parsing failure.
        """
        error_context = ErrorContext(
            filename=error.problem_mark.name if error.problem_mark else None,
            line_num=error.problem_mark.line if error.problem_mark else None,
            column_num=error.problem_mark.column if error.problem_mark else None,
            error=error,
        )

        message = 'Invalid YAML'
        if error.problem:
            message += f'{linesep}{' ' * FORMAT_INDENT}{error.problem}'

        return cls(message, context=error_context)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None,  # noqa: ANN401
                            filename: str | None = None,
                            scenario: str | None = None) -> 'Self':
        """Create a schema error from a Pydantic validation failure.

        The first error that can be traced back into the document gives
        the message, and the fragment it points at becomes the snippet.

        Args:
            error: ValidationError raised by Pydantic.
            data: Document data.
            filename: Name of the source file where the error occurred.
            scenario: Title or position of the scenario document.

        Returns:
            ScenarioSchemaError representing the validation failure.
        """
        error_context = ErrorContext(
            filename=filename,
            scenario=scenario,
            error=error,
            element=data,
        )

        if not data or not isinstance(data, dict):
            return cls('Type validation error', context=error_context)

        for item in error.errors(include_url=False, include_input=False):
            if located := cls._locate_fragment(data, item):
                message, fragment = located
                return cls(message, context=ErrorContext({**error_context, 'element': fragment}))

        return cls('Validation error', context=error_context)

    @staticmethod
    def _locate_fragment(document: dict[str, Any],
                         error: 'ErrorDetails') -> tuple[str, Any] | None:
        """Follow an error location through a scenario document.

        Scenario documents only nest mappings and lists. The walk stops
        at the first location part the raw document does not have, such
        as the `rows` of a table written as a plain list.

        Returns:
            The first line of the error message and the innermost
            fragment, kept under its key or as a one-item list, or None.
        """
        message = next((
            line.strip()
            for line in (error.get('msg') or '').splitlines()
            if line.strip()
        ), None)

        node: Any = document
        fragment: Any = None
        for key in error['loc']:
            if isinstance(node, dict) and key in node:
                fragment = {key: node[key]}
            elif isinstance(node, list) and isinstance(key, int) and 0 <= key < len(node):
                fragment = [node[key]]
            else:
                break
            node = node[key]

        if message is None or fragment is None:
            return None

        return message, fragment


class StepError(CueError):
    """Base error for per-step runtime classifications.

    Step errors are local to a step and its scenario: they set the step
    classification and never abort other scenarios.
    """


class UndefinedStepError(StepError):
    """Error describing a step matched by no definition."""

    def __init__(self, text: str) -> None:
        """Initialize an undefined step error.

        Args:
            text: Verbatim step text without keyword.
        """
        self.text = text

        super().__init__(f'Undefined step "{text}"')


class AmbiguousMatchError(StepError):
    """Error describing a step matched by several definitions."""

    def __init__(self, text: str, candidates: 'Iterable[StepDefinition]') -> None:
        """Initialize an ambiguous match error.

        Args:
            text: Verbatim step text without keyword.
            candidates: All definitions matching the text.
        """
        self.text = text
        self.candidates = tuple(candidates)

        message = f'Ambiguous match of "{text}":'
        for candidate in self.candidates:
            message += f'{linesep}{' ' * FORMAT_INDENT}to `{candidate.pattern}` from {candidate.origin}'

        super().__init__(message)


class PendingStepError(StepError):
    """Error raised by a handler to mark its step as not implemented yet.

    Handlers may raise it or return a `Pending` result; both are
    classified identically.
    """

    def __init__(self, reason: str | None = None) -> None:
        """Initialize a pending step signal.

        Args:
            reason: Optional reminder message.
        """
        self.reason = reason

        super().__init__(reason or 'TODO: write pending definition')


class StepFailure(StepError):
    """Error describing a failed step.

    Carries the original diagnostic of the handler for display.
    """

    def __init__(self, message: str, *,
                 cause: BaseException | None = None) -> None:
        """Initialize a step failure.

        Args:
            message: Human-readable failure description.
            cause: Original exception raised by the handler, if any.
        """
        self.cause = cause

        super().__init__(message)

    @property
    def trace(self) -> str | None:
        """Formatted origin trace of the underlying exception."""
        if self.cause is None:
            return None

        return ''.join(format_exception(self.cause))

    @classmethod
    def from_exception(cls, error: BaseException) -> 'Self':
        """Create a step failure wrapping a handler exception."""
        return cls(f'{error!r}', cause=error)


class TransformError(StepFailure):
    """Error raised when a transform handler fails."""


class StepTimeoutError(StepFailure):
    """Error raised when a handler exceeds the configured step timeout."""


class ChainDepthExceededError(StepFailure):
    """Error raised when chained steps recurse deeper than allowed."""

    def __init__(self, depth: int) -> None:
        """Initialize a chain depth error.

        Args:
            depth: Configured maximum chain depth.
        """
        self.depth = depth

        super().__init__(f'Chain too deep: more than {depth} nested steps')


class ScenarioFailure(CueError):
    """Error raised by the pytest item for a scenario that did not pass."""
