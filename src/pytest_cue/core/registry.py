"""Step definition and transform registries.

Registries are populated once by a registration pass before a run and
are read-only while scenarios execute, so lookups need no locking.
Every failed registration raises before the registry is modified.
"""

from logging import getLogger
from re import compile as regexp
from re import error as RegexError  # noqa: N812
from typing import TYPE_CHECKING

from pydantic import ValidationError

from pytest_cue.errors import DuplicatePatternError, InvalidPatternError, RegistrationError
from pytest_cue.names import DEFAULT_KEYWORD, TABLE_PREFIX, is_table_signature, normalize_signature
from pytest_cue.schema import StepDefinition, TransformRule

if TYPE_CHECKING:
    from collections.abc import Iterator
    from re import Match, Pattern

if TYPE_CHECKING:
    from pytest_cue.names import Keyword
    from pytest_cue.schema import Table
    from pytest_cue.values import Captures, StepHandler, TransformHandler

logger = getLogger(__name__)

#: Resolved candidate of a step text: a definition and its captures.
type Candidate = tuple[StepDefinition, Captures]


class BaseRegistry[T: StepDefinition | TransformRule]:
    """Ordered collection of items keyed by unique pattern strings.

    A registry may be frozen once populated; any later registration
    attempt is rejected.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._items: dict[str, T] = {}
        self._frozen = False

    def __len__(self) -> int:
        """Return the number of registered items."""
        return len(self._items)

    def __iter__(self) -> 'Iterator[T]':
        """Iterate over registered items in registration order."""
        return iter(self._items.values())

    def __contains__(self, pattern: object) -> bool:
        """Check whether a pattern string is registered."""
        return pattern in self._items

    @property
    def frozen(self) -> bool:
        """Whether the registry is read-only."""
        return self._frozen

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    def clear(self) -> None:
        """Remove all registered items and unfreeze the registry."""
        self._items = {}
        self._frozen = False

    def get(self, pattern: str) -> T | None:
        """Return an item by its pattern string."""
        return self._items.get(pattern)

    def _insert(self, key: str, item: T) -> T:
        """Insert an item under a unique key.

        Raises:
            RegistrationError: If the registry is frozen.
            DuplicatePatternError: If the key is already registered.
        """
        if self._frozen:
            raise RegistrationError(f'Can not register {key!r}: registry is read-only')

        if existing := self._items.get(key):
            raise DuplicatePatternError(key, origin=existing.origin)

        self._items[key] = item

        return item

    @staticmethod
    def _compile(pattern: str) -> 'Pattern[str]':
        """Compile a pattern string.

        Raises:
            InvalidPatternError: If the pattern is empty or invalid.
        """
        if not pattern:
            raise InvalidPatternError('Pattern must not be empty')

        try:
            return regexp(pattern)

        except RegexError as base:
            raise InvalidPatternError(f'Pattern {pattern!r} is invalid: {base}') from base


class PatternRegistry(BaseRegistry[StepDefinition]):
    """Registry of step definitions keyed by pattern string."""

    def register(self, pattern: str, handler: 'StepHandler',
                 arity: int | None = None,
                 keyword: 'Keyword' = DEFAULT_KEYWORD) -> StepDefinition:
        """Register a step definition.

        The keyword category is advisory metadata only: it never
        participates in matching or in uniqueness.

        Args:
            pattern: Regular expression matched against step texts.
            handler: Callable invoked with bound arguments.
            arity: Expected number of captured arguments. Derived from
                the capture groups of the pattern when omitted.
            keyword: Keyword category of the declaration.

        Returns:
            The registered definition.

        Raises:
            DuplicatePatternError: If the pattern string is already registered.
            InvalidPatternError: If the pattern is invalid or the arity
                does not match its capture groups.
            RegistrationError: If the handler is not callable or the
                registry is read-only.
        """
        if pattern in self._items:
            raise DuplicatePatternError(pattern, origin=self._items[pattern].origin)

        regex = self._compile(pattern)
        if arity is None:
            arity = regex.groups
        elif arity != regex.groups:
            raise InvalidPatternError(
                f'Pattern {pattern!r} captures {regex.groups} arguments, expected {arity}',
            )

        try:
            definition = StepDefinition(
                keyword=keyword,
                pattern=pattern,
                regex=regex,
                handler=handler,
                arity=arity,
            )

        except ValidationError as base:
            raise RegistrationError(f'Invalid step definition for {pattern!r}') from base

        self._insert(pattern, definition)
        logger.debug('Registered step definition %s from %s', definition, definition.origin)

        return definition

    def lookup(self, text: str) -> list[Candidate]:
        """Evaluate every registered pattern against a step text.

        Args:
            text: Step text without keyword.

        Returns:
            All matching definitions with their captures, in
            registration order.
        """
        candidates: list[Candidate] = []
        for definition in self._items.values():
            captures = definition.match(text)
            if captures is not None:
                candidates.append((definition, captures))

        return candidates


class TransformRegistry(BaseRegistry[TransformRule]):
    """Registry of transform rules keyed by pattern string.

    Table-signature rules are keyed by their normalized signature, so
    `table:name, email` and `table:name,email` are the same rule.
    """

    def register(self, pattern: str, handler: 'TransformHandler') -> TransformRule:
        """Register a transform rule.

        Args:
            pattern: Value regular expression, or a `table:`-prefixed
                comma-separated column signature.
            handler: Pure mapping from a raw value to a replacement value.

        Returns:
            The registered rule.

        Raises:
            DuplicatePatternError: If the pattern string is already registered.
            InvalidPatternError: If the pattern is invalid.
            RegistrationError: If the handler is not callable or the
                registry is read-only.
        """
        if is_table_signature(pattern):
            signature = normalize_signature(pattern)
            if not signature:
                raise InvalidPatternError(f'Table signature {pattern!r} has no columns')
            key = f'{TABLE_PREFIX}{signature}'
            fields = {'signature': signature}
        else:
            key = pattern
            fields = {'regex': self._compile(pattern)}

        if key in self._items:
            raise DuplicatePatternError(key, origin=self._items[key].origin)

        try:
            rule = TransformRule(pattern=key, handler=handler, **fields)  # type: ignore[arg-type]

        except ValidationError as base:
            raise RegistrationError(f'Invalid transform for {pattern!r}') from base

        self._insert(key, rule)
        logger.debug('Registered transform %s from %s', rule, rule.origin)

        return rule

    def find_value(self, value: str) -> list[tuple[TransformRule, 'Match[str]']]:
        """Find all value rules matching a captured value."""
        found: list[tuple[TransformRule, Match[str]]] = []
        for rule in self._items.values():
            if match := rule.match_value(value):
                found.append((rule, match))

        return found

    def find_table(self, table: 'Table') -> TransformRule | None:
        """Find the table rule matching a table column signature."""
        return self._items.get(f'{TABLE_PREFIX}{normalize_signature(table.signature)}')
