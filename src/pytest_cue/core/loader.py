"""Step library discovery and registration infrastructure.

This module defines a mixin responsible for discovering, loading, and
registering step libraries exposed via Python entry points or explicit
`module:attribute` references.

In relaxed mode a library that can not be imported is reported as a
warning and loading continues. Once a library is loaded, its
declarations are always registered strictly: duplicate or invalid
patterns abort the registration pass.
"""

from importlib import import_module
from logging import getLogger
from typing import TYPE_CHECKING
from warnings import warn

from pytest_cue.errors import LibraryError, LibraryWarning
from pytest_cue.extensions import StepLibrary

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint

if TYPE_CHECKING:
    from .registry import PatternRegistry, TransformRegistry

logger = getLogger(__name__)

#: Entry point group of step libraries.
ENTRYPOINT_GROUP = 'cue_steps'


class LibraryLoaderMixin:
    """Mixin defining step library loading behavior.

    Attributes:
        strict_mode: If True, any library loading issue raises an error.
            If False, issues are emitted as warnings and loading continues.
    """

    strict_mode: bool = True

    steps: 'PatternRegistry'
    transforms: 'TransformRegistry'

    libraries: dict[str, StepLibrary]

    def add_library(self, library: StepLibrary,
                    entrypoint: 'EntryPoint | None' = None) -> None:
        """Register all declarations of a step library.

        Loading the same library object twice is a no-op.

        Args:
            library: Declarative step library.
            entrypoint: Entry point from which the library was loaded,
                if applicable. Used for diagnostics and warnings.

        Raises:
            LibraryError: If another library with the same name is
                already loaded, in strict mode.
            RegistrationError: If a declaration can not be registered.
        """
        if (loaded := self.libraries.get(library.name)) is not None:
            if loaded is library:
                return None
            if error := self.emit_library_issue(
                f'Library {library.name!r} is shadowing an existing',
                entrypoint,
            ):
                raise error
            return None

        for declaration in library.steps:
            self.steps.register(
                declaration.pattern,
                declaration.handler,
                arity=declaration.arity,
                keyword=declaration.keyword,
            )

        for transform in library.transforms:
            self.transforms.register(transform.pattern, transform.handler)

        self.libraries[library.name] = library
        logger.debug(
            'Loaded library %r: %d steps, %d transforms',
            library.name,
            len(library.steps),
            len(library.transforms),
        )

        return None

    def emit_library_issue(self, message: str,
                           entrypoint: 'EntryPoint | None' = None) -> Exception | None:
        """Emit a library warning or return the exception.

        Args:
            message: Warning message to emit.
            entrypoint: Entry point associated with the issue, if applicable.

        Returns:
            LibraryError on strict mode, otherwise `None`
                with producing a LibraryWarning.
        """
        if self.strict_mode:
            return LibraryError(message, entrypoint=entrypoint)

        warn(message, category=LibraryWarning, stacklevel=2)

        return None

    def _accept(self, library: object, source: str,
                entrypoint: 'EntryPoint | None' = None) -> None:
        """Register a loaded object if it is a step library."""
        if not isinstance(library, StepLibrary):
            if error := self.emit_library_issue(
                f'Loaded from {source} object is not a step library',
                entrypoint,
            ):
                raise error
            return None

        self.add_library(library, entrypoint)

        return None

    def _load_entrypoint(self, entrypoint: 'EntryPoint') -> None:
        """Load and register a single library entry point.

        Raises:
            LibraryError: If any loading issues occur on strict mode.
        """
        try:
            library = entrypoint.load()

        except Exception as base:
            if error := self.emit_library_issue(
                f'Failed to load entrypoint {entrypoint.name!r}',
                entrypoint,
            ):
                raise error from base
            return None

        self._accept(library, f'entrypoint {entrypoint.name!r}', entrypoint)

        return None

    def load_reference(self, reference: str) -> None:
        """Load and register a library from a `module:attribute` reference.

        Args:
            reference: Import path of the module and the attribute
                holding the library, separated by a colon.

        Raises:
            LibraryError: If any loading issues occur on strict mode.
        """
        module_name, _, attribute = reference.partition(':')
        if not module_name or not attribute:
            if error := self.emit_library_issue(
                f'Library reference {reference!r} must look like "module:attribute"',
            ):
                raise error
            return None

        try:
            library = getattr(import_module(module_name), attribute)

        except Exception as base:
            if error := self.emit_library_issue(
                f'Failed to load library reference {reference!r}',
            ):
                raise error from base
            return None

        self._accept(library, f'reference {reference!r}')

        return None

    def clear_libraries(self) -> None:
        """Forget all loaded libraries and their registrations."""
        self.libraries = {}
        self.steps.clear()
        self.transforms.clear()

    def load_libraries(self) -> None:
        """Load libraries via entry points and register their declarations.

        Discovers libraries from the `cue_steps` entry point group.

        Raises:
            LibraryError: If any loading issues occur on strict mode.
        """
        from importlib.metadata import entry_points  # noqa: PLC0415

        for entrypoint in entry_points().select(group=ENTRYPOINT_GROUP):
            self._load_entrypoint(entrypoint)
