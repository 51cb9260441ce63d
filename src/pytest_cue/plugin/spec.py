"""Pytest integration for YAML scenario files.

This module defines a custom pytest file collector that treats YAML
files as scenario files. Each YAML document of a file is validated as a
scenario and converted into a `ScenarioItem`.
"""

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError
from yaml import BaseLoader, load_all
from yaml.error import MarkedYAMLError

from pytest_cue.errors import CueError, ScenarioSchemaError
from pytest_cue.schema import ScenarioDocument

from .case import ScenarioItem

if TYPE_CHECKING:
    from collections.abc import Iterable
    from io import TextIOBase


class ScenarioFile(pytest.File):
    """Pytest file collector for YAML scenario files."""

    __test__ = False

    def collect(self) -> 'Iterable[ScenarioItem]':
        """Collect one pytest item per scenario of the file.

        Returns:
            Iterable of `ScenarioItem` instances for pytest execution.

        Raises:
            ScenarioSchemaError: If the file is not valid YAML or
                a scenario does not match the scenario schema.
        """
        with self.path.open('rt', encoding='utf-8') as content:
            documents = self.parse(content, filename=f'{self.path}')

        for document in documents:
            yield ScenarioItem.from_parent(
                self,
                name=document.scenario,
                document=document,
                engine=self.config.cue_engine,  # type: ignore[attr-defined]
            )

    @staticmethod
    def parse(content: 'TextIOBase | str', *,
              filename: str | None = None) -> list[ScenarioDocument]:
        """Parse a YAML stream into validated scenario documents.

        Empty documents are ignored. Scalars are kept as written, so
        `010` or `off` in a table stay text instead of becoming numbers
        or booleans.

        Args:
            content: YAML content as a string or file-like object.
            filename: Optional name of the source for diagnostics.

        Returns:
            Scenario documents in file order.

        Raises:
            ScenarioSchemaError: If YAML parsing or validation fails.
        """
        try:
            documents = list(load_all(content, Loader=BaseLoader))

        except MarkedYAMLError as base:
            raise ScenarioSchemaError.from_yaml_error(base) from base

        except CueError:
            raise

        except Exception as base:
            raise ScenarioSchemaError('Unexpected error') from base

        scenarios = []
        for position, document in enumerate(documents):
            if document is None or document == '':
                continue

            try:
                scenarios.append(ScenarioDocument.model_validate(document))

            except ValidationError as base:
                title = document.get('scenario') if isinstance(document, dict) else None
                raise ScenarioSchemaError.from_pydantic_error(
                    base,
                    data=document,
                    filename=filename,
                    scenario=title if isinstance(title, str) else f'#{position + 1}',
                ) from base

        return scenarios
