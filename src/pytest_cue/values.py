"""Core type definitions for handlers and captured values.

This module defines the callable shapes accepted by the registries and
the raw value types produced by pattern matching. Handlers are opaque
to the engine: it only invokes them and classifies what they return.
"""

from collections.abc import Callable
from typing import Any

#: A value in runtime represents any Python object returned by
#: user-defined handlers or transforms prior to classification.
type RuntimeValue = Any

#: Step handler. Receives bound arguments positionally: captured
#: groups in left-to-right order, then the attached table or block.
type StepHandler = Callable[..., RuntimeValue]

#: Transform handler. Receives the capture groups of its own pattern
#: (or the whole raw value when the pattern has none), or a table.
type TransformHandler = Callable[..., RuntimeValue]

#: Raw captured value. Optional groups that did not participate
#: in the match are represented by `None`.
type Capture = str | None

#: Ordered captured values of a single match.
type Captures = tuple[Capture, ...]

SCALARS = (str, bytes, int, float, bool)
MAPPINGS = (dict,)
SEQUENCES = (list, tuple, set, frozenset)
