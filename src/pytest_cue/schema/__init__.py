"""Data model of the step engine.

Defines immutable Pydantic models for step texts and their attached
arguments, registered definitions and transform rules, bound arguments,
execution outcomes and YAML scenario documents.
"""

from .arguments import Argument, RawArgument, TransformedArgument
from .definitions import StepDefinition, TransformRule
from .outcomes import (
    Failure,
    HandlerResult,
    OutcomeKind,
    Pending,
    ScenarioResult,
    StepOutcome,
    Success,
    exit_code,
)
from .scenarios import ScenarioDocument, StepEntry
from .steps import Attachment, Block, ChainedStep, StepText, Table

__all__ = (
    'Argument',
    'Attachment',
    'Block',
    'ChainedStep',
    'Failure',
    'HandlerResult',
    'OutcomeKind',
    'Pending',
    'RawArgument',
    'ScenarioDocument',
    'ScenarioResult',
    'StepDefinition',
    'StepEntry',
    'StepOutcome',
    'StepText',
    'Success',
    'Table',
    'TransformRule',
    'TransformedArgument',
    'exit_code',
)
