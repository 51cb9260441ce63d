"""Core step matching and execution engine.

This module wires the registries, matcher, binder, executor, chain
resolver and sequencer into a single engine.

The primary public entry point is `StepEngine`, which loads step
libraries into explicit registries and runs ordered scenario steps,
classifying each of them.
"""

from .binder import ArgumentBinder
from .chain import ChainResolver
from .engine import StepEngine
from .executor import Executor, Invocation
from .matcher import Matcher, MatchResult
from .pipeline import StepPipeline
from .registry import PatternRegistry, TransformRegistry
from .sequencer import RunSequencer
from .snippets import collect_snippets, make_snippet

__all__ = (
    'ArgumentBinder',
    'ChainResolver',
    'Executor',
    'Invocation',
    'MatchResult',
    'Matcher',
    'PatternRegistry',
    'RunSequencer',
    'StepEngine',
    'StepPipeline',
    'TransformRegistry',
    'collect_snippets',
    'make_snippet',
)
