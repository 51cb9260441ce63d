"""Step matching and execution engine for behaviour-driven scenarios.

The `pytest_cue` package resolves human-readable scenario steps against
a registry of step definitions and executes them with pytest.

Key features:
- regular-expression step definitions collected into explicit registries;
- ambiguity, redundancy and undefined-step detection;
- a pluggable value transformation pipeline for captured arguments;
- outcome classification with skip propagation and chained steps;
- YAML scenario files collected as pytest test items.

Step libraries are declared explicitly and loaded before any scenario
runs, so independent engines never share global state.
"""
