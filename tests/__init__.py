"""Test suite for the pytest-cue package.

This package contains unit and integration tests validating step
registration, matching, argument binding, execution outcomes, scenario
file parsing and pytest integration.
"""
