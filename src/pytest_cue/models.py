"""Base Pydantic models for engine records.

This module defines the foundational model classes used by all data
structures of the engine. It enforces immutability and strict schema
validation to guarantee that registered definitions, step texts and
outcomes are deterministic and safe to share within a run.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for all engine records.

    This class serves as the root for all Pydantic models representing
    step texts, definitions, transform rules, arguments and outcomes.

    Design principles enforced by this model:
        - Immutability: records cannot be modified after creation.
          Registries are populated once and then only read, and outcomes
          are produced once per step.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos in declarations.

    Handlers, compiled patterns and exceptions are stored as arbitrary
    types and are compared by identity.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    This class serves as the root for all settings models responsible for
    resolving runtime configuration (for example, environment variables,
    CI-provided values, or local overrides).

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
          This guarantees consistent behavior during scenario execution.
        - Tolerant schema handling: unknown or extra fields are ignored.
          This allows the surrounding environment to contain unrelated
          variables without breaking configuration resolution.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
