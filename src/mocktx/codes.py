"""Error kind and pipeline stage constants for mocktx.api.

These constants prevent stringly-typed error codes and ensure
client code matches on the correct kinds.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Terminal error kinds reported by the template pipeline."""

    IO_ERROR = "IO_ERROR"
    COMPLETION_ERROR = "COMPLETION_ERROR"
    EMBED_ERROR = "EMBED_ERROR"
    SCHEMA_ERROR = "SCHEMA_ERROR"

    # Configuration (raised before the pipeline starts)
    POLICY_ERROR = "POLICY_ERROR"


class Stage(str, Enum):
    """Pipeline stages that can fail, in execution order (reconciliation is total)."""

    LOAD = "load"
    COMPLETE = "complete"
    EMBED = "embed"
    PARSE = "parse"

    # Not a pipeline stage: loading the completion policy
    CONFIG = "config"
