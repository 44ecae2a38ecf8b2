"""mocktx: resolve mock transaction templates into execution-ready fixtures."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("mocktx")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from mocktx.api import read_tx_template, resolve_template, resolve_templates, ResolutionResult
from mocktx.codes import ErrorKind, Stage
from mocktx.errors import (
    TemplateError,
    TemplateIOError,
    CompletionError,
    EmbedError,
    SchemaError,
    PolicyError,
)
from mocktx.kernel.mock_tx import ReprMockTransaction

__all__ = [
    "__version__",
    "read_tx_template",
    "resolve_template",
    "resolve_templates",
    "ResolutionResult",
    "ReprMockTransaction",
    "ErrorKind",
    "Stage",
    "TemplateError",
    "TemplateIOError",
    "CompletionError",
    "EmbedError",
    "SchemaError",
    "PolicyError",
]
