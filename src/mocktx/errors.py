"""Exception taxonomy for the template pipeline.

Every pipeline failure is a TemplateError carrying the error kind, the stage
that raised it and the file it concerns. The underlying exception, when
there is one, is chained as ``__cause__``.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

from mocktx.codes import ErrorKind, Stage


class TemplateError(ValueError):
    """Base class for all template pipeline failures."""

    kind: ErrorKind
    stage: Stage

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.message = message
        self.path = Path(path) if path is not None else None
        super().__init__(self._format())

    def _format(self) -> str:
        if self.path is None:
            return f"[{self.stage.value}] {self.message}"
        return f"[{self.stage.value}] {self.message} ({self.path})"


class TemplateIOError(TemplateError):
    """Raised when the template file itself cannot be read."""

    kind = ErrorKind.IO_ERROR
    stage = Stage.LOAD


class CompletionError(TemplateError):
    """Raised when template text is too malformed to auto-complete."""

    kind = ErrorKind.COMPLETION_ERROR
    stage = Stage.COMPLETE


class EmbedError(TemplateError):
    """Raised when an embedding marker cannot be resolved.

    ``path`` is the first offending file; ``paths`` lists every unreadable
    file found in the same pass.
    """

    kind = ErrorKind.EMBED_ERROR
    stage = Stage.EMBED

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        paths: Sequence[Union[str, Path]] = (),
    ):
        self.paths: List[Path] = [Path(p) for p in paths]
        if path is None and self.paths:
            path = self.paths[0]
        super().__init__(message, path)


class SchemaError(TemplateError):
    """Raised when resolved text does not match the mock transaction schema."""

    kind = ErrorKind.SCHEMA_ERROR
    stage = Stage.PARSE


class PolicyError(TemplateError):
    """Raised when a completion policy is invalid."""

    kind = ErrorKind.POLICY_ERROR
    stage = Stage.CONFIG
