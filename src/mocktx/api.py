"""Public API for mocktx.

High-level functions that run the whole template pipeline:

    load -> complete -> embed -> parse -> reconcile

`read_tx_template` raises the failing stage's TemplateError;
`resolve_template` returns the same outcome as an explicit result model.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Union

from pydantic import BaseModel

from mocktx.codes import ErrorKind, Stage
from mocktx.errors import TemplateError
from mocktx.kernel.completion import auto_complete
from mocktx.kernel.embed import Embed
from mocktx.kernel.mock_tx import ReprMockTransaction, parse_mock_tx
from mocktx.kernel.policy import DEFAULT_POLICY, CompletionPolicy
from mocktx.kernel.reconcile import reconcile
from mocktx._internal.io.policy import load_policy_from_path
from mocktx._internal.io.template import load_template_text


logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike, Path]
PolicyLike = Union[CompletionPolicy, PathLike, None]


def _normalize_path(path: PathLike) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


def _resolve_policy(policy: PolicyLike) -> CompletionPolicy:
    if policy is None:
        return DEFAULT_POLICY
    if isinstance(policy, CompletionPolicy):
        return policy
    return load_policy_from_path(_normalize_path(policy))


class PipelineIssue(BaseModel):
    """The terminal error of a failed pipeline run."""
    kind: ErrorKind
    stage: Stage
    path: Optional[str] = None  # File the error concerns (template, embedded file, policy)
    message: str
    paths: List[str] = []  # Every unreadable embedded file (EMBED_ERROR only)


class ResolutionResult(BaseModel):
    """Result of resolving one template."""
    ok: bool
    template: str
    mock_tx: Optional[ReprMockTransaction] = None  # Set only when ok
    error: Optional[PipelineIssue] = None  # Set only when not ok


def load_policy(path: PathLike) -> CompletionPolicy:
    """
    Load a completion policy from a JSON file.

    Raises:
        PolicyError: If the file is unreadable or the policy is invalid
    """
    return load_policy_from_path(_normalize_path(path))


def complete_template(template: PathLike, policy: PolicyLike = None) -> str:
    """
    Load a template and return its auto-completed text (no embedding).

    Raises:
        TemplateIOError: If the template cannot be read
        CompletionError: If the template cannot be analyzed
    """
    template_path = _normalize_path(template)
    text = load_template_text(template_path)
    return auto_complete(text, _resolve_policy(policy), template_path)


def read_tx_template(template: PathLike, policy: PolicyLike = None) -> ReprMockTransaction:
    """
    Run the full pipeline on a template file.

    Args:
        template: Path to the JSON template
        policy: CompletionPolicy, path to a policy JSON file, or None for the default

    Returns:
        Fully resolved, reconciled ReprMockTransaction

    Raises:
        TemplateIOError, CompletionError, EmbedError, SchemaError: From the
            failing stage; no partial result is produced
        PolicyError: If a policy path is given and cannot be loaded
    """
    template_path = _normalize_path(template)
    completion_policy = _resolve_policy(policy)

    text = load_template_text(template_path)
    text = auto_complete(text, completion_policy, template_path)

    embed = Embed(template_path, text)
    text = embed.replace_all()

    mock_tx = parse_mock_tx(text, template_path)
    mock_tx = reconcile(mock_tx)

    logger.debug(
        "Resolved %s: %d marker(s), %d cell dep(s), %d input(s)",
        template_path, embed.replaced, len(mock_tx.tx.cell_deps), len(mock_tx.tx.inputs),
    )
    return mock_tx


def _issue_from_error(error: TemplateError) -> PipelineIssue:
    return PipelineIssue(
        kind=error.kind,
        stage=error.stage,
        path=str(error.path) if error.path is not None else None,
        message=error.message,
        paths=[str(p) for p in getattr(error, "paths", [])],
    )


def resolve_template(template: PathLike, policy: PolicyLike = None) -> ResolutionResult:
    """
    Run the full pipeline and report the outcome as a ResolutionResult.

    Pipeline errors are returned, never raised. Exceptions that are not
    TemplateErrors (programming errors) still propagate.

    Args:
        template: Path to the JSON template
        policy: CompletionPolicy, path to a policy JSON file, or None for the default

    Returns:
        ResolutionResult with either mock_tx or error set
    """
    template_path = _normalize_path(template)
    try:
        mock_tx = read_tx_template(template_path, policy)
    except TemplateError as e:
        logger.debug("Pipeline failed for %s: %s", template_path, e)
        return ResolutionResult(ok=False, template=str(template_path), error=_issue_from_error(e))
    return ResolutionResult(ok=True, template=str(template_path), mock_tx=mock_tx)


def resolve_templates(
    templates: Iterable[PathLike],
    policy: PolicyLike = None,
    max_workers: Optional[int] = None,
) -> List[ResolutionResult]:
    """
    Resolve many independent templates concurrently.

    Each template runs its own pipeline; nothing is shared except the
    (immutable) policy, which is loaded once up front.

    Args:
        templates: Template paths
        policy: CompletionPolicy, path to a policy JSON file, or None for the default
        max_workers: Thread pool size (ThreadPoolExecutor default when None)

    Returns:
        One ResolutionResult per template, in input order

    Raises:
        PolicyError: If a policy path is given and cannot be loaded
    """
    completion_policy = _resolve_policy(policy)
    paths = [_normalize_path(t) for t in templates]
    if not paths:
        return []

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda p: resolve_template(p, completion_policy), paths))
