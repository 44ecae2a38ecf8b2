"""Completion policy I/O helpers (internal)."""

import json
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from mocktx.errors import PolicyError
from mocktx.kernel.policy import CompletionPolicy


def load_policy_from_path(path: Union[str, Path]) -> CompletionPolicy:
    """Load a completion policy from a JSON file path.

    Raises:
        PolicyError: If the file cannot be read or does not describe a valid policy
    """
    policy_path = Path(path)
    try:
        data = json.loads(policy_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise PolicyError(f"Failed to read policy: {e.strerror or e}", policy_path) from e
    except json.JSONDecodeError as e:
        raise PolicyError(f"Policy is not valid JSON: {e}", policy_path) from e

    try:
        return CompletionPolicy.model_validate(data)
    except ValidationError as e:
        raise PolicyError(f"Invalid completion policy: {e}", policy_path) from e
