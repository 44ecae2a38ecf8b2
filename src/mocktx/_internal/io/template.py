"""Template I/O helpers (internal)."""

import logging
from pathlib import Path
from typing import Union

from mocktx.errors import TemplateIOError


logger = logging.getLogger(__name__)


def load_template_text(path: Union[str, Path]) -> str:
    """Read raw template text from a file path.

    Raises:
        TemplateIOError: If the file is missing, unreadable or not UTF-8
    """
    template_path = Path(path)
    try:
        text = template_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise TemplateIOError("Template file not found", template_path) from e
    except UnicodeDecodeError as e:
        raise TemplateIOError(f"Template is not valid UTF-8: {e.reason}", template_path) from e
    except OSError as e:
        raise TemplateIOError(f"Failed to read template: {e.strerror or e}", template_path) from e

    logger.debug("Loaded template %s (%d chars)", template_path, len(text))
    return text
