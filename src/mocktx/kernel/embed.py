"""Embedding marker resolution for template text.

Markers have the form ``{{ <kind> <argument> }}`` (the spaces after ``{{``
and before ``}}`` are optional) and are replaced textually:

- ``{{ data PATH }}``     -> 0x-hex of the file bytes
- ``{{ hash PATH }}``     -> 0x-hex CKB hash of the file bytes
- ``{{ def_type NAME }}`` -> the enclosing JSON string becomes a Type ID script
- ``{{ ref_type NAME }}`` -> 0x-hex script hash of the Type ID script NAME

Relative paths resolve against the template's directory.
"""

import logging
import re
from pathlib import Path
from typing import Callable, Dict, List, Pattern, Tuple, TypeVar, Union

from mocktx._internal.canonical_json import pretty_dumps
from mocktx.errors import EmbedError
from mocktx.kernel.hash_utils import hash_file, to_hex, type_id_script, type_id_script_hash


logger = logging.getLogger(__name__)

T = TypeVar("T")


MARKERS: Dict[str, Pattern[str]] = {
    "data": re.compile(r"\{\{ ?data (.+?) ?\}\}"),
    "hash": re.compile(r"\{\{ ?hash (.+?) ?\}\}"),
    # Swallows the surrounding quotes: the replacement is a JSON object
    "def_type": re.compile(r'"?\{\{ ?def_type (.+?) ?\}\}"?'),
    "ref_type": re.compile(r"\{\{ ?ref_type (.+?) ?\}\}"),
}


class Embed:
    """Resolves every embedding marker of one template.

    Constructed once per template path; ``replace_all`` runs the passes in
    order (data, hash, def_type collection, def_type, ref_type) and returns
    the fully resolved text.
    """

    def __init__(self, path: Union[str, Path], data: str):
        self.path = Path(path)
        self.data = data
        self.type_id_dict: Dict[str, str] = {}
        self.replaced = 0

    def resolve_path(self, reference: str) -> Path:
        target = Path(reference)
        if target.is_absolute():
            return target
        return self.path.parent / target

    def _read_references(self, kind: str, read: Callable[[Path], T]) -> Dict[str, T]:
        """Apply ``read`` to every file referenced by ``kind`` markers.

        Each reference is read independently; all unreadable files are
        reported together in one EmbedError.
        """
        contents: Dict[str, T] = {}
        failures: List[Tuple[Path, OSError]] = []
        failed_refs = set()
        for match in MARKERS[kind].finditer(self.data):
            reference = match.group(1)
            if reference in contents or reference in failed_refs:
                continue
            target = self.resolve_path(reference)
            try:
                contents[reference] = read(target)
            except OSError as e:
                failed_refs.add(reference)
                failures.append((target, e))

        if failures:
            _, first_error = failures[0]
            reason = first_error.strerror or str(first_error)
            message = f"Cannot read file for '{kind}' marker: {reason}"
            if len(failures) > 1:
                others = ", ".join(str(p) for p, _ in failures[1:])
                message += f" (also unreadable: {others})"
            raise EmbedError(message, paths=[p for p, _ in failures]) from first_error
        return contents

    def _substitute(self, kind: str, render: Callable[[re.Match], str]) -> None:
        self.data, count = MARKERS[kind].subn(render, self.data)
        self.replaced += count
        if count:
            logger.debug("Replaced %d '%s' marker(s) in %s", count, kind, self.path)

    def replace_data(self) -> "Embed":
        contents = self._read_references("data", Path.read_bytes)
        self._substitute("data", lambda m: to_hex(contents[m.group(1)]))
        return self

    def replace_hash(self) -> "Embed":
        digests = self._read_references("hash", hash_file)
        self._substitute("hash", lambda m: digests[m.group(1)])
        return self

    def prelude_type_id(self) -> "Embed":
        """Register the script hash of every Type ID defined in the text."""
        for match in MARKERS["def_type"].finditer(self.data):
            name = match.group(1)
            if name in self.type_id_dict:
                raise EmbedError(f"Type ID '{name}' is defined more than once", self.path)
            self.type_id_dict[name] = type_id_script_hash(name)
        return self

    def replace_def_type(self) -> "Embed":
        self._substitute("def_type", lambda m: pretty_dumps(type_id_script(m.group(1))))
        return self

    def replace_ref_type(self) -> "Embed":
        undefined = sorted({
            m.group(1) for m in MARKERS["ref_type"].finditer(self.data)
            if m.group(1) not in self.type_id_dict
        })
        if undefined:
            raise EmbedError(f"Reference to undefined Type ID: {undefined}", self.path)
        self._substitute("ref_type", lambda m: self.type_id_dict[m.group(1)])
        return self

    def replace_all(self) -> str:
        """Replace every marker and return the resolved text.

        Raises:
            EmbedError: If a referenced file cannot be read or a Type ID
                        reference is undefined or defined twice
        """
        self.replace_data().replace_hash().prelude_type_id().replace_def_type().replace_ref_type()
        return self.data
