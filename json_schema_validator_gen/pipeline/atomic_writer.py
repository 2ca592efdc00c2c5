"""
Atomic output for generated modules.

A fatal error never leaves a partial output file behind: the module is
checked first, then staged next to the destination and moved over it in
a single rename.
"""

from __future__ import annotations

import ast
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from .errors import SchemaGenerationError

logger = logging.getLogger(__name__)


def check_python_source(source: str) -> None:
    """
    Make sure generated source parses.

    Raises:
        SchemaGenerationError: If the source has a syntax error
    """
    try:
        ast.parse(source)
    except SyntaxError as e:
        raise SchemaGenerationError(f"Generated Python code is not valid: {e}") from e


class AtomicWriter:
    """Writes a generated module in one step, or not at all."""

    def __init__(self, check_source: Callable[[str], None] | None = None):
        """
        Args:
            check_source: Called with the content before anything touches
                the disk; raises to abort the write
        """
        self._check_source = check_source or check_python_source

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """
        Replace path with content.

        Args:
            path: Destination module
            content: Full module source
            validate: Run the source check first

        Raises:
            SchemaGenerationError: If the source check fails
            OSError: If staging or renaming fails
        """
        if validate:
            self._check_source(content)

        path.parent.mkdir(parents=True, exist_ok=True)
        # Staged in the destination directory so the rename stays on one filesystem
        fd, staged_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        staged = Path(staged_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as staged_file:
                staged_file.write(content)
            os.replace(staged, path)
        except BaseException:
            staged.unlink(missing_ok=True)
            raise
        logger.debug("Wrote %s (%d bytes)", path, len(content))


def write_plain(path: Path, content: str) -> None:
    """Write content directly, for configurations that disable atomic writes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
