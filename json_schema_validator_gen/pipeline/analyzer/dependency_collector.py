"""
Dependency collection across $ref graphs.

Expands the requested pointers into every pointer transitively reachable
through local $ref values. Traversal is depth-first and cycle-safe: a
pointer is marked visited before its own references are followed.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import PointerError
from .reference_resolver import ROOT_POINTER, get_schema_at_path, is_local_ref

logger = logging.getLogger(__name__)


def extract_refs(schema: Any) -> list[str]:
    """
    Recursively extract local $ref values from a raw schema.

    Walks through nested objects and lists. Non-local references are
    logged and skipped.

    Args:
        schema: The raw schema to scan

    Returns:
        List of local pointers in discovery order (may contain duplicates)
    """
    refs: list[str] = []

    def traverse(obj: Any) -> None:
        if isinstance(obj, list):
            for item in obj:
                traverse(item)
            return

        if not isinstance(obj, dict):
            return

        ref = obj.get("$ref")
        if isinstance(ref, str):
            if is_local_ref(ref):
                refs.append(ref)
            else:
                logger.warning("External reference not supported: %s", ref)

        for value in obj.values():
            traverse(value)

    traverse(schema)
    return refs


def collect_dependencies(root_schema: Any, target_paths: list[str]) -> list[str]:
    """
    Collect all pointers that must be generated for the given targets.

    Args:
        root_schema: The raw schema document
        target_paths: Requested pointers (e.g., ["#/$defs/User"])

    Returns:
        Ordered list of pointers: the targets plus all of their dependencies.
        Order is the depth-first preorder of the traversal.
    """
    collected: dict[str, None] = {}
    visited: set[str] = set()
    targets = set(target_paths)

    def visit(path: str) -> None:
        if path in visited:
            return
        visited.add(path)

        try:
            schema = get_schema_at_path(root_schema, path)
        except PointerError as e:
            logger.warning("Could not resolve schema at path %r: %s", path, e)
            if path in targets:
                collected[path] = None
            return

        collected[path] = None
        for ref in extract_refs(schema):
            visit(ref)

    for target_path in target_paths:
        visit(target_path)

    logger.debug("Collected %d pointer(s): %s", len(collected), ", ".join(collected))
    return list(collected)
