"""
Analyzer module.

Contains pointer and target parsing, tuple detection, dependency
collection and name resolution.
"""

from __future__ import annotations

from .dependency_collector import collect_dependencies, extract_refs
from .name_resolver import NameRegistry, generate_validator_name, resolve_names
from .reference_resolver import get_schema_at_path, parse_ref
from .target_parser import Target, parse_target, parse_targets
from .tuple_detector import TupleInfo, detect_tuple

__all__ = [
    "collect_dependencies",
    "extract_refs",
    "NameRegistry",
    "generate_validator_name",
    "resolve_names",
    "get_schema_at_path",
    "parse_ref",
    "Target",
    "parse_target",
    "parse_targets",
    "TupleInfo",
    "detect_tuple",
]
