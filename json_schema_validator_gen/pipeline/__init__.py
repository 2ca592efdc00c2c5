"""
Pipeline - AST-based JSON Schema to validator generator.

The generator runs in phases over one schema document:

1. Phase 1 (Analyzer): Parse targets and collect the $ref dependency closure
2. Phase 2 (Analyzer): Resolve type, validator and parse names for every pointer
3. Phase 3 (Parser): Parse each pointer's schema into Schema AST nodes
4. Phase 4 (AST Backends): Emit type declarations and validator functions
5. Phase 5 (Formatter): Optional post-processing with black
6. Phase 6 (Writer): Atomic write of the assembled module
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .config import FormatterConfig, GeneratorConfig, OutputConfig
from .errors import (
    GeneratorError,
    NameCollisionError,
    PointerError,
    SchemaGenerationError,
    TargetParseError,
)
from .generator import GeneratedEntry, PipelineGenerator, generate, load_schema

__all__ = [
    "PipelineGenerator",
    "GeneratedEntry",
    "generate",
    "load_schema",
    "GeneratorConfig",
    "FormatterConfig",
    "OutputConfig",
    "AtomicWriter",
    "GeneratorError",
    "NameCollisionError",
    "PointerError",
    "SchemaGenerationError",
    "TargetParseError",
]
