"""JSON Schema Validator Generator

A Python package for generating typed validators from JSON Schema definitions.
Each selected schema pointer becomes a type declaration and a validator
function that reports every issue with its path, in one importable module.
"""

__version__ = "1.0.0"
__author__ = "François Lagunas"

from .pipeline import (
    GeneratorConfig,
    GeneratorError,
    NameCollisionError,
    PipelineGenerator,
    generate,
)

__all__ = [
    "PipelineGenerator",
    "GeneratorConfig",
    "GeneratorError",
    "NameCollisionError",
    "generate",
]
