"""
AST-based code generation backends.

The type backend compiles schema nodes into TypedDict classes and type
aliases; the validator backend compiles them into validator functions.
Both build Python ast nodes through code_builder.
"""
