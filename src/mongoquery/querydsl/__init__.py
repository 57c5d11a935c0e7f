"""Filter DSL module.

Exports the value classifier and the filter compiler that turn bracket-tag
query values (`{gt}5`, `a|b`, `*abc`, ...) into MongoDB filter trees.
"""

from .classifier import ValueClassifier, classify
from .compiler import FilterCompiler, compile_filter

__all__ = (
    "FilterCompiler",
    "ValueClassifier",
    "classify",
    "compile_filter",
)
