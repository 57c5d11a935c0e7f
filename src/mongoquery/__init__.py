"""
mongoquery compiles URL query parameters into MongoDB query descriptors.

It exposes the top-level `parse` function and `MongoQueryParser`, the
`MongoQuery` descriptor model, and the filter DSL helpers for direct use.
"""

from .exceptions import FilterParseError, InvalidTokenError, MongoQueryError
from .parser import MongoQueryParser, mongo_query, parse
from .querydsl import FilterCompiler, ValueClassifier, classify, compile_filter
from .schema import MongoQuery, PopulateSpec
from .utils import parse_query_string, sanitize_key

__version__ = "0.1.0"

__all__ = [
    "MongoQueryParser",
    "MongoQuery",
    "PopulateSpec",
    "FilterCompiler",
    "ValueClassifier",
    "MongoQueryError",
    "FilterParseError",
    "InvalidTokenError",
    "parse",
    "mongo_query",
    "classify",
    "compile_filter",
    "parse_query_string",
    "sanitize_key",
]
