"""
MongoDB operator vocabulary and query-parameter constants.
"""

from typing import Dict, FrozenSet, List


class QueryKey:
    LIMIT = "limit"
    SKIP = "skip"
    PAGE = "page"
    SELECT = "select"
    SORT = "sort"
    POPULATE = "populate"


# Keys consumed by the pagination/projection/sort/populate builders
RESERVED_KEYS = (
    QueryKey.LIMIT,
    QueryKey.SKIP,
    QueryKey.PAGE,
    QueryKey.SELECT,
    QueryKey.SORT,
    QueryKey.POPULATE,
)

DEFAULT_LIMIT = 100
DEFAULT_SKIP = 0
DEFAULT_PAGE = 1

# Brace tags accepted in filter values, e.g. "{gt}5"
COMPARISON_TAGS = ("eq", "gt", "gte", "in", "lt", "lte", "ne", "nin")
LOGICAL_TAGS = ("and", "or", "not", "nor")
ELEMENT_TAGS = ("exists", "type")
ELEM_MATCH_TAG = "elemMatch"
REGEX_TAG = "regex"

BSON_TYPES = (
    "double",
    "string",
    "object",
    "array",
    "binData",
    "objectId",
    "bool",
    "date",
    "null",
    "regex",
    "javascript",
    "int",
    "timestamp",
    "long",
    "decimal",
    "minKey",
    "maxKey",
)

# Static reference table shared with the rest of the host system.
# Only part of it is wired into the filter grammar.
VALID_OPERATORS: Dict[str, object] = {
    "types": [
        "id",
        "string",
        "boolean",
        "integer",
        "float",
        "datetime",
        "date",
        "timestamp",
        "hash",
        "array",
        "subdocument",
        "subdocuments",
        "file",
        "MongoCode",
    ],
    "array_types": ["id", "string", "boolean", "integer", "float", "datetime", "date", "timestamp"],
    "check_types": ["write", "create", "read"],
    "reference_types": ["referenceOne", "referenceMany"],
    "query_operators": {
        "comparison": ["$eq", "$gt", "$gte", "$in", "$lt", "$lte", "$ne", "$nin"],
        "logical": ["$and", "$not", "$nor", "$or"],
        "element": ["$exists", "$type"],
        "evaluation": ["$expr", "$mod", "$regex", "$text", "$where"],
        "geospatial": ["$geoIntersects", "$geoWithin", "$near", "$nearSphere"],
        "array": ["$all", "$elemMatch", "$size"],
        "comment": ["$comment"],
    },
    "pack_types": ["create", "update", "insert", "delete", "undelete"],
    "update_operators": ["$set", "$unset", "$push", "$pullAll", "$pull", "$addToSet", "$inc"],
    "update_modifiers": ["$each"],
    "aggregate_stages": [
        "$facet",
        "$project",
        "$match",
        "$limit",
        "$skip",
        "$unwind",
        "$group",
        "$sort",
        "$geoNear",
        "$lookup",
        "$graphLookup",
        "$replaceRoot",
        "$addFields",
    ],
    "aggregate_stage_fields": {
        "$geoNear": [
            "spherical",
            "maxDistance",
            "query",
            "distanceMultiplier",
            "uniqueDocs",
            "near",
            "distanceField",
            "includeLocs",
            "minDistance",
        ],
        "$lookup": ["from", "localField", "foreignField", "let", "pipeline", "as"],
        "$graphLookup": [
            "from",
            "startWith",
            "connectFromField",
            "connectToField",
            "as",
            "maxDepth",
            "depthField",
            "restrictSearchWithMatch",
        ],
    },
}

QUERY_OPERATORS: Dict[str, List[str]] = VALID_OPERATORS["query_operators"]  # type: ignore[assignment]

_ALL_QUERY_OPERATORS: FrozenSet[str] = frozenset(op for ops in QUERY_OPERATORS.values() for op in ops)


def is_query_operator(symbol: str) -> bool:
    """Return True if `symbol` belongs to the published query-operator vocabulary."""
    return symbol in _ALL_QUERY_OPERATORS
