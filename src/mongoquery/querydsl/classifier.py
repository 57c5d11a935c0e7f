"""Value classifier.

Turns one raw query-string value into a filter node. Values are matched
against an ordered rule table; the first rule whose predicate accepts the
token builds the node. The order matters because several token shapes are
syntactic subsets of later ones (a comparison tag is also a brace group, a
date is also a plain string, ...).

Typical results:

- `"42"` -> `42`
- `"{gt}5{lt}10"` -> `{"$gt": 5, "$lt": 10}`
- `"a|b"` -> `{"$or": ["a", "b"]}`
- `"*abc"` -> `{"$regex": "^abc", "$options": "i"}`

Malformed values build `None` so the caller can drop the filter. In strict
mode they raise `FilterParseError` instead.
"""

from __future__ import annotations

import re
from functools import reduce
from typing import TYPE_CHECKING, Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from ..constants import BSON_TYPES, COMPARISON_TAGS, ELEM_MATCH_TAG, ELEMENT_TAGS, LOGICAL_TAGS, REGEX_TAG
from ..exceptions import FilterParseError, InvalidConfigError, InvalidTokenError
from ..logger import get_logger
from ..settings import settings
from ..types import FilterNode
from ..utils import (
    is_number_string,
    parse_iso_date,
    parse_json_container,
    parse_query_string,
    sanitize_regex,
    to_iso_string,
    to_number,
)

if TYPE_CHECKING:
    from .compiler import FilterCompiler

__all__ = (
    "ValueClassifier",
    "classify",
    "merge_operator_nodes",
)

logger = get_logger(__name__)

_ELEM_MATCH_PREFIX = "{" + ELEM_MATCH_TAG + "}"
_REGEX_PREFIX = "{" + REGEX_TAG + "}"
_LOGICAL_PREFIXES = tuple("{" + tag + "}" for tag in LOGICAL_TAGS)
_COMPARISON_PREFIXES = tuple("{" + tag + "}" for tag in COMPARISON_TAGS)
_ELEMENT_PREFIXES = tuple("{" + tag + "}" for tag in ELEMENT_TAGS)

# Segments of word chars, whitespace, @ . - and braces joined by single pipes
_OR_RE = re.compile(r"^(?:[{}\w\s@.\-]\|?)+[{}\w@.\-]$")
_BRACE_SPLIT_RE = re.compile(r"(?=\{)")
_TAG_GROUP_RE = re.compile(r"^\{\w+\}")


class Rule(NamedTuple):
    """One entry of the classification table."""

    name: str
    matches: Callable[[str], bool]
    build: Callable[["ValueClassifier", str, int], Optional[FilterNode]]


def split_tag(token: str) -> Tuple[str, str]:
    """Split `"{op}value"` into `("op", "value")`."""
    end = token.index("}")
    return token[1:end], token[end + 1 :]


def split_brace_groups(token: str) -> List[str]:
    """Split before every `{`: `"{gt}5{lt}10"` -> `["{gt}5", "{lt}10"]`."""
    return [part for part in _BRACE_SPLIT_RE.split(token) if part]


def merge_operator_nodes(nodes: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Fold operator dicts into one; a repeated operator keeps the last value."""
    return reduce(lambda acc, node: {**acc, **node}, nodes, {})


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _is_json(token: str) -> bool:
    return parse_json_container(token) is not None


def _is_elem_match(token: str) -> bool:
    return token.startswith(_ELEM_MATCH_PREFIX)


def _is_logical(token: str) -> bool:
    return token.startswith(_LOGICAL_PREFIXES)


def _is_or(token: str) -> bool:
    return "|" in token and bool(_OR_RE.match(token))


def _is_and(token: str) -> bool:
    # Two or more "{op}value" groups and nothing before the first one
    groups = split_brace_groups(token)
    return len(groups) > 1 and all(_TAG_GROUP_RE.match(group) for group in groups)


def _is_comparison(token: str) -> bool:
    return token.startswith(_COMPARISON_PREFIXES)


def _is_element(token: str) -> bool:
    return token.startswith(_ELEMENT_PREFIXES)


def _is_date(token: str) -> bool:
    return parse_iso_date(token) is not None


def _is_boolean(token: str) -> bool:
    return token in ("true", "false")


def _always(token: str) -> bool:
    return True


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def _build_json(clf: "ValueClassifier", token: str, depth: int) -> FilterNode:
    return parse_json_container(token)  # type: ignore[return-value]


def _build_elem_match(clf: "ValueClassifier", token: str, depth: int) -> Optional[FilterNode]:
    op, value = split_tag(token)
    if not value:
        return clf.reject(token, "empty_value")
    subquery = parse_query_string(value.replace("#", "&"), multi=False)
    return {f"${op}": clf.compiler.compile(subquery, depth=depth + 1)}


def _build_logical(clf: "ValueClassifier", token: str, depth: int) -> Optional[FilterNode]:
    op, value = split_tag(token)
    inner = clf.classify(value, depth=depth + 1)
    if inner is None:
        return clf.reject(token, "invalid_operand")
    return {f"${op}": inner}


def _build_or(clf: "ValueClassifier", token: str, depth: int) -> Optional[FilterNode]:
    nodes = [node for node in (clf.classify(seg, depth=depth + 1) for seg in token.split("|")) if node is not None]
    if not nodes:
        return clf.reject(token, "empty_or")
    return {"$or": nodes}


def _build_and(clf: "ValueClassifier", token: str, depth: int) -> Optional[FilterNode]:
    nodes = [clf.classify(part, depth=depth + 1) for part in split_brace_groups(token)]
    operators = [node for node in nodes if isinstance(node, dict)]
    if not operators:
        return clf.reject(token, "no_operators")
    return merge_operator_nodes(operators)


def _build_comparison(clf: "ValueClassifier", token: str, depth: int) -> Optional[FilterNode]:
    op, value = split_tag(token)
    if not value:
        return clf.reject(token, "empty_value")
    inner = clf.classify(value, depth=depth + 1)
    if inner is None:
        return clf.reject(token, "invalid_operand")
    return {f"${op}": inner}


def _build_element(clf: "ValueClassifier", token: str, depth: int) -> Optional[FilterNode]:
    op, value = split_tag(token)
    if op == "exists":
        if value not in ("true", "false"):
            return clf.reject(token, "invalid_exists")
        return {"$exists": value == "true"}
    if value not in BSON_TYPES:
        return clf.reject(token, "invalid_type")
    return {"$type": value}


def _build_date(clf: "ValueClassifier", token: str, depth: int) -> FilterNode:
    return to_iso_string(parse_iso_date(token))  # type: ignore[arg-type]


def _build_number(clf: "ValueClassifier", token: str, depth: int) -> FilterNode:
    return to_number(token)


def _build_boolean(clf: "ValueClassifier", token: str, depth: int) -> FilterNode:
    return token == "true"


def _build_text(clf: "ValueClassifier", token: str, depth: int) -> FilterNode:
    if "*" not in token and not token.startswith(_REGEX_PREFIX):
        return token
    if token.startswith(_REGEX_PREFIX):
        token = token[len(_REGEX_PREFIX) :]
    value = sanitize_regex(token)
    pattern = value
    if token.startswith("*"):
        pattern = f"^{value}"
        if token.endswith("*"):
            pattern = pattern[1:]
    elif token.endswith("*"):
        pattern = f"{value}$"
    return {"$regex": pattern, "$options": "i"}


RULES: Tuple[Rule, ...] = (
    Rule("json", _is_json, _build_json),
    Rule("elem_match", _is_elem_match, _build_elem_match),
    Rule("logical", _is_logical, _build_logical),
    Rule("or", _is_or, _build_or),
    Rule("and", _is_and, _build_and),
    Rule("comparison", _is_comparison, _build_comparison),
    Rule("element", _is_element, _build_element),
    Rule("date", _is_date, _build_date),
    Rule("number", is_number_string, _build_number),
    Rule("boolean", _is_boolean, _build_boolean),
    Rule("text", _always, _build_text),
)


class ValueClassifier:
    """Classify raw filter values using the ordered `RULES` table.

    Args:
        strict: Raise `FilterParseError` instead of returning None
        max_depth: Deepest allowed nesting of tags and sub-queries
        lenient_keys: Passed to the compiler used for `{elemMatch}` sub-queries
        compiler: Compiler used for `{elemMatch}` sub-queries (created lazily)

    Raises:
        InvalidConfigError: If `max_depth < 1`
    """

    rules: Tuple[Rule, ...] = RULES

    def __init__(
        self,
        *,
        strict: Optional[bool] = None,
        max_depth: Optional[int] = None,
        lenient_keys: Optional[bool] = None,
        compiler: Optional["FilterCompiler"] = None,
    ) -> None:
        self.strict = settings.MONGOQUERY_STRICT if strict is None else strict
        self.max_depth = settings.MONGOQUERY_MAX_DEPTH if max_depth is None else max_depth
        if self.max_depth < 1:
            raise InvalidConfigError(
                "Invalid config value", config_key="max_depth", value=self.max_depth, expected=">0"
            )
        self.lenient_keys = settings.MONGOQUERY_LENIENT_KEYS if lenient_keys is None else lenient_keys
        self._compiler = compiler

    @property
    def compiler(self) -> "FilterCompiler":
        if self._compiler is None:
            from .compiler import FilterCompiler

            self._compiler = FilterCompiler(
                strict=self.strict,
                max_depth=self.max_depth,
                lenient_keys=self.lenient_keys,
                classifier=self,
            )
        return self._compiler

    def classify(self, token: str, depth: int = 0) -> Optional[FilterNode]:
        """Classify one raw token; None means "drop this filter"."""
        if not isinstance(token, str):
            raise InvalidTokenError("Filter token must be a string", received=type(token).__name__)
        if not token:
            return self.reject(token, "empty_token")
        if depth > self.max_depth:
            return self.reject(token, "max_depth")
        for rule in self.rules:
            if rule.matches(token):
                return rule.build(self, token, depth)
        return None

    def reject(self, token: str, reason: str) -> None:
        if self.strict:
            raise FilterParseError("Invalid filter value", token=token, reason=reason)
        logger.debug("Dropping filter value %r (%s)", token, reason)
        return None


def classify(token: str, *, strict: Optional[bool] = None) -> Optional[FilterNode]:
    """Classify one raw token with default settings."""
    return ValueClassifier(strict=strict).classify(token)
