"""Filter compiler.

Compiles the filter part of a raw query mapping into a MongoDB filter tree:

- keys are sanitized field paths,
- string values go through the `ValueClassifier`,
- repeated keys (`?age={gt}1&age={lt}9`) merge into one operator dict,
- mapping values are taken as already-structured filters.

Keys whose value cannot be compiled are left out of the tree.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Dict, List, Optional

from ..constants import RESERVED_KEYS
from ..exceptions import InvalidTokenError
from ..logger import get_logger
from ..settings import settings
from ..types import FilterNode, FilterTree, RawQuery
from ..utils import sanitize_key
from .classifier import ValueClassifier, merge_operator_nodes

__all__ = (
    "FilterCompiler",
    "compile_filter",
)

logger = get_logger(__name__)


class FilterCompiler:
    """Compile raw query mappings into filter trees.

    The compiler and its classifier share their options, so `{elemMatch}`
    sub-queries are compiled with the same strictness and depth limit as
    the outer query.
    """

    def __init__(
        self,
        *,
        strict: Optional[bool] = None,
        max_depth: Optional[int] = None,
        lenient_keys: Optional[bool] = None,
        classifier: Optional[ValueClassifier] = None,
    ) -> None:
        self.lenient_keys = settings.MONGOQUERY_LENIENT_KEYS if lenient_keys is None else lenient_keys
        self.classifier = classifier or ValueClassifier(
            strict=strict,
            max_depth=max_depth,
            lenient_keys=self.lenient_keys,
            compiler=self,
        )

    @property
    def strict(self) -> bool:
        return self.classifier.strict

    def compile(self, raw: RawQuery, depth: int = 0) -> FilterTree:
        """Return the filter tree for `raw`, ignoring reserved keys.

        Args:
            raw: Decoded query mapping; it is not modified
            depth: Nesting level, used for `{elemMatch}` sub-queries

        Raises:
            InvalidTokenError: If `raw` is not a mapping
        """
        if not isinstance(raw, Mapping):
            raise InvalidTokenError("Raw query must be a mapping", received=type(raw).__name__)
        tree: FilterTree = {}
        for key, value in raw.items():
            # Reserved names are matched after sanitizing: "limit!" is "limit"
            path = sanitize_key(key, self.lenient_keys)
            if path in RESERVED_KEYS or value is None:
                continue
            node = self._compile_value(value, depth)
            if node is None:
                logger.debug("Dropping filter on %r", key)
                continue
            tree[path] = node
        return tree

    def _compile_value(self, value: Any, depth: int) -> Optional[FilterNode]:
        if isinstance(value, str):
            return self.classifier.classify(value, depth=depth)
        if isinstance(value, Mapping):
            return dict(value)
        if isinstance(value, Sequence):
            return self._compile_sequence(value, depth)
        # Numbers and other scalars are a caller bug; the classifier rejects them
        return self.classifier.classify(value, depth=depth)

    def _compile_sequence(self, values: Sequence[Any], depth: int) -> Optional[FilterNode]:
        """Merge repeated values of one key.

        When every value compiles to an operator dict they merge into one
        dict (implicit AND, last write wins). Otherwise the key keeps the
        list of compiled values.
        """
        nodes: List[FilterNode] = []
        for item in values:
            if item is None:
                continue
            node = self.classifier.classify(item, depth=depth)
            if node is not None:
                nodes.append(node)
        if not nodes:
            return None
        if all(isinstance(node, dict) for node in nodes):
            operators: List[Dict[str, Any]] = nodes  # type: ignore[assignment]
            return merge_operator_nodes(operators)
        return nodes


def compile_filter(raw: RawQuery, *, strict: Optional[bool] = None) -> FilterTree:
    """Compile the filter part of a raw query with default settings."""
    return FilterCompiler(strict=strict).compile(raw)
