"""
Top-level query parser.

This module provides `MongoQueryParser`, which turns one decoded query-string
mapping into a `MongoQuery` descriptor: pagination, projection, sort,
optional populate, and the filter tree compiled by `querydsl`.

Typical usage:

    query = parse({"limit": "10", "page": "3", "age": "{gte}18"})
    collection.find(**query.find_kwargs())
"""

import functools
import inspect
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .constants import DEFAULT_PAGE, QueryKey
from .exceptions import InvalidConfigError
from .logger import Logger
from .querydsl.compiler import FilterCompiler
from .schema import MongoQuery, PopulateSpec
from .settings import settings
from .types import FilterTree, ProjectionMap, RawQuery, SortMap
from .utils import is_int_string, parse_query_string, sanitize_key, split_list

__all__ = (
    "MongoQueryParser",
    "parse",
    "mongo_query",
)


class MongoQueryParser:
    """Compile raw query mappings into `MongoQuery` descriptors.

    Attributes:
        default_limit: Limit used when `limit` is missing or invalid
        default_skip: Skip used when `skip` is missing or invalid
        populate: Whether the `populate` key is compiled
        compiler: Filter compiler shared by the filter and populate builders

    Raises:
        InvalidConfigError: If `default_limit < 1` or `default_skip < 0`
    """

    def __init__(
        self,
        *,
        default_limit: Optional[int] = None,
        default_skip: Optional[int] = None,
        populate: Optional[bool] = None,
        strict: Optional[bool] = None,
        max_depth: Optional[int] = None,
        lenient_keys: Optional[bool] = None,
    ) -> None:
        self.default_limit = default_limit if default_limit is not None else settings.MONGOQUERY_DEFAULT_LIMIT
        self.default_skip = default_skip if default_skip is not None else settings.MONGOQUERY_DEFAULT_SKIP
        if self.default_limit < 1:
            raise InvalidConfigError(
                "Invalid config value", config_key="default_limit", value=self.default_limit, expected=">0"
            )
        if self.default_skip < 0:
            raise InvalidConfigError(
                "Invalid config value", config_key="default_skip", value=self.default_skip, expected=">=0"
            )
        self.populate = settings.MONGOQUERY_ENABLE_POPULATE if populate is None else populate
        self.compiler = FilterCompiler(strict=strict, max_depth=max_depth, lenient_keys=lenient_keys)
        self.logger = Logger(self.__class__.__name__)

    @property
    def lenient_keys(self) -> bool:
        return self.compiler.lenient_keys

    def parse(self, query: Union[RawQuery, str, None]) -> MongoQuery:
        """Compile a raw query mapping (or query string) into a `MongoQuery`.

        The input mapping is never modified.
        """
        if query is None:
            query = {}
        elif isinstance(query, str):
            query = parse_query_string(query)

        limit, skip = self.get_pagination(query)
        result = MongoQuery(
            limit=limit,
            skip=skip,
            select=self.get_select(query),
            sort=self.get_sort(query),
            filter=self.get_filter(query),
            populate=self.get_populate(query) if self.populate else None,
        )
        if self.logger.enabled("DEBUG"):
            self.logger.debug(
                "Compiled query limit=%d skip=%d filter_keys=%s", result.limit, result.skip, list(result.filter)
            )
        return result

    # -------------------
    # Pagination
    # -------------------

    def _get_int(self, query: RawQuery, key: str, default: int) -> int:
        value = query.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if not value or not is_int_string(value):
            return default
        return int(value)  # type: ignore[arg-type]

    def get_pagination(self, query: RawQuery) -> Tuple[int, int]:
        """Return `(limit, skip)`.

        A truthy `page` always decides `skip`: `(page - 1) * limit` for
        pages above 1, otherwise 0.
        """
        limit = self._get_int(query, QueryKey.LIMIT, self.default_limit)
        if limit < 1:
            limit = self.default_limit
        if query.get(QueryKey.PAGE):
            page = self._get_int(query, QueryKey.PAGE, DEFAULT_PAGE)
            return limit, (page - 1) * limit if page > 1 else 0
        skip = self._get_int(query, QueryKey.SKIP, self.default_skip)
        if skip < 0:
            skip = self.default_skip
        return limit, skip

    # -------------------
    # Projection / sort
    # -------------------

    def _signed_map(self, raw: Any, positive: int, negative: int) -> Dict[str, int]:
        result: Dict[str, int] = {}
        for entry in split_list(raw):
            key = sanitize_key(entry.lstrip("-"), self.lenient_keys)
            if not key:
                continue
            result[key] = negative if entry.startswith("-") else positive
        return result

    def get_select(self, query: RawQuery) -> ProjectionMap:
        """`"name,-secret"` -> `{"name": 1, "secret": 0}`."""
        return self._signed_map(query.get(QueryKey.SELECT), 1, 0)

    def get_sort(self, query: RawQuery) -> SortMap:
        """`"name,-age"` -> `{"name": 1, "age": -1}`."""
        return self._signed_map(query.get(QueryKey.SORT), 1, -1)

    # -------------------
    # Populate / filter
    # -------------------

    def _populate_one(self, raw: str) -> PopulateSpec:
        path, select, filter_qs = (raw.split(";") + ["", ""])[:3]
        return PopulateSpec(
            path=sanitize_key(path, self.lenient_keys),
            select=self.get_select({QueryKey.SELECT: select}) if select and select != "all" else None,
            match=self.compiler.compile(parse_query_string(filter_qs)) if filter_qs else None,
        )

    def get_populate(self, query: RawQuery) -> Optional[Union[PopulateSpec, List[PopulateSpec]]]:
        """Compile `path;select;filter` (or a list of them) into `PopulateSpec`s."""
        raw = query.get(QueryKey.POPULATE)
        if not raw:
            return None
        if isinstance(raw, str):
            return self._populate_one(raw)
        return [self._populate_one(item) for item in raw if isinstance(item, str) and item]

    def get_filter(self, query: RawQuery) -> FilterTree:
        return self.compiler.compile(query)


def parse(
    query: Union[RawQuery, str, None],
    *,
    populate: Optional[bool] = None,
    strict: Optional[bool] = None,
) -> MongoQuery:
    """Compile a raw query with default settings."""
    return MongoQueryParser(populate=populate, strict=strict).parse(query)


def mongo_query(
    func: Optional[Callable[..., Any]] = None,
    *,
    arg: str = "query",
    parser: Optional[MongoQueryParser] = None,
) -> Callable[..., Any]:
    """Decorator that replaces the raw query argument by its `MongoQuery`.

    The argument named `arg` may be a mapping or a query string. Works on
    plain functions, methods and coroutine functions.

    Examples:
        @mongo_query
        def list_users(query: MongoQuery): ...

        @mongo_query(arg="params")
        async def list_orders(self, params: MongoQuery, user_id: str): ...
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        signature = inspect.signature(fn)
        if arg not in signature.parameters:
            raise TypeError(f"{fn.__qualname__}() has no parameter named {arg!r}")

        def _convert(args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Tuple[Tuple[Any, ...], Dict[str, Any]]:
            bound = signature.bind(*args, **kwargs)
            if arg in bound.arguments and not isinstance(bound.arguments[arg], MongoQuery):
                bound.arguments[arg] = (parser or MongoQueryParser()).parse(bound.arguments[arg])
            return bound.args, bound.kwargs

        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                args, kwargs = _convert(args, kwargs)
                return await fn(*args, **kwargs)

            return async_wrapper

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            args, kwargs = _convert(args, kwargs)
            return fn(*args, **kwargs)

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
