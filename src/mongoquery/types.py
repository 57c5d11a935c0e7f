"""Type aliases for the mongoquery package.

The compiled filter is made of plain dicts and lists so it can be handed
straight to a MongoDB driver. The aliases below name the shapes involved.
"""

from typing import Any, Dict, List, Mapping, Sequence, Union

# Decoded query string: repeated keys / key[] become sequences
RawValue = Union[str, Sequence[str], Mapping[str, Any]]
RawQuery = Mapping[str, RawValue]

LiteralValue = Union[str, int, float, bool]
# literal | {"$op": node} | {"$op1": v1, "$op2": v2} | [node, ...]
FilterNode = Union[LiteralValue, Dict[str, Any], List[Any]]
FilterTree = Dict[str, FilterNode]

ProjectionMap = Dict[str, int]
SortMap = Dict[str, int]
