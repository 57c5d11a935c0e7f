"""Pydantic schemas for compiled query descriptors."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt

from .constants import DEFAULT_LIMIT, DEFAULT_SKIP


class PopulateSpec(BaseModel):
    """Reference population request: `path;select;filter`."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Reference path to populate.")
    select: Optional[Dict[str, int]] = Field(None, description="Projection applied to the populated documents.")
    match: Optional[Dict[str, Any]] = Field(None, description="Filter applied to the populated documents.")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class MongoQuery(BaseModel):
    """Compiled query descriptor ready for a MongoDB find/aggregate call."""

    model_config = ConfigDict(frozen=True)

    limit: PositiveInt = Field(DEFAULT_LIMIT, description="Maximum number of documents to return.")
    skip: NonNegativeInt = Field(DEFAULT_SKIP, description="Number of documents to skip.")
    select: Dict[str, int] = Field(default_factory=dict, description="Projection map (1 include, 0 exclude).")
    sort: Dict[str, int] = Field(default_factory=dict, description="Sort map (1 ascending, -1 descending).")
    filter: Dict[str, Any] = Field(default_factory=dict, description="Compiled filter tree.")
    populate: Optional[Union[PopulateSpec, List[PopulateSpec]]] = Field(
        None, description="Reference population, when enabled."
    )

    def to_dict(self) -> Dict[str, Any]:
        """Return the descriptor as plain dicts, omitting `populate` when unset."""
        return self.model_dump(exclude_none=True)

    def find_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for `Collection.find` in pymongo-style drivers.

        Empty projection and sort are left out so the driver defaults apply.
        """
        kwargs: Dict[str, Any] = {"filter": self.filter, "skip": self.skip, "limit": self.limit}
        if self.select:
            kwargs["projection"] = self.select
        if self.sort:
            kwargs["sort"] = list(self.sort.items())
        return kwargs
