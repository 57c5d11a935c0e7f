"""Tests for the MongoQuery and PopulateSpec models."""

import pytest
from pydantic import ValidationError

from mongoquery.schema import MongoQuery, PopulateSpec


class TestMongoQuery:
    def test_defaults(self):
        q = MongoQuery()
        assert q.limit == 100
        assert q.skip == 0
        assert q.select == {}
        assert q.sort == {}
        assert q.filter == {}
        assert q.populate is None

    @pytest.mark.parametrize("limit", [0, -1])
    def test_limit_must_be_positive(self, limit):
        with pytest.raises(ValidationError):
            MongoQuery(limit=limit)

    def test_skip_must_not_be_negative(self):
        with pytest.raises(ValidationError):
            MongoQuery(skip=-1)

    def test_frozen(self):
        q = MongoQuery()
        with pytest.raises(ValidationError):
            q.limit = 5

    def test_to_dict_omits_populate(self):
        q = MongoQuery(limit=10, filter={"a": 1})
        assert q.to_dict() == {"limit": 10, "skip": 0, "select": {}, "sort": {}, "filter": {"a": 1}}

    def test_to_dict_with_populate(self):
        q = MongoQuery(populate=PopulateSpec(path="author", select={"name": 1}))
        assert q.to_dict()["populate"] == {"path": "author", "select": {"name": 1}}

    def test_find_kwargs(self):
        q = MongoQuery(limit=5, skip=10, select={"name": 1}, sort={"age": -1, "name": 1}, filter={"a": 1})
        assert q.find_kwargs() == {
            "filter": {"a": 1},
            "skip": 10,
            "limit": 5,
            "projection": {"name": 1},
            "sort": [("age", -1), ("name", 1)],
        }

    def test_find_kwargs_without_projection_or_sort(self):
        assert MongoQuery().find_kwargs() == {"filter": {}, "skip": 0, "limit": 100}


class TestPopulateSpec:
    def test_path_required(self):
        with pytest.raises(ValidationError):
            PopulateSpec()

    def test_to_dict(self):
        spec = PopulateSpec(path="author", match={"active": True})
        assert spec.to_dict() == {"path": "author", "match": {"active": True}}
