"""
Unit tests for mongoquery.querydsl.compiler (filter tree assembly).
"""

import logging

import pytest

from mongoquery.exceptions import FilterParseError, InvalidTokenError
from mongoquery.querydsl.compiler import FilterCompiler, compile_filter


class TestCompileFilter:
    def test_mixed_query(self, compiler):
        raw = {"name": "*jo", "age": "{gte}18{lte}65", "status": "a|b"}
        assert compiler.compile(raw) == {
            "name": {"$regex": "^jo", "$options": "i"},
            "age": {"$gte": 18, "$lte": 65},
            "status": {"$or": ["a", "b"]},
        }

    def test_literals(self, compiler):
        assert compiler.compile({"active": "true", "count": "3", "title": "hello"}) == {
            "active": True,
            "count": 3,
            "title": "hello",
        }

    def test_reserved_keys_removed(self, compiler):
        raw = {
            "limit": "10",
            "skip": "5",
            "page": "2",
            "select": "a",
            "sort": "-a",
            "populate": "author",
            "name": "x",
        }
        assert compiler.compile(raw) == {"name": "x"}

    def test_reserved_keys_matched_after_sanitizing(self, compiler):
        raw = {"limit!": "5", "$sort": "x", "page ": "2", "s-kip": "1", "name": "x"}
        assert compiler.compile(raw) == {"name": "x"}

    def test_brace_text_kept_as_literal(self, compiler):
        assert compiler.compile({"q": "foo{bar}", "r": "x{y"}) == {"q": "foo{bar}", "r": "x{y"}

    def test_input_not_mutated(self, compiler):
        raw = {"limit": "10", "age": ["{gt}1", "{lt}9"]}
        snapshot = {"limit": "10", "age": ["{gt}1", "{lt}9"]}
        compiler.compile(raw)
        assert raw == snapshot

    def test_invalid_value_omits_key(self, compiler):
        assert compiler.compile({"age": "{gt}", "kind": "{type}bogus", "ok": "1"}) == {"ok": 1}

    def test_none_value_skipped(self, compiler):
        assert compiler.compile({"a": None, "b": "x"}) == {"b": "x"}

    def test_empty_query(self, compiler):
        assert compiler.compile({}) == {}


class TestKeySanitizing:
    def test_invalid_characters_removed(self, compiler):
        assert compiler.compile({"na$me!": "x", "user.address_1": "y"}) == {"name": "x", "user.address_1": "y"}

    def test_strict_key_range(self, compiler):
        assert compiler.compile({"a[0]": "x"}) == {"a0": "x"}

    def test_lenient_key_range(self):
        lenient = FilterCompiler(strict=False, lenient_keys=True)
        assert lenient.compile({"a[0]": "x"}) == {"a[0]": "x"}

    def test_all_invalid_key_becomes_empty(self, compiler):
        assert compiler.compile({"$$": "x"}) == {"": "x"}


class TestSequenceValues:
    def test_operators_merge(self, compiler):
        assert compiler.compile({"age": ["{gt}1", "{lt}9"]}) == {"age": {"$gt": 1, "$lt": 9}}

    def test_repeated_operator_last_wins(self, compiler):
        assert compiler.compile({"age": ["{gt}1", "{gt}5"]}) == {"age": {"$gt": 5}}

    def test_brace_groups_and_repeats_merge(self, compiler):
        assert compiler.compile({"age": ["{gt}1{lt}20", "{lt}9"]}) == {"age": {"$gt": 1, "$lt": 9}}

    def test_invalid_elements_dropped(self, compiler):
        assert compiler.compile({"age": ["{gt}", "{lt}9"]}) == {"age": {"$lt": 9}}

    def test_all_invalid_omits_key(self, compiler):
        assert compiler.compile({"age": ["{gt}", "{exists}maybe"]}) == {}

    def test_literals_kept_as_list(self, compiler):
        assert compiler.compile({"tag": ["a", "2"]}) == {"tag": ["a", 2]}

    def test_tuple_values(self, compiler):
        assert compiler.compile({"age": ("{gte}1", "{lte}2")}) == {"age": {"$gte": 1, "$lte": 2}}


class TestStructuredValues:
    def test_mapping_passthrough(self, compiler):
        raw = {"loc": {"$near": [1, 2]}}
        result = compiler.compile(raw)
        assert result == {"loc": {"$near": [1, 2]}}
        assert result["loc"] is not raw["loc"]

    def test_elem_match_value(self, compiler):
        assert compiler.compile({"items": "{elemMatch}sku=A1#qty={gte}2"}) == {
            "items": {"$elemMatch": {"sku": "A1", "qty": {"$gte": 2}}}
        }


class TestErrors:
    def test_non_mapping_raises(self, compiler):
        with pytest.raises(InvalidTokenError):
            compiler.compile("age={gt}5")

    def test_non_string_scalar_raises(self, compiler):
        with pytest.raises(InvalidTokenError):
            compiler.compile({"age": 5})

    def test_strict_mode(self):
        strict = FilterCompiler(strict=True)
        with pytest.raises(FilterParseError):
            strict.compile({"age": "{gt}"})

    def test_strict_mode_elem_match(self):
        strict = FilterCompiler(strict=True)
        with pytest.raises(FilterParseError):
            strict.compile({"items": "{elemMatch}qty={gt}"})

    def test_module_helper(self):
        assert compile_filter({"a": "{ne}1"}, strict=False) == {"a": {"$ne": 1}}

    def test_dropped_filter_is_logged(self, compiler, caplog):
        caplog.set_level(logging.DEBUG, logger="mongoquery.querydsl.compiler")
        compiler.compile({"age": "{gt}"})
        assert "Dropping filter on 'age'" in caplog.text


class TestSharedOptions:
    def test_classifier_shares_compiler(self):
        compiler = FilterCompiler(strict=True, max_depth=3)
        assert compiler.classifier.compiler is compiler
        assert compiler.strict is True
        assert compiler.classifier.max_depth == 3
