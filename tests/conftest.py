"""Pytest configuration and fixtures for mongoquery tests."""

import pytest
from dotenv import load_dotenv

from mongoquery.parser import MongoQueryParser
from mongoquery.querydsl.classifier import ValueClassifier
from mongoquery.querydsl.compiler import FilterCompiler

# Load environment variables
load_dotenv()


@pytest.fixture
def classifier():
    """Lenient classifier independent of environment settings."""
    return ValueClassifier(strict=False, max_depth=16, lenient_keys=False)


@pytest.fixture
def strict_classifier():
    return ValueClassifier(strict=True, max_depth=16, lenient_keys=False)


@pytest.fixture
def compiler():
    """Lenient filter compiler independent of environment settings."""
    return FilterCompiler(strict=False, max_depth=16, lenient_keys=False)


@pytest.fixture
def parser():
    """Parser with explicit defaults so .env overrides don't leak into tests."""
    return MongoQueryParser(
        default_limit=100,
        default_skip=0,
        populate=False,
        strict=False,
        max_depth=16,
        lenient_keys=False,
    )


@pytest.fixture
def sample_query():
    """Decoded query string as a web framework would hand it over."""
    return {
        "limit": "10",
        "page": "3",
        "select": "name,-secret",
        "sort": "-age,name",
        "name": "*jo",
        "age": "{gte}18{lte}65",
        "status": "a|b",
        "tags": ["{in}[\"x\",\"y\"]", "{nin}[\"z\"]"],
    }
