"""Shared test fixtures."""

import pytest

from pilosa_orm import Schema, opt_field_int


@pytest.fixture
def schema():
    return Schema()


@pytest.fixture
def repository(schema):
    return schema.index("repository")


@pytest.fixture
def stargazer(repository):
    return repository.field("stargazer")


@pytest.fixture
def collab(repository):
    return repository.field("collaboration")


@pytest.fixture
def language(repository):
    return repository.field("language")


@pytest.fixture
def size(repository):
    return repository.field("size", opt_field_int(0, 1000))
