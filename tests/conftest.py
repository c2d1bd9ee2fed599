"""Shared fixtures: in-memory storage and scripted randomness."""
import dataclasses
from datetime import date
from decimal import Decimal

import pytest

from bookshop.errors import StorageError
from bookshop.models import AgeRestriction, Author, Book, Category, EditionType
from bookshop.random_source import RandomSource
from bookshop.repositories import Repository


class InMemoryRepository(Repository):
    """Dict-backed repository that records every save."""

    def __init__(self, entities=(), fail_after=None):
        self.items = {}
        self.saved = []
        self.fail_after = fail_after
        for entity in entities:
            self._store(entity)

    def _store(self, entity):
        entity = dataclasses.replace(entity, id=max(self.items, default=0) + 1)
        self.items[entity.id] = entity
        return entity

    def count(self):
        return len(self.items)

    def ids(self):
        return sorted(self.items)

    def find_by_id(self, entity_id):
        return self.items.get(entity_id)

    def save(self, entity):
        if self.fail_after is not None and len(self.saved) >= self.fail_after:
            raise StorageError("disk full")
        entity = self._store(entity)
        self.saved.append(entity)
        return entity


class ScriptedRandom(RandomSource):
    """Random source replaying fixed draws, then falling back to defaults."""

    def __init__(self, counts=(), picks=(), default_count=0, default_pick=None):
        super().__init__(seed=0)
        self.counts = list(counts)
        self.picks = list(picks)
        self.default_count = default_count
        self.default_pick = default_pick

    def randint(self, low, high):
        value = self.counts.pop(0) if self.counts else self.default_count
        assert low <= value <= high
        return value

    def choice(self, items):
        value = self.picks.pop(0) if self.picks else self.default_pick
        if value is None:
            return items[0]
        assert value in items
        return value


class RecordingRandom(RandomSource):
    """Seeded random source that remembers every randint result."""

    def __init__(self, seed):
        super().__init__(seed)
        self.ints = []

    def randint(self, low, high):
        value = super().randint(low, high)
        self.ints.append(value)
        return value


def make_book(title="Absalom", **overrides):
    fields = dict(
        edition_type=EditionType.NORMAL,
        release_date=date(2000, 1, 1),
        copies=100,
        price=Decimal("10.00"),
        age_restriction=AgeRestriction.MINOR,
        title=title,
    )
    fields.update(overrides)
    return Book(**fields)


@pytest.fixture
def authors():
    return InMemoryRepository([
        Author(None, "George", "Powell"),
        Author(None, "Christina", "Jordan"),
        Author(None, "Jeffrey", "Stewart"),
    ])


@pytest.fixture
def categories():
    return InMemoryRepository([
        Category(None, name)
        for name in ["Drama", "Horror", "Romance", "Mystery", "History"]
    ])


@pytest.fixture
def books():
    return InMemoryRepository()


BOOK_LINES = [
    "1 20/1/1998 27274 15.31 2 Absalom",
    "0 27/11/2004 32401 5.80 1 After Many a Summer Dies the Swan",
    "2 2/10/1991 3441 41.22 0 Ah Wilderness!",
]
