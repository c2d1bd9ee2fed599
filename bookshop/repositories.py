"""Storage collaborators used by the seeders, backed by the Database layer."""
from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

from bookshop.database import Database
from bookshop.models import Author, Book, Category

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """Count, lookup and save operations for one entity type."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored entities."""

    @abstractmethod
    def ids(self) -> List[int]:
        """Ids of every stored entity."""

    @abstractmethod
    def find_by_id(self, entity_id: int) -> Optional[T]:
        """Entity with this id, or None."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist and commit one entity, returning it with its id."""


class _TableRepository(Repository[T]):
    table = ""

    def __init__(self, db: Database):
        self.db = db

    def count(self) -> int:
        return self.db.count(self.table)

    def ids(self) -> List[int]:
        return self.db.ids(self.table)


class AuthorRepository(_TableRepository[Author]):
    table = "authors"

    def find_by_id(self, entity_id: int) -> Optional[Author]:
        return self.db.get_author(entity_id)

    def save(self, entity: Author) -> Author:
        return self.db.insert_author(entity)


class CategoryRepository(_TableRepository[Category]):
    table = "categories"

    def find_by_id(self, entity_id: int) -> Optional[Category]:
        return self.db.get_category(entity_id)

    def save(self, entity: Category) -> Category:
        return self.db.insert_category(entity)


class BookRepository(_TableRepository[Book]):
    table = "books"

    def find_by_id(self, entity_id: int) -> Optional[Book]:
        return self.db.get_book(entity_id)

    def save(self, entity: Book) -> Book:
        return self.db.insert_book(entity)
