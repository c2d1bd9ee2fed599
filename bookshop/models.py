"""Data models for the bookshop catalog."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Set


class EditionType(Enum):
    """Book edition, selected by position in source files."""
    NORMAL = 0
    PROMO = 1
    GOLD = 2


class AgeRestriction(Enum):
    """Reader age restriction, selected by position in source files."""
    MINOR = 0
    TEEN = 1
    ADULT = 2


@dataclass(frozen=True)
class Author:
    """Book author."""
    id: Optional[int]
    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        """Format as 'First Last'."""
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Category:
    """Book category."""
    id: Optional[int]
    name: str


@dataclass
class Book:
    """Catalog book record."""
    edition_type: EditionType
    release_date: date
    copies: int
    price: Decimal
    age_restriction: AgeRestriction
    title: str
    author: Optional[Author] = None
    categories: Set[Category] = field(default_factory=set)
    id: Optional[int] = None
