"""Catalog report queries, formatted for display."""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Set

from bookshop.database import Database
from bookshop.models import AgeRestriction, Book, EditionType

GOLDEN_MAX_COPIES = 5000
CHEAP_PRICE = Decimal("5")
EXPENSIVE_PRICE = Decimal("40")


def join_lines(lines) -> str:
    return "\n".join(lines)


def format_price_line(book: Book) -> str:
    return f"{book.title} - ${book.price:.2f}"


def format_author_line(book: Book) -> str:
    return f"{book.title} ({book.author.first_name} {book.author.last_name})"


def format_reduced(book: Book) -> str:
    return f"{book.title} {book.edition_type.name} {book.age_restriction.name} {book.price:.2f}"


def parse_age_restriction(name: str) -> AgeRestriction:
    """Look up an age restriction by name, ignoring case."""
    try:
        return AgeRestriction[name.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown age restriction: {name}")


def titles_released_after(db: Database, after: date = date(2000, 12, 31)) -> List[str]:
    return [book.title for book in db.books_released_after(after)]


def authors_with_books_before(db: Database, before: date = date(1990, 1, 1)) -> Set[str]:
    """Distinct 'First Last' names of authors with a book released before a date."""
    return {book.author.full_name for book in db.books_released_before(before)}


def titles_by_age_restriction(db: Database, name: str) -> List[str]:
    restriction = parse_age_restriction(name)
    return [book.title for book in db.books_by_age_restriction(restriction)]


def golden_titles(db: Database, max_copies: int = GOLDEN_MAX_COPIES) -> List[str]:
    """Titles of gold edition books with fewer than max_copies copies."""
    return [book.title for book in db.books_by_edition(EditionType.GOLD, max_copies)]


def books_by_price(db: Database, low: Decimal = CHEAP_PRICE, high: Decimal = EXPENSIVE_PRICE) -> str:
    """Books priced below low or above high, as 'Title - $price' lines."""
    return join_lines(format_price_line(book) for book in db.books_priced_outside(low, high))


def not_released_in(db: Database, year: int) -> str:
    """Titles of books released in any year other than year."""
    books = db.books_released_outside(date(year, 1, 1), date(year, 12, 31))
    return join_lines(book.title for book in books)


def released_before(db: Database, text: str) -> str:
    """
    Titles of books released before a dd-MM-yyyy date.

    Raises:
        ValueError: if the date cannot be parsed
    """
    before = datetime.strptime(text, "%d-%m-%Y").date()
    return join_lines(book.title for book in db.books_released_before(before))


def titles_containing(db: Database, pattern: str) -> str:
    return join_lines(book.title for book in db.books_title_contains(pattern))


def books_by_author_last_name(db: Database, prefix: str) -> str:
    """Books by authors whose last name starts with prefix, as 'Title (First Last)'."""
    return join_lines(format_author_line(book) for book in db.books_by_author_last_name(prefix))


def count_by_title_length(db: Database, length: int) -> int:
    """Number of books whose title is longer than length."""
    return db.count_books_title_longer_than(length)


def reduced_book(db: Database, title: str) -> str:
    """
    Short description of one book: title, edition, age restriction and price.

    Raises:
        LookupError: if no book has this exact title
    """
    book = db.find_book_by_title(title)
    if book is None:
        raise LookupError(f"No book titled {title!r}")
    return format_reduced(book)
