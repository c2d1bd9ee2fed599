"""Populate the catalog from line-oriented source files."""
import logging
from typing import Iterable, List, Optional, Set

from bookshop.errors import MissingReferenceError
from bookshop.models import Author, Book, Category
from bookshop.parse import parse_author_lines, parse_book_lines, parse_category_lines
from bookshop.random_source import RandomSource
from bookshop.repositories import Repository

logger = logging.getLogger(__name__)

MAX_CATEGORIES_PER_BOOK = 4


class CatalogSeeder:
    """
    Seeds books, each with a random author and random categories.

    Authors and categories must already be stored; this class never creates
    them. Every draw goes through the injected random source.
    """

    def __init__(
        self,
        books: Repository[Book],
        authors: Repository[Author],
        categories: Repository[Category],
        rng: Optional[RandomSource] = None
    ):
        """
        Initialize the seeder.

        Args:
            books: Book storage; also used for the already-seeded check
            authors: Existing authors to draw from
            categories: Existing categories to draw from
            rng: Random source (unseeded if omitted)
        """
        self.books = books
        self.authors = authors
        self.categories = categories
        self.rng = rng or RandomSource()

    def seed(self, lines: Iterable[str]) -> int:
        """
        Seed books from source lines unless books are already stored.

        The whole source is parsed before the first write, so a malformed
        line leaves storage untouched.

        Args:
            lines: Book source lines

        Returns:
            Number of books written (0 when storage was already seeded)

        Raises:
            MalformedLineError: a line could not be parsed
            MissingReferenceError: no authors, or a sampled id did not resolve
            StorageError: a write failed
        """
        if self.books.count() != 0:
            logger.info("Books already seeded, skipping")
            return 0

        records = parse_book_lines(lines)
        logger.info(f"Parsed {len(records)} books")

        author_ids = self.authors.ids()
        if not author_ids:
            raise MissingReferenceError("author")

        category_ids = self.categories.ids()
        if not category_ids:
            logger.warning("No categories stored; books will have none")

        for book in records:
            book.author = self.random_author(author_ids)
            book.categories = self.random_categories(category_ids)
            self.books.save(book)

        logger.info(f"Seeded {len(records)} books")
        return len(records)

    def random_author(self, author_ids: List[int]) -> Author:
        """Uniformly pick one stored author."""
        author_id = self.rng.choice(author_ids)
        author = self.authors.find_by_id(author_id)
        if author is None:
            raise MissingReferenceError("author", author_id)
        return author

    def random_categories(self, category_ids: List[int]) -> Set[Category]:
        """
        Draw a random target count in [0, 4], then that many categories.

        Draws may repeat; the set keeps each category once, so the result
        can be smaller than the target.
        """
        categories = set()
        if not category_ids:
            return categories

        target = self.rng.randint(0, MAX_CATEGORIES_PER_BOOK)
        for _ in range(target):
            category_id = self.rng.choice(category_ids)
            category = self.categories.find_by_id(category_id)
            if category is None:
                raise MissingReferenceError("category", category_id)
            categories.add(category)

        return categories


def seed_authors(authors: Repository[Author], lines: Iterable[str]) -> int:
    """Store authors from 'First Last' lines unless authors exist."""
    if authors.count() != 0:
        logger.info("Authors already seeded, skipping")
        return 0

    records = parse_author_lines(lines)
    for author in records:
        authors.save(author)

    logger.info(f"Seeded {len(records)} authors")
    return len(records)


def seed_categories(categories: Repository[Category], lines: Iterable[str]) -> int:
    """Store one category per line unless categories exist."""
    if categories.count() != 0:
        logger.info("Categories already seeded, skipping")
        return 0

    records = parse_category_lines(lines)
    for category in records:
        categories.save(category)

    logger.info(f"Seeded {len(records)} categories")
    return len(records)


def seed_all(
    books: Repository[Book],
    authors: Repository[Author],
    categories: Repository[Category],
    book_lines: Iterable[str],
    author_lines: Iterable[str],
    category_lines: Iterable[str],
    rng: Optional[RandomSource] = None
) -> dict:
    """
    Seed authors, categories and books, in that order.

    Returns:
        Count of rows written per entity
    """
    return {
        "authors": seed_authors(authors, author_lines),
        "categories": seed_categories(categories, category_lines),
        "books": CatalogSeeder(books, authors, categories, rng).seed(book_lines),
    }
