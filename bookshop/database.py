"""Database layer for the bookshop catalog."""
import psycopg2
from psycopg2 import pool
from typing import Optional, List, Dict, Any
from datetime import date
from decimal import Decimal
import logging

from bookshop.errors import StorageError
from bookshop.models import AgeRestriction, Author, Book, Category, EditionType

logger = logging.getLogger(__name__)

BOOK_COLUMNS = """
    b.id, b.title, b.edition_type, b.release_date, b.copies, b.price,
    b.age_restriction, a.id, a.first_name, a.last_name
"""

COUNTED_TABLES = ("authors", "categories", "books")


def like_escape(text: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class Database:
    """PostgreSQL database with connection pooling."""

    def __init__(self, connection_string: str, min_conn: int = 1, max_conn: int = 10):
        """
        Initialize database connection pool.

        Args:
            connection_string: PostgreSQL connection string
            min_conn: Minimum connections in pool
            max_conn: Maximum connections in pool
        """
        self.connection_pool = psycopg2.pool.SimpleConnectionPool(
            min_conn,
            max_conn,
            connection_string
        )

        if self.connection_pool:
            logger.info("Database connection pool created successfully")
        else:
            raise StorageError("Failed to create connection pool")

    def init_schema(self):
        """Create database tables if they don't exist."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS authors (
                        id SERIAL PRIMARY KEY,
                        first_name VARCHAR(100) NOT NULL,
                        last_name VARCHAR(100) NOT NULL
                    )
                """)

                cur.execute("""
                    CREATE TABLE IF NOT EXISTS categories (
                        id SERIAL PRIMARY KEY,
                        name VARCHAR(100) NOT NULL UNIQUE
                    )
                """)

                cur.execute("""
                    CREATE TABLE IF NOT EXISTS books (
                        id SERIAL PRIMARY KEY,
                        title VARCHAR(255) NOT NULL,
                        edition_type VARCHAR(10) NOT NULL,
                        release_date DATE,
                        copies INTEGER NOT NULL CHECK (copies >= 0),
                        price NUMERIC(19, 2) NOT NULL CHECK (price >= 0),
                        age_restriction VARCHAR(10) NOT NULL,
                        author_id INTEGER NOT NULL REFERENCES authors (id),
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                cur.execute("""
                    CREATE TABLE IF NOT EXISTS books_categories (
                        book_id INTEGER NOT NULL REFERENCES books (id) ON DELETE CASCADE,
                        category_id INTEGER NOT NULL REFERENCES categories (id),
                        PRIMARY KEY (book_id, category_id)
                    )
                """)

                # Indexes for the report queries
                cur.execute("""
                    CREATE INDEX IF NOT EXISTS idx_books_release_date
                    ON books (release_date)
                """)

                cur.execute("""
                    CREATE INDEX IF NOT EXISTS idx_books_author
                    ON books (author_id)
                """)

                conn.commit()
                logger.info("Database schema initialized successfully")

        finally:
            self.connection_pool.putconn(conn)

    def count(self, table: str) -> int:
        """Count rows in one of the catalog tables."""
        if table not in COUNTED_TABLES:
            raise ValueError(f"Unknown table: {table}")
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute(f"SELECT COUNT(*) FROM {table}")
                return cur.fetchone()[0]
        finally:
            self.connection_pool.putconn(conn)

    def ids(self, table: str) -> List[int]:
        """All ids currently stored in a catalog table."""
        if table not in COUNTED_TABLES:
            raise ValueError(f"Unknown table: {table}")
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute(f"SELECT id FROM {table} ORDER BY id")
                return [row[0] for row in cur.fetchall()]
        finally:
            self.connection_pool.putconn(conn)

    def get_author(self, author_id: int) -> Optional[Author]:
        """Get an author by ID."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    SELECT id, first_name, last_name FROM authors WHERE id = %s
                """, (author_id,))
                row = cur.fetchone()
                return Author(*row) if row else None
        finally:
            self.connection_pool.putconn(conn)

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get a category by ID."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    SELECT id, name FROM categories WHERE id = %s
                """, (category_id,))
                row = cur.fetchone()
                return Category(*row) if row else None
        finally:
            self.connection_pool.putconn(conn)

    def insert_author(self, author: Author) -> Author:
        """
        Insert an author.

        Args:
            author: Unsaved author

        Returns:
            The author with its generated id

        Raises:
            StorageError: if the insert fails
        """
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO authors (first_name, last_name)
                    VALUES (%s, %s)
                    RETURNING id
                """, (author.first_name, author.last_name))
                author_id = cur.fetchone()[0]
                conn.commit()
                return Author(author_id, author.first_name, author.last_name)
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to insert author: {e}")
            raise StorageError(f"Failed to insert author {author.full_name}") from e
        finally:
            self.connection_pool.putconn(conn)

    def insert_category(self, category: Category) -> Category:
        """Insert a category, returning it with its generated id."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO categories (name) VALUES (%s) RETURNING id
                """, (category.name,))
                category_id = cur.fetchone()[0]
                conn.commit()
                return Category(category_id, category.name)
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to insert category: {e}")
            raise StorageError(f"Failed to insert category {category.name}") from e
        finally:
            self.connection_pool.putconn(conn)

    def insert_book(self, book: Book) -> Book:
        """
        Insert a book and its category links in one transaction.

        Args:
            book: Book with author and categories assigned

        Returns:
            The same book with its generated id set

        Raises:
            StorageError: if the insert fails
        """
        if book.author is None or book.author.id is None:
            raise StorageError(f"Book {book.title!r} has no stored author")

        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO books (
                        title, edition_type, release_date, copies, price,
                        age_restriction, author_id
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                    RETURNING id
                """, (
                    book.title, book.edition_type.name, book.release_date,
                    book.copies, book.price, book.age_restriction.name,
                    book.author.id
                ))
                book_id = cur.fetchone()[0]

                for category in book.categories:
                    cur.execute("""
                        INSERT INTO books_categories (book_id, category_id)
                        VALUES (%s, %s)
                    """, (book_id, category.id))

                conn.commit()
                book.id = book_id
                return book
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to insert book: {e}")
            raise StorageError(f"Failed to insert book {book.title!r}") from e
        finally:
            self.connection_pool.putconn(conn)

    def _fetch_books(self, where: str, params: tuple = (), order_by: str = "b.id") -> List[Book]:
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute(f"""
                    SELECT {BOOK_COLUMNS}
                    FROM books b
                    JOIN authors a ON a.id = b.author_id
                    WHERE {where}
                    ORDER BY {order_by}
                """, params)
                books = [self._row_to_book(row) for row in cur.fetchall()]

                if books:
                    by_id = {book.id: book for book in books}
                    cur.execute("""
                        SELECT bc.book_id, c.id, c.name
                        FROM books_categories bc
                        JOIN categories c ON c.id = bc.category_id
                        WHERE bc.book_id = ANY(%s)
                    """, (list(by_id),))
                    for book_id, category_id, name in cur.fetchall():
                        by_id[book_id].categories.add(Category(category_id, name))

                return books
        finally:
            self.connection_pool.putconn(conn)

    @staticmethod
    def _row_to_book(row) -> Book:
        (book_id, title, edition_type, release_date, copies, price,
         age_restriction, author_id, first_name, last_name) = row
        return Book(
            id=book_id,
            title=title,
            edition_type=EditionType[edition_type],
            release_date=release_date,
            copies=copies,
            price=Decimal(price),
            age_restriction=AgeRestriction[age_restriction],
            author=Author(author_id, first_name, last_name)
        )

    def books_released_after(self, after: date) -> List[Book]:
        return self._fetch_books("b.release_date > %s", (after,))

    def books_released_before(self, before: date) -> List[Book]:
        return self._fetch_books("b.release_date < %s", (before,))

    def books_released_outside(self, start: date, end: date) -> List[Book]:
        """Books released before start or after end."""
        return self._fetch_books("b.release_date < %s OR b.release_date > %s", (start, end))

    def books_by_age_restriction(self, restriction: AgeRestriction) -> List[Book]:
        return self._fetch_books("b.age_restriction = %s", (restriction.name,))

    def books_by_edition(self, edition_type: EditionType, max_copies: int) -> List[Book]:
        """Books of one edition with fewer than max_copies copies."""
        return self._fetch_books(
            "b.edition_type = %s AND b.copies < %s",
            (edition_type.name, max_copies)
        )

    def books_priced_outside(self, low: Decimal, high: Decimal) -> List[Book]:
        """Books cheaper than low or more expensive than high."""
        return self._fetch_books("b.price < %s OR b.price > %s", (low, high))

    def books_title_contains(self, pattern: str) -> List[Book]:
        """Case-insensitive substring search on titles."""
        return self._fetch_books("b.title ILIKE %s", (f"%{like_escape(pattern)}%",))

    def books_by_author_last_name(self, prefix: str) -> List[Book]:
        """Books whose author's last name starts with prefix."""
        return self._fetch_books("a.last_name LIKE %s", (f"{like_escape(prefix)}%",))

    def get_book(self, book_id: int) -> Optional[Book]:
        """Get a book by ID."""
        books = self._fetch_books("b.id = %s", (book_id,))
        return books[0] if books else None

    def find_book_by_title(self, title: str) -> Optional[Book]:
        books = self._fetch_books("b.title = %s", (title,))
        return books[0] if books else None

    def count_books_title_longer_than(self, length: int) -> int:
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    SELECT COUNT(*) FROM books WHERE char_length(title) > %s
                """, (length,))
                return cur.fetchone()[0]
        finally:
            self.connection_pool.putconn(conn)

    def get_stats(self) -> Dict[str, Any]:
        """Get database statistics."""
        stats = {f"total_{table}": self.count(table) for table in COUNTED_TABLES}

        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM books_categories")
                stats["category_links"] = cur.fetchone()[0]

                cur.execute("SELECT MIN(release_date), MAX(release_date) FROM books")
                stats["earliest_release"], stats["latest_release"] = cur.fetchone()

                return stats
        finally:
            self.connection_pool.putconn(conn)

    def close(self):
        """Close all connections in the pool."""
        if self.connection_pool:
            self.connection_pool.closeall()
            logger.info("Database connection pool closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
