"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_int(value):
    return int(value) if value not in (None, "") else None


class Config:
    """Application configuration."""

    # Database
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "bookshop")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")

    @property
    def DATABASE_URL(self):
        """Build PostgreSQL connection string."""
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # Seed sources
    BOOKS_FILE = os.getenv("BOOKS_FILE", "resources/books.txt")
    AUTHORS_FILE = os.getenv("AUTHORS_FILE", "resources/authors.txt")
    CATEGORIES_FILE = os.getenv("CATEGORIES_FILE", "resources/categories.txt")

    # Fixed seed for reproducible random assignment (unset: random each run)
    RANDOM_SEED = _optional_int(os.getenv("RANDOM_SEED"))
