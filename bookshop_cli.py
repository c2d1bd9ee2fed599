#!/usr/bin/env python3
"""Bookshop CLI - catalog seeding and reports."""
import argparse
import sys
import logging
from tabulate import tabulate
from bookshop.config import Config
from bookshop.database import Database
from bookshop.errors import SeedError
from bookshop.parse import iter_lines
from bookshop.random_source import RandomSource
from bookshop.repositories import AuthorRepository, BookRepository, CategoryRepository
from bookshop.seeder import seed_all
from bookshop import queries

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

QUERIES = {
    "released-after": (lambda db, arg: queries.titles_released_after(db), False),
    "authors-before": (lambda db, arg: sorted(queries.authors_with_books_before(db)), False),
    "age": (queries.titles_by_age_restriction, True),
    "golden": (lambda db, arg: queries.golden_titles(db), False),
    "price": (lambda db, arg: queries.books_by_price(db), False),
    "not-released": (lambda db, arg: queries.not_released_in(db, int(arg)), True),
    "released-before": (queries.released_before, True),
    "title-contains": (queries.titles_containing, True),
    "author-prefix": (queries.books_by_author_last_name, True),
    "title-length": (lambda db, arg: queries.count_by_title_length(db, int(arg)), True),
    "reduced": (queries.reduced_book, True),
}


def setup_database(config: Config) -> Database:
    """Initialize database."""
    db = Database(config.DATABASE_URL)
    db.init_schema()
    return db


def seed_catalog(args, config: Config):
    """Seed authors, categories and books."""
    db = setup_database(config)

    try:
        seed = args.seed if args.seed is not None else config.RANDOM_SEED
        counts = seed_all(
            BookRepository(db),
            AuthorRepository(db),
            CategoryRepository(db),
            book_lines=iter_lines(args.books or config.BOOKS_FILE),
            author_lines=iter_lines(args.authors or config.AUTHORS_FILE),
            category_lines=iter_lines(args.categories or config.CATEGORIES_FILE),
            rng=RandomSource(seed)
        )

        rows = [[entity, count] for entity, count in counts.items()]
        print("\n" + tabulate(rows, headers=["Entity", "Seeded"], tablefmt="grid"))

    finally:
        db.close()


def show_stats(args, config: Config):
    """Show database statistics."""
    db = setup_database(config)

    try:
        stats = db.get_stats()

        print("\n" + "=" * 50)
        print("CATALOG STATISTICS")
        print("=" * 50)
        print(f"Authors: {stats['total_authors']}")
        print(f"Categories: {stats['total_categories']}")
        print(f"Books: {stats['total_books']}")
        print(f"Book/category links: {stats['category_links']}")
        print(f"Release dates: {stats['earliest_release'] or '-'} .. {stats['latest_release'] or '-'}")
        print("=" * 50 + "\n")

    finally:
        db.close()


def run_query(args, config: Config):
    """Run one catalog report."""
    handler, needs_arg = QUERIES[args.name]
    if needs_arg and args.arg is None:
        logger.error(f"Query '{args.name}' needs an argument")
        sys.exit(2)

    db = setup_database(config)

    try:
        result = handler(db, args.arg)
        display_result(result)
    finally:
        db.close()


def display_result(result):
    """Print a query result: lists as a table, everything else as-is."""
    if isinstance(result, list):
        if not result:
            print("No results")
            return
        rows = [[i, value] for i, value in enumerate(result, 1)]
        print("\n" + tabulate(rows, headers=["#", "Result"], tablefmt="grid"))
    elif result == "":
        print("No results")
    else:
        print(result)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Bookshop - catalog seeding and reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Seed from the configured resource files
  %(prog)s seed

  # Reproducible random assignment
  %(prog)s seed --seed 42

  # Reports
  %(prog)s query golden
  %(prog)s query age teen
  %(prog)s query reduced "Absalom"

  # Show statistics
  %(prog)s stats
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Seed command
    seed_parser = subparsers.add_parser("seed", help="Seed authors, categories and books")
    seed_parser.add_argument("--books", help="Book source file (default: BOOKS_FILE)")
    seed_parser.add_argument("--authors", help="Author source file (default: AUTHORS_FILE)")
    seed_parser.add_argument("--categories", help="Category source file (default: CATEGORIES_FILE)")
    seed_parser.add_argument("--seed", type=int, help="Random seed (default: RANDOM_SEED)")

    # Stats command
    subparsers.add_parser("stats", help="Show catalog statistics")

    # Query command
    query_parser = subparsers.add_parser("query", help="Run a catalog report")
    query_parser.add_argument("name", choices=sorted(QUERIES), help="Report name")
    query_parser.add_argument("arg", nargs="?", help="Report argument, where the report takes one")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()

    try:
        if args.command == "seed":
            seed_catalog(args, config)

        elif args.command == "stats":
            show_stats(args, config)

        elif args.command == "query":
            run_query(args, config)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except SeedError as e:
        logger.error(f"❌ Seeding failed: {e}")
        sys.exit(1)
    except (ValueError, LookupError) as e:
        logger.error(f"❌ {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
