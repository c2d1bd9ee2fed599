"""Tests for parsing functions."""
from datetime import date
from decimal import Decimal

import pytest

from bookshop.errors import MalformedLineError
from bookshop.models import AgeRestriction, EditionType
from bookshop.parse import (
    iter_lines,
    parse_author_lines,
    parse_book_line,
    parse_book_lines,
    parse_category_lines,
    parse_release_date,
)


def test_parse_book_line_complete():
    """Test parsing a line with every field present."""
    book = parse_book_line("2 1/1/2000 10 19.99 0 The Great Gatsby")

    assert book.edition_type == EditionType.GOLD
    assert book.release_date == date(2000, 1, 1)
    assert book.copies == 10
    assert book.price == Decimal("19.99")
    assert book.age_restriction == AgeRestriction.MINOR
    assert book.title == "The Great Gatsby"
    assert book.author is None
    assert book.categories == set()
    assert book.id is None


@pytest.mark.parametrize("index, edition", [("0", EditionType.NORMAL), ("1", EditionType.PROMO), ("2", EditionType.GOLD)])
def test_edition_index_follows_declared_order(index, edition):
    book = parse_book_line(f"{index} 1/1/2000 1 1.00 0 Title")
    assert book.edition_type == edition


@pytest.mark.parametrize("index, restriction", [("0", AgeRestriction.MINOR), ("1", AgeRestriction.TEEN), ("2", AgeRestriction.ADULT)])
def test_age_index_follows_declared_order(index, restriction):
    book = parse_book_line(f"0 1/1/2000 1 1.00 {index} Title")
    assert book.age_restriction == restriction


def test_parse_release_date_single_digits():
    assert parse_release_date("5/3/1999") == date(1999, 3, 5)


def test_parse_release_date_double_digits():
    assert parse_release_date("27/11/2004") == date(2004, 11, 27)


def test_title_collapses_whitespace():
    """Test title tokens are joined with single spaces and trimmed."""
    book = parse_book_line("2   1/1/2000\t10 19.99 0  The   Great Gatsby   ")
    assert book.title == "The Great Gatsby"


def test_price_stored_with_two_digits():
    book = parse_book_line("0 1/1/2000 1 5.8 0 Title")
    assert book.price == Decimal("5.80")
    assert str(book.price) == "5.80"


@pytest.mark.parametrize("line", [
    "99 1/1/2000 10 19.99 0 Title",   # edition out of range
    "-1 1/1/2000 10 19.99 0 Title",   # negative edition
    "0 1/1/2000 10 19.99 3 Title",    # age out of range
    "x 1/1/2000 10 19.99 0 Title",    # edition not a number
    "0 31/2/2000 10 19.99 0 Title",   # impossible date
    "0 2000-01-01 10 19.99 0 Title",  # wrong date format
    "0 1/1/2000 ten 19.99 0 Title",   # copies not a number
    "0 1/1/2000 -5 19.99 0 Title",    # negative copies
    "0 1/1/2000 10 free 0 Title",     # price not a number
    "0 1/1/2000 10 -1.00 0 Title",    # negative price
    "0 1/1/2000 10 19.99 0",          # no title
    "0 1/1/2000",                     # truncated
    "0 1/1/2000 10 1e30 0 Title",     # exponent price
    "0 1/1/2000 10 12345678901234567890123456789 0 Title",  # price beyond decimal precision
    "0 1/1/2000 10 123456789012345678.00 0 Title",  # price beyond NUMERIC(19, 2)
    "0 1/1/2000 2147483648 1.00 0 Title",  # copies beyond INTEGER
    "0 1/1/2000 99999999999999 1.00 0 Title",  # copies beyond INTEGER
    "0 1/1/2000 1_000 1.00 0 Title",   # underscore in copies
    "0 1/1/2000 10 1_0.5 0 Title",     # underscore in price
    "0 1/1/2000 \u0661\u0662 1.00 0 Title",  # non-ASCII digits in copies
    "0 1/1/2000 10 \u0661.50 0 Title",  # non-ASCII digits in price
    "\u0661 1/1/2000 10 1.00 0 Title",  # non-ASCII edition index
    "0 1/1/2000 10 19.999 0 Title",    # more than two decimals
    "0 1/1/2000 10 . 0 Title",         # bare decimal point
    "0 1/1/2000 10 NaN 0 Title",       # not a number
])
def test_parse_book_line_malformed(line):
    with pytest.raises(MalformedLineError):
        parse_book_line(line, 7)


def test_malformed_error_carries_position():
    with pytest.raises(MalformedLineError) as exc_info:
        parse_book_line("99 1/1/2000 10 19.99 0 Title", 4)

    assert exc_info.value.line_number == 4
    assert "EditionType" in exc_info.value.reason


def test_parse_book_lines_skips_blank_lines():
    books = parse_book_lines(["0 1/1/2000 1 1.00 0 First", "", "   ", "1 2/2/2002 2 2.00 1 Second"])

    assert [book.title for book in books] == ["First", "Second"]


def test_parse_book_lines_reports_source_line_number():
    with pytest.raises(MalformedLineError) as exc_info:
        parse_book_lines(["0 1/1/2000 1 1.00 0 First", "", "bad line"])

    assert exc_info.value.line_number == 3


def test_parse_author_lines():
    authors = parse_author_lines(["George Powell", "", "Ursula K. Le Guin"])

    assert [(a.first_name, a.last_name) for a in authors] == [
        ("George", "Powell"),
        ("Ursula", "K. Le Guin"),
    ]


def test_parse_author_line_needs_two_names():
    with pytest.raises(MalformedLineError):
        parse_author_lines(["Madonna"])


def test_parse_category_lines_deduplicates():
    categories = parse_category_lines(["Drama", " Horror ", "", "Drama"])

    assert [c.name for c in categories] == ["Drama", "Horror"]


def test_iter_lines_reads_file(tmp_path):
    path = tmp_path / "books.txt"
    path.write_text("0 1/1/2000 1 1.00 0 First\r\n1 2/2/2002 2 2.00 1 Second\n", encoding="utf-8")

    assert list(iter_lines(path)) == ["0 1/1/2000 1 1.00 0 First", "1 2/2/2002 2 2.00 1 Second"]


def test_iter_lines_is_lazy(tmp_path):
    lines = iter_lines(tmp_path / "missing.txt")

    with pytest.raises(FileNotFoundError):
        next(lines)


def test_numeric_limits_accepted():
    """Test the largest values the catalog columns can hold still parse."""
    book = parse_book_line("0 1/1/2000 2147483647 99999999999999999.99 0 Title")

    assert book.copies == 2147483647
    assert book.price == Decimal("99999999999999999.99")


@pytest.mark.parametrize("token, price", [("5", "5.00"), ("5.", "5.00"), (".5", "0.50"), ("+1.25", "1.25"), ("007.10", "7.10")])
def test_plain_decimal_prices(token, price):
    book = parse_book_line(f"0 1/1/2000 1 {token} 0 Title")
    assert book.price == Decimal(price)
