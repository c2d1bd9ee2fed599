"""Parse line-oriented catalog source files."""
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple, Type, TypeVar

from bookshop.errors import MalformedLineError
from bookshop.models import AgeRestriction, Author, Book, Category, EditionType

E = TypeVar("E", bound=Enum)

DATE_FORMAT = "%d/%m/%Y"
PRICE_PRECISION = Decimal("0.01")
BOOK_FIELDS = 5

INT_PATTERN = re.compile(r"[+-]?[0-9]+")
INT_MIN, INT_MAX = -2 ** 31, 2 ** 31 - 1
PRICE_PATTERN = re.compile(r"\+?([0-9]*)(?:\.([0-9]*))?")
PRICE_MAX_WHOLE_DIGITS = 17


def iter_lines(path) -> Iterator[str]:
    """
    Lazily yield the lines of a UTF-8 source file.

    The file is opened on first iteration, so a caller that never iterates
    never touches it.
    """
    with Path(path).open(encoding="utf-8-sig") as f:
        for line in f:
            yield line.rstrip("\r\n")


def parse_int(token: str) -> int:
    """Parse an ASCII decimal integer that fits a 32-bit signed column."""
    if not INT_PATTERN.fullmatch(token):
        raise ValueError(f"invalid integer {token!r}")
    value = int(token)
    if not INT_MIN <= value <= INT_MAX:
        raise ValueError(f"integer {token} out of range")
    return value


def enum_by_index(enum_type: Type[E], token: str) -> E:
    """
    Select an enum member by its declared position.

    Args:
        enum_type: Enum class to select from
        token: Decimal index as text

    Returns:
        The member at that position

    Raises:
        ValueError: token is not an integer or is out of range
    """
    index = parse_int(token)
    members = list(enum_type)
    if not 0 <= index < len(members):
        raise ValueError(f"{enum_type.__name__} index {index} out of range 0..{len(members) - 1}")
    return members[index]


def parse_release_date(token: str) -> date:
    """Parse a d/M/yyyy date; one- or two-digit day and month are accepted."""
    if not token.isascii():
        raise ValueError(f"invalid date {token!r}")
    return datetime.strptime(token, DATE_FORMAT).date()


def parse_price(token: str) -> Decimal:
    """
    Parse a non-negative price with at most two decimals.

    Raises:
        ValueError: not a plain decimal, negative, too precise, or too
            large for a NUMERIC(19, 2) column
    """
    if token.startswith("-"):
        raise ValueError(f"negative price {token!r}")
    match = PRICE_PATTERN.fullmatch(token)
    if not match or not (match.group(1) or match.group(2)):
        raise ValueError(f"invalid price {token!r}")
    whole, fraction = match.group(1), match.group(2) or ""
    if len(whole.lstrip("0")) > PRICE_MAX_WHOLE_DIGITS:
        raise ValueError(f"price {token} out of range")
    if len(fraction) > 2:
        raise ValueError(f"price {token} has more than two decimals")
    try:
        return Decimal(token).quantize(PRICE_PRECISION)
    except InvalidOperation:
        raise ValueError(f"invalid price {token!r}")


def parse_copies(token: str) -> int:
    copies = parse_int(token)
    if copies < 0:
        raise ValueError(f"negative copies {copies}")
    return copies


def parse_book_line(line: str, line_number: int = 1) -> Book:
    """
    Parse one book line.

    Format: ``<edition> <d/M/yyyy> <copies> <price> <age> <title words...>``

    The returned book has no author or categories yet.

    Args:
        line: Raw source line
        line_number: 1-based position in the source, used in errors

    Returns:
        Book with the parsed fields

    Raises:
        MalformedLineError: a field is missing, unparseable or out of range
    """
    tokens = line.split()
    if len(tokens) <= BOOK_FIELDS:
        raise MalformedLineError(line_number, line, f"expected at least {BOOK_FIELDS + 1} fields, got {len(tokens)}")

    try:
        edition_type = enum_by_index(EditionType, tokens[0])
        release_date = parse_release_date(tokens[1])
        copies = parse_copies(tokens[2])
        price = parse_price(tokens[3])
        age_restriction = enum_by_index(AgeRestriction, tokens[4])
    except ValueError as e:
        raise MalformedLineError(line_number, line, str(e)) from e

    return Book(
        edition_type=edition_type,
        release_date=release_date,
        copies=copies,
        price=price,
        age_restriction=age_restriction,
        title=" ".join(tokens[BOOK_FIELDS:]).strip()
    )


def parse_book_lines(lines: Iterable[str]) -> List[Book]:
    """
    Parse every non-blank line of a book source.

    Args:
        lines: Source lines

    Returns:
        Books in source order

    Raises:
        MalformedLineError: on the first bad line
    """
    books = []
    for line_number, line in enumerate(lines, 1):
        if not line.strip():
            continue
        books.append(parse_book_line(line, line_number))
    return books


def split_author_name(line: str, line_number: int = 1) -> Tuple[str, str]:
    """Split 'First Last...' into first name and remaining last name."""
    tokens = line.split()
    if len(tokens) < 2:
        raise MalformedLineError(line_number, line, "expected first and last name")
    return tokens[0], " ".join(tokens[1:])


def parse_author_lines(lines: Iterable[str]) -> List[Author]:
    """Parse an author source into unsaved authors."""
    authors = []
    for line_number, line in enumerate(lines, 1):
        if not line.strip():
            continue
        first_name, last_name = split_author_name(line, line_number)
        authors.append(Author(None, first_name, last_name))
    return authors


def parse_category_lines(lines: Iterable[str]) -> List[Category]:
    """Parse a category source into unsaved categories; duplicate names collapse."""
    categories = []
    seen = set()
    for line in lines:
        name = line.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        categories.append(Category(None, name))
    return categories
