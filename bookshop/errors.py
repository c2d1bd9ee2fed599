"""Errors raised while seeding and storing the catalog."""
from typing import Optional


class SeedError(Exception):
    """Base class for seeding failures."""


class MalformedLineError(SeedError):
    """A source line cannot be parsed into a record."""

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"Line {line_number}: {reason}: {line!r}")


class MissingReferenceError(SeedError):
    """A sampled author or category does not resolve to a stored row."""

    def __init__(self, entity: str, entity_id: Optional[int] = None):
        self.entity = entity
        self.entity_id = entity_id
        if entity_id is None:
            message = f"No {entity} available to reference"
        else:
            message = f"{entity} {entity_id} not found"
        super().__init__(message)


class StorageError(SeedError):
    """A write to storage failed."""
