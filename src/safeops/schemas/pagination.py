"""Keyset pagination: cursors, page envelope."""

import base64
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

T = TypeVar("T")

_SEPARATOR = "|"


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a newest-first listing.

    ``next_cursor`` is opaque; pass it back unchanged to fetch the next page.
    """

    items: list[T]
    next_cursor: str | None = Field(
        default=None,
        description="Opaque cursor for fetching the next page. None if no more pages.",
    )
    has_more: bool = Field(
        default=False,
        description="Whether there are more items after this page.",
    )


def encode_cursor(position: datetime, row_id: UUID) -> str:
    """Cursor pointing just past the row at (``position``, ``row_id``)."""
    raw = f"{position.isoformat()}{_SEPARATOR}{row_id}"
    return base64.urlsafe_b64encode(raw.encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, UUID]:
    """Inverse of ``encode_cursor``.

    Raises:
        ValueError: If the cursor is malformed
    """
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        position, row_id = raw.rsplit(_SEPARATOR, 1)
        return datetime.fromisoformat(position), UUID(row_id)
    except (ValueError, UnicodeDecodeError) as e:
        raise ValueError("Invalid cursor") from e
