"""Conversion of raw note rows into cards."""

from typing import Optional, Tuple

from .models import Card, RawNoteRow

# ASCII unit separator between note fields
FIELD_SEPARATOR = "\x1f"
BACK_SEPARATOR = "<br/>"


def split_fields(fields: Optional[str]) -> Tuple[str, str]:
    """Split a note's field blob into front and back.

    The first field is the front. Remaining fields are joined with a
    ``<br/>`` marker to form the back.

    Examples:
        >>> split_fields("A\\x1fB\\x1fC")
        ('A', 'B<br/>C')
        >>> split_fields("Q")
        ('Q', '')
    """
    if not fields:
        return "", ""
    parts = fields.split(FIELD_SEPARATOR)
    return parts[0], BACK_SEPARATOR.join(parts[1:])


def parse_tags(tags: Optional[str]) -> Tuple[str, ...]:
    """Parse a space separated tag string, dropping empty segments.

    Order and duplicates are kept.
    """
    if not tags:
        return ()
    return tuple(tag for tag in tags.strip().split(" ") if tag)


def normalize_row(row: RawNoteRow, archive_index: int = 0) -> Card:
    """Build a card from a joined row. Field markup passes through untouched."""
    front, back = split_fields(row.fields)
    return Card(
        id=row.card_id,
        front=front,
        back=back,
        tags=parse_tags(row.tags),
        archive_index=archive_index,
    )
