"""In-memory SQLite access to collection images."""

import logging
import sqlite3
from contextlib import closing
from typing import Iterator, Optional, Union

from .errors import BatchFatalError, StoreOpenError
from .models import RawNoteRow

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("cards", "notes")

NOTE_ROWS_QUERY = """
    SELECT c.id AS id, n.flds AS flds, n.tags AS tags
    FROM cards c
    JOIN notes n ON c.nid = n.id
    LIMIT ?
"""

# SQLite header bytes 18/19 hold the read/write format version, 2 means WAL
_HEADER_VERSION_OFFSET = 18
_WAL_VERSION = b"\x02\x02"
_ROLLBACK_VERSION = b"\x01\x01"


def _without_wal_flag(image: bytes) -> bytes:
    # In-memory databases cannot use WAL, so a WAL image must be flipped back
    # to rollback journal mode before it can be read.
    end = _HEADER_VERSION_OFFSET + 2
    if image[_HEADER_VERSION_OFFSET:end] == _WAL_VERSION:
        return image[:_HEADER_VERSION_OFFSET] + _ROLLBACK_VERSION + image[end:]
    return image


def _decode_text(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


def _as_text(value: Union[str, bytes, None]) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return _decode_text(value)
    return str(value)


def _as_card_id(value: object) -> int:
    # Anki ids are integers; anything else means the cards table is not Anki's
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError(f"unexpected card id type {type(value).__name__}")
    return int(value)


class CollectionStore:
    """
    One collection image opened as an in-memory SQLite database.

    The connection is closed when the store is closed or its context exits,
    including when row iteration raises.
    """

    def __init__(self, image: bytes, name: str = "<memory>"):
        """
        Open and validate a database image.

        Args:
            image: Raw SQLite database bytes
            name: Display name used in errors and logs

        Raises:
            StoreOpenError: If the image is not a database with cards and notes tables
        """
        self.name = name
        if not image:
            raise StoreOpenError("Collection database is empty", archive=name)

        self._cursor: Optional[sqlite3.Cursor] = None
        self._connection: Optional[sqlite3.Connection] = sqlite3.connect(":memory:")
        self._connection.row_factory = sqlite3.Row
        # TEXT values that are not valid UTF-8 are decoded lossily, like BLOBs
        self._connection.text_factory = _decode_text
        try:
            self._connection.deserialize(_without_wal_flag(image))
            self._check_schema()
        except (sqlite3.Error, OverflowError) as e:
            self.close()
            raise StoreOpenError(f"Not a valid collection database: {e}", archive=name) from e
        except StoreOpenError:
            self.close()
            raise

        logger.debug(f"Opened collection database for {name} ({len(image)} bytes)")

    def _check_schema(self) -> None:
        with closing(self._connection.cursor()) as cursor:
            cursor.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            tables = {row["name"] for row in cursor.fetchall()}

        missing = [table for table in REQUIRED_TABLES if table not in tables]
        if missing:
            raise StoreOpenError(
                f"Collection database is missing table(s): {', '.join(missing)}",
                archive=self.name,
                tables=sorted(tables),
            )

    def iter_note_rows(self, limit: int) -> Iterator[RawNoteRow]:
        """
        Yield card rows joined with their notes, at most ``limit`` of them.

        Args:
            limit: Row cap; rows beyond it are dropped silently

        Raises:
            StoreOpenError: If the query fails
        """
        if self._connection is None:
            raise StoreOpenError("Collection store is closed", archive=self.name)

        cursor = self._cursor = self._connection.cursor()
        try:
            cursor.execute(NOTE_ROWS_QUERY, (limit,))
            for row in cursor:
                try:
                    card_id = _as_card_id(row["id"])
                except (TypeError, ValueError) as e:
                    raise StoreOpenError(
                        f"Invalid card id {row['id']!r}: {e}", archive=self.name
                    ) from e
                yield RawNoteRow(
                    card_id=card_id,
                    fields=_as_text(row["flds"]),
                    tags=_as_text(row["tags"]),
                )
        except sqlite3.Error as e:
            raise StoreOpenError(f"Cannot read cards: {e}", archive=self.name) from e
        finally:
            # close() may already have released the cursor with the connection
            if self._cursor is cursor:
                self._cursor = None
                cursor.close()

    def close(self) -> None:
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> "CollectionStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class StoreEngine:
    """
    Embedded database engine shared by all packages of a batch.

    Created once per batch; each package gets its own ``CollectionStore``.
    """

    def __init__(self):
        """
        Raises:
            BatchFatalError: If SQLite cannot host in-memory database images
        """
        if not hasattr(sqlite3.Connection, "deserialize"):
            raise BatchFatalError(
                "SQLite build does not support in-memory database images",
                sqlite_version=sqlite3.sqlite_version,
            )
        try:
            with closing(sqlite3.connect(":memory:")) as probe:
                probe.execute("SELECT 1").fetchone()
        except sqlite3.Error as e:
            raise BatchFatalError(f"Database engine failed to initialize: {e}") from e

        self.sqlite_version = sqlite3.sqlite_version
        self._open = True
        logger.debug(f"Database engine ready (SQLite {self.sqlite_version})")

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self, image: bytes, name: str = "<memory>") -> CollectionStore:
        """Open a collection image as a store."""
        if not self._open:
            raise BatchFatalError("Database engine is closed")
        return CollectionStore(image, name=name)

    def close(self) -> None:
        self._open = False

    def __enter__(self) -> "StoreEngine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
