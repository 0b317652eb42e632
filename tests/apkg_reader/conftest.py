"""Fixtures that build real .apkg packages in memory."""

import io
import sqlite3
import zipfile
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
import zstandard

NOTES_SCHEMA = """
    CREATE TABLE notes (
        id INTEGER PRIMARY KEY,
        guid TEXT NOT NULL,
        mid INTEGER NOT NULL,
        mod INTEGER NOT NULL,
        usn INTEGER NOT NULL,
        tags TEXT NOT NULL,
        flds TEXT NOT NULL,
        sfld TEXT NOT NULL,
        csum INTEGER NOT NULL,
        flags INTEGER NOT NULL,
        data TEXT NOT NULL
    )
"""

CARDS_SCHEMA = """
    CREATE TABLE cards (
        id INTEGER PRIMARY KEY,
        nid INTEGER NOT NULL,
        did INTEGER NOT NULL,
        ord INTEGER NOT NULL,
        mod INTEGER NOT NULL,
        usn INTEGER NOT NULL,
        type INTEGER NOT NULL,
        queue INTEGER NOT NULL,
        due INTEGER NOT NULL,
        ivl INTEGER NOT NULL,
        factor INTEGER NOT NULL,
        reps INTEGER NOT NULL,
        lapses INTEGER NOT NULL,
        left INTEGER NOT NULL,
        odue INTEGER NOT NULL,
        odid INTEGER NOT NULL,
        flags INTEGER NOT NULL,
        data TEXT NOT NULL
    )
"""


def build_collection(
    notes: Sequence[Tuple[str, str]],
    first_card_id: int = 1001,
    cards_per_note: int = 1,
    tables: Tuple[str, ...] = ("notes", "cards"),
) -> bytes:
    """Create a collection database image.

    Args:
        notes: (flds, tags) per note
        first_card_id: Id of the first card, following cards count up
        cards_per_note: Cards generated from every note
        tables: Tables to create, to simulate broken schemas

    Returns:
        Serialized SQLite database
    """
    conn = sqlite3.connect(":memory:")
    try:
        if "notes" in tables:
            conn.execute(NOTES_SCHEMA)
        if "cards" in tables:
            conn.execute(CARDS_SCHEMA)

        card_id = first_card_id
        for note_id, (flds, tags) in enumerate(notes, start=1):
            if "notes" in tables:
                conn.execute(
                    "INSERT INTO notes VALUES (?, ?, 1, 0, -1, ?, ?, ?, 0, 0, '')",
                    (note_id, f"guid{note_id}", tags, flds, flds.split("\x1f")[0]),
                )
            if "cards" in tables:
                for ordinal in range(cards_per_note):
                    conn.execute(
                        "INSERT INTO cards VALUES "
                        "(?, ?, 1, ?, 0, -1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, '')",
                        (card_id, note_id, ordinal),
                    )
                    card_id += 1
        conn.commit()
        return conn.serialize()
    finally:
        conn.close()


def compress(data: bytes) -> bytes:
    return zstandard.ZstdCompressor().compress(data)


def build_package(entries: Dict[str, bytes], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    """Zip the given entries into package bytes."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buffer.getvalue()


def build_apkg(
    notes: Sequence[Tuple[str, str]],
    entry: str = "collection.anki21b",
    extra_entries: Optional[Dict[str, bytes]] = None,
    first_card_id: int = 1001,
) -> bytes:
    """Package with a single collection entry, compressed when the variant requires it."""
    image = build_collection(notes, first_card_id=first_card_id)
    if entry != "collection.anki2":
        image = compress(image)
    entries = {entry: image, "media": b"{}"}
    entries.update(extra_entries or {})
    return build_package(entries)


@pytest.fixture
def make_collection():
    """Factory for collection database images."""
    return build_collection


@pytest.fixture
def make_package():
    """Factory for zip packages from an entry mapping."""
    return build_package


@pytest.fixture
def make_apkg():
    """Factory for complete .apkg packages."""
    return build_apkg


@pytest.fixture
def zstd_compress():
    return compress


@pytest.fixture
def sample_notes() -> List[Tuple[str, str]]:
    """Two notes: a two-field note with a tag and a one-field note without."""
    return [
        ("Q1\x1fA1", " t1 "),
        ("Q2", ""),
    ]
