"""Card model and batch results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional, Tuple

from .detector import CollectionFormat
from .errors import PackageError


class RawNoteRow(NamedTuple):
    """One row of the cards/notes join, before normalization."""
    card_id: int
    fields: Optional[str]
    tags: Optional[str]


@dataclass(frozen=True)
class Card:
    """A normalized card.

    ``id`` comes from the package's cards table and is only unique within
    that package. Use ``key`` when cards from several packages are mixed.
    """
    id: int
    front: str
    back: str
    tags: Tuple[str, ...] = ()
    archive_index: int = 0

    @property
    def key(self) -> str:
        return f"{self.archive_index}:{self.id}"


class LoadStatus(Enum):
    """Loader lifecycle states."""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


def qualify_entry(archive_name: str, entry_name: str) -> str:
    """Manifest line for an entry of an archive."""
    return f"{archive_name}: {entry_name}"


@dataclass(frozen=True)
class ArchiveOutcome:
    """Package read successfully."""
    name: str
    format: CollectionFormat
    cards: Tuple[Card, ...]
    entry_names: Tuple[str, ...]

    @property
    def manifest(self) -> Tuple[str, ...]:
        return tuple(qualify_entry(self.name, entry) for entry in self.entry_names)


@dataclass(frozen=True)
class ArchiveFailure:
    """Package skipped because of a per-package error."""
    name: str
    error: PackageError
    entry_names: Tuple[str, ...] = ()

    @property
    def manifest(self) -> Tuple[str, ...]:
        return tuple(qualify_entry(self.name, entry) for entry in self.entry_names)

    def __str__(self) -> str:
        return f"{self.name}: {self.error.message}"


@dataclass(frozen=True)
class BatchResult:
    """Terminal result of a load."""
    status: LoadStatus
    cards: Tuple[Card, ...] = ()
    manifest: Tuple[str, ...] = ()
    error: Optional[str] = None
    failures: Tuple[ArchiveFailure, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.READY
