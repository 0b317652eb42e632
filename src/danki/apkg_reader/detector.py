"""Collection variant detection."""

import logging
from enum import Enum
from typing import Iterable

from .errors import NoCollectionFoundError

logger = logging.getLogger(__name__)


class CollectionFormat(Enum):
    """Known collection entries, highest priority first.

    Newer exports often ship a legacy stub next to the real collection, so
    the newest variant present always wins.
    """
    ANKI21B = "collection.anki21b"
    ANKI21 = "collection.anki21"
    ANKI2 = "collection.anki2"

    @property
    def entry_name(self) -> str:
        return self.value

    @property
    def compressed(self) -> bool:
        """Whether the entry is zstd compressed."""
        return self is not CollectionFormat.ANKI2


def detect_format(entry_names: Iterable[str]) -> CollectionFormat:
    """Select the collection variant to read.

    Args:
        entry_names: Names of all entries in the archive

    Returns:
        Highest priority variant present

    Raises:
        NoCollectionFoundError: If no known collection entry exists
    """
    present = set(entry_names)
    for fmt in CollectionFormat:
        if fmt.entry_name in present:
            logger.debug(f"Detected collection format {fmt.entry_name}")
            return fmt

    expected = ", ".join(fmt.entry_name for fmt in CollectionFormat)
    raise NoCollectionFoundError(
        f"No collection found (expected one of: {expected})",
        entries=sorted(present),
    )
