"""In-memory access to .apkg zip containers."""

import io
import logging
import zipfile
import zlib
from typing import List, Optional

from .errors import CorruptArchiveError

logger = logging.getLogger(__name__)

# Raised by zipfile for damaged containers and entries
_ZIP_READ_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    EOFError,
    zlib.error,
    NotImplementedError,  # unsupported compression method
    RuntimeError,  # encrypted entry
    OSError,
)


class ArchiveReader:
    """Reads entries of a zip container held in memory.

    Usage:
        with ArchiveReader(data, name="deck.apkg") as reader:
            names = reader.names()
            blob = reader.read("collection.anki2")
    """

    def __init__(self, data: bytes, name: str = "<memory>"):
        """Open the container.

        Args:
            data: Raw bytes of the zip file
            name: Display name used in errors and logs

        Raises:
            CorruptArchiveError: If the bytes are not a readable zip container
        """
        self.name = name
        try:
            self._zip: Optional[zipfile.ZipFile] = zipfile.ZipFile(io.BytesIO(data))
        except _ZIP_READ_ERRORS as e:
            raise CorruptArchiveError(
                f"Not a valid zip archive: {e}", archive=name
            ) from e
        self._names = [info.filename for info in self._zip.infolist() if not info.is_dir()]
        self._name_set = frozenset(self._names)
        logger.debug(f"Opened {name} ({len(data)} bytes, {len(self._names)} entries)")

    def names(self) -> List[str]:
        """Entry names in directory order, directories excluded."""
        return list(self._names)

    def has(self, entry_name: str) -> bool:
        return entry_name in self._name_set

    def read(self, entry_name: str) -> bytes:
        """Return the decoded content of an entry.

        Raises:
            CorruptArchiveError: If the entry is missing or cannot be decoded
        """
        try:
            return self._zip.read(entry_name)
        except KeyError as e:
            raise CorruptArchiveError(
                f"Entry not found: {entry_name}", archive=self.name, entry=entry_name
            ) from e
        except _ZIP_READ_ERRORS as e:
            raise CorruptArchiveError(
                f"Cannot read entry {entry_name}: {e}", archive=self.name, entry=entry_name
            ) from e

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def __enter__(self) -> "ArchiveReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
