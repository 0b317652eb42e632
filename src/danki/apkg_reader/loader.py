"""Batch loading of .apkg packages into cards."""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from danki.common import LogContext
from .archive import ArchiveReader
from .config import DEFAULT_ROW_LIMIT
from .decompress import load_collection_image
from .detector import detect_format
from .errors import CorruptArchiveError, PackageError, classify_error
from .models import (
    ArchiveFailure,
    ArchiveOutcome,
    BatchResult,
    Card,
    LoadStatus,
)
from .normalizer import normalize_row
from .store import StoreEngine

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]
ArchiveResult = Union[ArchiveOutcome, ArchiveFailure]


class PackageLoader:
    """Loads one or more packages into a single card list.

    Lifecycle: ``idle -> loading -> ready | error``. Packages are read one at
    a time in submission order. A package that fails is skipped and recorded
    in ``failures``; only failures outside any single package (such as the
    database engine failing to start) end in ``error``.

    Results of a load become visible through ``cards``, ``manifest`` and
    ``error`` only once it reaches a terminal state. Calling ``load`` again
    discards the previous result.
    """

    def __init__(self, row_limit: int = DEFAULT_ROW_LIMIT):
        """Initialize loader.

        Args:
            row_limit: Maximum number of cards read from each package
        """
        if row_limit < 1:
            raise ValueError(f"row_limit must be positive, got {row_limit}")
        self.row_limit = row_limit
        self._result = BatchResult(status=LoadStatus.IDLE)

    @property
    def status(self) -> LoadStatus:
        return self._result.status

    @property
    def cards(self) -> Tuple[Card, ...]:
        return self._result.cards

    @property
    def manifest(self) -> Tuple[str, ...]:
        return self._result.manifest

    @property
    def error(self) -> Optional[str]:
        return self._result.error

    @property
    def failures(self) -> Tuple[ArchiveFailure, ...]:
        return self._result.failures

    @property
    def result(self) -> BatchResult:
        return self._result

    def load(
        self,
        files: Sequence[Tuple[str, bytes]],
        progress_callback: Optional[ProgressCallback] = None
    ) -> BatchResult:
        """Load packages from memory.

        Args:
            files: (name, content) pairs in submission order
            progress_callback: Optional callback(current, total, name); current
                is 1-based and exceeds total once loading is complete

        Returns:
            Terminal batch result

        Raises:
            ValueError: If no files were submitted
        """
        if not files:
            raise ValueError("At least one package must be submitted")

        sources = [(name, (lambda data=data: data)) for name, data in files]
        return self._run(sources, progress_callback)

    def load_paths(
        self,
        paths: Iterable[Path],
        progress_callback: Optional[ProgressCallback] = None
    ) -> BatchResult:
        """Load packages from files on disk.

        A file that cannot be read is skipped like a corrupt package.

        Raises:
            ValueError: If no paths were given
        """
        paths = [Path(p) for p in paths]
        if not paths:
            raise ValueError("At least one package must be submitted")

        sources = [(path.name, path.read_bytes) for path in paths]
        return self._run(sources, progress_callback)

    def _run(
        self,
        sources: List[Tuple[str, Callable[[], bytes]]],
        progress_callback: Optional[ProgressCallback]
    ) -> BatchResult:
        self._result = BatchResult(status=LoadStatus.LOADING)
        total = len(sources)
        logger.info(f"Loading {total} package(s)")

        cards: List[Card] = []
        manifest: List[str] = []
        failures: List[ArchiveFailure] = []

        try:
            with StoreEngine() as engine:
                for index, (name, read) in enumerate(sources):
                    if progress_callback:
                        progress_callback(index + 1, total, name)

                    with LogContext(logger, archive=name, archive_index=index):
                        try:
                            data = read()
                        except OSError as e:
                            outcome = self._skip(
                                name, CorruptArchiveError(f"Cannot read file: {e}", archive=name)
                            )
                        else:
                            outcome = self.load_archive(engine, name, data, archive_index=index)

                    manifest.extend(outcome.manifest)
                    if isinstance(outcome, ArchiveOutcome):
                        cards.extend(outcome.cards)
                    else:
                        failures.append(outcome)
        except Exception as e:
            logger.exception(f"Loading failed: {e}", extra={"category": classify_error(e)})
            self._result = BatchResult(
                status=LoadStatus.ERROR,
                error=str(e) or type(e).__name__,
            )
            return self._result

        if progress_callback:
            progress_callback(total + 1, total, "Complete")

        if not cards:
            logger.warning(f"No cards found in {total} package(s)")
        logger.info(
            f"Loaded {len(cards)} card(s) from {total - len(failures)}/{total} package(s)"
        )

        self._result = BatchResult(
            status=LoadStatus.READY,
            cards=tuple(cards),
            manifest=tuple(manifest),
            failures=tuple(failures),
        )
        return self._result

    def load_archive(
        self,
        engine: StoreEngine,
        name: str,
        data: bytes,
        archive_index: int = 0
    ) -> ArchiveResult:
        """Read the cards of a single package.

        Args:
            engine: Database engine of the running batch
            name: Package display name
            data: Package bytes
            archive_index: Position of the package in its batch

        Returns:
            ArchiveOutcome on success, ArchiveFailure if the package was skipped
        """
        entry_names: Tuple[str, ...] = ()
        try:
            with ArchiveReader(data, name=name) as reader:
                entry_names = tuple(reader.names())
                fmt = detect_format(entry_names)
                image = load_collection_image(reader, fmt)

            with engine.open(image, name=name) as store:
                cards = tuple(
                    normalize_row(row, archive_index=archive_index)
                    for row in store.iter_note_rows(self.row_limit)
                )
        except PackageError as e:
            return self._skip(name, e, entry_names)

        if len(cards) == self.row_limit:
            logger.info(f"{name}: row limit of {self.row_limit} reached")
        logger.info(f"{name}: loaded {len(cards)} card(s) from {fmt.entry_name}")

        return ArchiveOutcome(
            name=name,
            format=fmt,
            cards=cards,
            entry_names=entry_names,
        )

    def _skip(
        self,
        name: str,
        error: PackageError,
        entry_names: Tuple[str, ...] = ()
    ) -> ArchiveFailure:
        category = classify_error(error)
        logger.warning(
            f"Skipping {name} ({category}): {error.message}", extra={"category": category}
        )
        return ArchiveFailure(name=name, error=error, entry_names=entry_names)
