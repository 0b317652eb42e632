"""Package reading errors."""

from danki.common import DankiError


class PackageError(DankiError):
    """A single package could not be read. The batch skips it and continues."""
    pass


class CorruptArchiveError(PackageError):
    """Zip container is unreadable."""
    pass


class NoCollectionFoundError(PackageError):
    """None of the known collection entries is present."""
    pass


class DecompressionError(PackageError):
    """Compressed collection entry is malformed or truncated."""
    pass


class StoreOpenError(PackageError):
    """Collection image is not a database with the expected tables."""
    pass


class BatchFatalError(DankiError):
    """Failure outside any single package; aborts the whole batch."""
    pass


def classify_error(exception: Exception) -> str:
    """
    Classify an exception into an error category.

    Args:
        exception: The exception to classify

    Returns:
        Error category string: 'corrupt', 'no_collection', 'decompression',
        'store', 'fatal', or 'unknown'
    """
    if isinstance(exception, CorruptArchiveError):
        return 'corrupt'
    elif isinstance(exception, NoCollectionFoundError):
        return 'no_collection'
    elif isinstance(exception, DecompressionError):
        return 'decompression'
    elif isinstance(exception, StoreOpenError):
        return 'store'
    elif isinstance(exception, BatchFatalError):
        return 'fatal'
    else:
        return 'unknown'
