"""Reading of Anki .apkg packages into normalized cards."""

from .archive import ArchiveReader
from .config import DankiConfig, ExportConfig, ReaderConfig
from .decompress import decompress_collection, load_collection_image
from .detector import CollectionFormat, detect_format
from .errors import (
    PackageError, CorruptArchiveError, NoCollectionFoundError,
    DecompressionError, StoreOpenError, BatchFatalError, classify_error
)
from .export import cards_to_csv, escape_field, save_csv, strip_markup
from .loader import PackageLoader
from .models import (
    ArchiveFailure, ArchiveOutcome, BatchResult, Card, LoadStatus, RawNoteRow
)
from .normalizer import normalize_row, parse_tags, split_fields
from .store import CollectionStore, StoreEngine
from .study import collect_tags, filter_by_tags

__all__ = [
    'ArchiveReader',
    'DankiConfig',
    'ExportConfig',
    'ReaderConfig',
    'decompress_collection',
    'load_collection_image',
    'CollectionFormat',
    'detect_format',
    'PackageError',
    'CorruptArchiveError',
    'NoCollectionFoundError',
    'DecompressionError',
    'StoreOpenError',
    'BatchFatalError',
    'classify_error',
    'cards_to_csv',
    'escape_field',
    'save_csv',
    'strip_markup',
    'PackageLoader',
    'ArchiveFailure',
    'ArchiveOutcome',
    'BatchResult',
    'Card',
    'LoadStatus',
    'RawNoteRow',
    'normalize_row',
    'parse_tags',
    'split_fields',
    'CollectionStore',
    'StoreEngine',
    'collect_tags',
    'filter_by_tags',
]
