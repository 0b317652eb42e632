"""Decoding of compressed collection entries."""

import logging

import zstandard

from .archive import ArchiveReader
from .detector import CollectionFormat
from .errors import DecompressionError

logger = logging.getLogger(__name__)


def decompress_collection(data: bytes) -> bytes:
    """Decode a zstd compressed collection into a database image.

    Every frame must be complete; concatenated frames are joined.

    Args:
        data: Compressed entry content

    Returns:
        Decompressed database image

    Raises:
        DecompressionError: If the input is empty, malformed or truncated
    """
    if not data:
        raise DecompressionError("Compressed collection is empty")

    dctx = zstandard.ZstdDecompressor()
    chunks = []
    remaining = data
    frames = 0

    try:
        while remaining:
            dobj = dctx.decompressobj()
            chunks.append(dobj.decompress(remaining))
            if not dobj.eof:
                raise DecompressionError(
                    "Compressed collection is truncated", frame=frames, compressed_size=len(data)
                )
            frames += 1
            remaining = dobj.unused_data
    except zstandard.ZstdError as e:
        raise DecompressionError(
            f"Malformed compressed collection: {e}", frame=frames, compressed_size=len(data)
        ) from e

    image = b"".join(chunks)
    logger.debug(f"Decompressed {len(data)} -> {len(image)} bytes ({frames} frame(s))")
    return image


def load_collection_image(reader: ArchiveReader, fmt: CollectionFormat) -> bytes:
    """Read the selected collection entry and return its database image."""
    data = reader.read(fmt.entry_name)
    if fmt.compressed:
        return decompress_collection(data)
    return data
