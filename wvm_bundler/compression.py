"""
Brotli compression for encoded bundles.
"""
import logging

import brotli

from .config import DEFAULT_MAX_DECOMPRESSED_SIZE
from .exceptions import CompressionError

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 11


def compress(data: bytes, quality: int = DEFAULT_QUALITY) -> bytes:
    """
    Compress bytes with brotli.

    Output is not canonical across brotli versions or quality settings, but
    always round-trips through decompress().
    """
    compressed = brotli.compress(bytes(data), quality=quality)
    logger.debug(f"Compressed {len(data)} bytes to {len(compressed)} bytes")
    return compressed


def decompress(data: bytes, max_size: int = DEFAULT_MAX_DECOMPRESSED_SIZE) -> bytes:
    """
    Decompress a brotli stream, refusing to produce more than max_size bytes.

    Calldata can be written by anyone, so the output is produced in bounded
    steps and never grows past max_size + 1 bytes.

    Raises:
        CompressionError: If the stream is malformed, truncated or
            decompresses to more than max_size bytes
    """
    decompressor = brotli.Decompressor()
    output = bytearray()
    try:
        chunk = decompressor.process(bytes(data), output_buffer_limit=max_size + 1)
        while True:
            output += chunk
            if len(output) > max_size:
                raise CompressionError(
                    f"Decompressed bundle exceeds {max_size} bytes "
                    f"({len(data)} bytes of compressed input)"
                )
            if decompressor.can_accept_more_data():
                break
            chunk = decompressor.process(b"", output_buffer_limit=max_size + 1 - len(output))
    except brotli.error as e:
        raise CompressionError(f"Failed to decompress bundle: {str(e)}")

    if not decompressor.is_finished():
        raise CompressionError("Failed to decompress bundle: truncated stream")
    return bytes(output)
