"""Raw (headerless) deflate decoding of candidate segments."""

import logging
import zlib

logger = logging.getLogger(__name__)


class InflateError(ValueError):
    """Raised when a byte range is not a complete raw deflate stream.

    Most candidate segments are not compressed at all, so this is an
    expected outcome and callers skip the segment.
    """

    pass


def inflate_raw(data: bytes) -> bytes:
    """Decompress a raw deflate stream (no zlib or gzip framing).

    Decoding stops at the final block; any trailing bytes are ignored.

    Args:
        data: Compressed bytes

    Returns:
        Decompressed bytes

    Raises:
        InflateError: If the stream is invalid or truncated
    """
    d = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        out = d.decompress(data)
    except zlib.error as e:
        raise InflateError(f"Decompression failed: {e}") from e

    if not d.eof:
        raise InflateError(
            f"Truncated deflate stream: no final block in {len(data)} bytes"
        )
    return out


def try_inflate(data: bytes) -> bytes | None:
    """Like inflate_raw(), but return None instead of raising."""
    try:
        return inflate_raw(data)
    except InflateError as e:
        logger.debug("%s", e)
        return None
