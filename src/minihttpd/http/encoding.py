"""
=============================================================================
CONTENT NEGOTIATION (RESPONSE ENCODING)
=============================================================================

Decides whether a response may be gzip-compressed, and compresses it.

=============================================================================
CONTENT NEGOTIATION
=============================================================================

The client lists the encodings it understands:

    ┌───────────────────────────────────────────────────────────────┐
    │ GET /echo/abc HTTP/1.1                                        │
    │ Accept-Encoding: deflate, gzip, br                            │
    │                           ────                                │
    │                            └── the only encoding we produce   │
    └───────────────────────────────────────────────────────────────┘

and the server answers with the one it picked:

    ┌───────────────────────────────────────────────────────────────┐
    │ HTTP/1.1 200 OK                                               │
    │ Content-Type: text/plain                                      │
    │ Content-Encoding: gzip                                        │
    │ Content-Length: 23        (compressed size)                   │
    └───────────────────────────────────────────────────────────────┘

Matching is deliberately strict: the header value is split on ", " and a
token must be exactly "gzip". No case folding, no "*" wildcard, no
quality values ("gzip;q=0.5" does NOT match).

=============================================================================
COMPRESSION LEVELS
=============================================================================

    Level 1:  Fastest compression, lowest ratio
    Level 6:  Balanced (default) - good ratio, good speed
    Level 9:  Best compression, slowest

=============================================================================
"""

import gzip
from typing import Optional


SUPPORTED_ENCODING = "gzip"
ENCODING_SEPARATOR = ", "

# Stand-in value for a missing Accept-Encoding header
MISSING_ENCODING = "invalid"

DEFAULT_COMPRESSION_LEVEL = 6


def supports_gzip(accept_encoding: Optional[str]) -> bool:
    """
    Check whether an Accept-Encoding header value allows gzip.

    Args:
        accept_encoding: The raw header value, or None if the header was
                         absent. The literal "invalid" is also accepted as
                         "absent" and never matches.

    Returns:
        True iff one of the ", "-separated tokens is exactly "gzip".

    Examples:
        >>> supports_gzip("gzip")
        True
        >>> supports_gzip("deflate, gzip")
        True
        >>> supports_gzip("deflate, br")
        False
        >>> supports_gzip("gzip,deflate")
        False
    """
    if accept_encoding is None:
        accept_encoding = MISSING_ENCODING

    return any(
        token == SUPPORTED_ENCODING
        for token in accept_encoding.split(ENCODING_SEPARATOR)
    )


def gzip_compress(data: bytes, level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    """
    Compress data into a complete gzip member.

    The gzip header's modification time is fixed at 0, so the same input
    always produces the same bytes.

    Args:
        data: Uncompressed bytes.
        level: Compression level (1-9).

    Returns:
        gzip-format bytes, decompressible with gzip.decompress().
    """
    return gzip.compress(data, compresslevel=level, mtime=0)
