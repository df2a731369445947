"""
PlantUML text encoding.

Turns diagram source into a URL the PlantUML server can render: the text is
UTF-8 encoded, compressed with raw DEFLATE (no zlib or gzip framing), and the
compressed bytes are re-encoded with PlantUML's 64-symbol alphabet
``0-9A-Za-z-_``.

Example:
    from umlstudio.encoder import encode_diagram

    url = await encode_diagram("@startuml\\nAlice -> Bob\\n@enduml")
    # https://www.plantuml.com/plantuml/svg/<fragment>
"""

from __future__ import annotations

import asyncio
import zlib

from umlstudio.logging import get_logger

logger = get_logger("encoder")

PLANTUML_SERVER_URL = "https://www.plantuml.com/plantuml"
PLANTUML_SVG_URL = f"{PLANTUML_SERVER_URL}/svg/"

OUTPUT_FORMATS = ("svg", "png", "txt")

# Raw DEFLATE stream: negative window bits suppress the zlib header and trailer
_RAW_DEFLATE_WBITS = -15


def encode_6bit(value: int) -> str:
    """Map a 6-bit value (0-63) to its PlantUML alphabet character."""
    value &= 0x3F
    if value < 10:
        return chr(48 + value)  # '0'..'9'
    value -= 10
    if value < 26:
        return chr(65 + value)  # 'A'..'Z'
    value -= 26
    if value < 26:
        return chr(97 + value)  # 'a'..'z'
    value -= 26
    return "-" if value == 0 else "_"


def encode_3bytes(b1: int, b2: int, b3: int) -> str:
    """Pack three bytes into four PlantUML alphabet characters."""
    c1 = b1 >> 2
    c2 = ((b1 & 0x3) << 4) | (b2 >> 4)
    c3 = ((b2 & 0xF) << 2) | (b3 >> 6)
    c4 = b3 & 0x3F
    return (
        encode_6bit(c1 & 0x3F)
        + encode_6bit(c2 & 0x3F)
        + encode_6bit(c3 & 0x3F)
        + encode_6bit(c4 & 0x3F)
    )


def encode_bytes(data: bytes) -> str:
    """
    Encode a byte sequence with the PlantUML alphabet.

    Incomplete trailing groups are padded with zero bytes, not ``=``, and the
    number of padding bytes is not recorded. The result is always
    ``4 * ceil(len(data) / 3)`` characters long.

    Args:
        data: Bytes to encode (usually raw DEFLATE output)

    Returns:
        Encoded fragment, empty for empty input
    """
    chunks: list[str] = []
    length = len(data)
    for i in range(0, length, 3):
        remaining = length - i
        if remaining >= 3:
            chunks.append(encode_3bytes(data[i], data[i + 1], data[i + 2]))
        elif remaining == 2:
            chunks.append(encode_3bytes(data[i], data[i + 1], 0))
        else:
            chunks.append(encode_3bytes(data[i], 0, 0))
    return "".join(chunks)


def deflate_raw(data: bytes) -> bytes:
    """Compress bytes with raw DEFLATE (no header, checksum or trailer)."""
    compressor = zlib.compressobj(
        zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, _RAW_DEFLATE_WBITS
    )
    return compressor.compress(data) + compressor.flush()


def build_server_url(
    server_url: str = PLANTUML_SERVER_URL,
    output_format: str = "svg",
) -> str:
    """
    Build the URL prefix that encoded fragments are appended to.

    Args:
        server_url: PlantUML server root, e.g. ``https://www.plantuml.com/plantuml``
        output_format: One of ``svg``, ``png`` or ``txt``

    Returns:
        Prefix ending in ``/``, e.g. ``https://www.plantuml.com/plantuml/svg/``
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unsupported output format: {output_format!r} "
            f"(expected one of {', '.join(OUTPUT_FORMATS)})"
        )
    return f"{server_url.rstrip('/')}/{output_format}/"


def encode_fragment(text: str) -> str:
    """Encode diagram source into the URL fragment, or ``""`` for blank text."""
    if not text.strip():
        return ""

    raw = text.encode("utf-8")
    compressed = deflate_raw(raw)
    logger.debug("Compressed %d bytes to %d bytes", len(raw), len(compressed))
    return encode_bytes(compressed)


def encode_diagram_sync(text: str, base_url: str = PLANTUML_SVG_URL) -> str:
    """
    Encode diagram source into a rendering URL without an event loop.

    Returns ``""`` when the text is empty or whitespace only, meaning there
    is nothing to render. Compression errors propagate to the caller.
    """
    fragment = encode_fragment(text)
    if not fragment:
        return ""
    return f"{base_url}{fragment}"


async def encode_diagram(text: str, base_url: str = PLANTUML_SVG_URL) -> str:
    """
    Encode diagram source into a rendering URL.

    Compression runs in a worker thread so large diagrams do not stall the
    event loop. The result is identical to :func:`encode_diagram_sync`.

    Args:
        text: Diagram source
        base_url: Prefix the encoded fragment is appended to

    Returns:
        ``base_url`` followed by the encoded fragment, or ``""`` for blank text
    """
    if not text.strip():
        return ""
    return await asyncio.to_thread(encode_diagram_sync, text, base_url)
