"""Content-type resolution for uploaded objects.

The extension registry is consulted first. Unknown extensions fall back to
sniffing the leading bytes of the content, following the WHATWG MIME
sniffing signatures for the common web, image, audio, video, archive and
font formats.
"""

import mimetypes
from pathlib import PurePosixPath

SNIFF_LEN = 512

TEXT_PLAIN = "text/plain; charset=utf-8"
OCTET_STREAM = "application/octet-stream"

# Bytes that never appear in text content.
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)

_WHITESPACE = b"\t\n\x0c\r "

# Tags matched case-insensitively after leading whitespace, terminated by a
# space or '>'.
_HTML_TAGS = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

# (prefix, content type) checked in order against the raw content.
_EXACT_SIGNATURES = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", TEXT_PLAIN),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b".snd", "audio/basic"),
    (b"OggS\x00", "application/ogg"),
    (b"MThd\x00\x00\x00\x06", "audio/midi"),
    (b"ID3", "audio/mpeg"),
    (b"\x1a\x45\xdf\xa3", "video/webm"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"7z\xbc\xaf\x27\x1c", "application/x-7z-compressed"),
    (b"\x00asm", "application/wasm"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"OTTO", "font/otf"),
    (b"ttcf", "font/collection"),
    (b"\x00\x01\x00\x00", "font/ttf"),
)

# RIFF containers: b"RIFF" + 4 length bytes + form type.
_RIFF_FORMS = (
    (b"WEBPVP", "image/webp"),
    (b"WAVE", "audio/wave"),
    (b"AVI ", "video/avi"),
)


def detect_content_type(name: str, content: bytes) -> str:
    """Resolve the content type for an object.

    Args:
        name: File name; its extension is looked up in the mimetypes
            registry.
        content: Full file content, sniffed when the extension is unknown.

    Returns:
        A content type string, never empty.
    """
    content_type, _ = mimetypes.guess_type(PurePosixPath(name).name)
    if content_type:
        return content_type
    return sniff_content_type(content)


def sniff_content_type(content: bytes) -> str:
    """Derive a content type from at most the first 512 bytes."""
    data = content[:SNIFF_LEN]

    stripped = data.lstrip(_WHITESPACE)
    if _is_html(stripped):
        return "text/html; charset=utf-8"
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"

    for prefix, content_type in _EXACT_SIGNATURES:
        if data.startswith(prefix):
            return content_type

    if data[:4] == b"RIFF":
        form = data[8:14]
        for prefix, content_type in _RIFF_FORMS:
            if form.startswith(prefix):
                return content_type
    if data[:4] == b"FORM" and data[8:12] == b"AIFF":
        return "audio/aiff"
    if _is_mp4(data):
        return "video/mp4"

    if any(byte in _BINARY_BYTES for byte in data):
        return OCTET_STREAM
    return TEXT_PLAIN


def _is_html(data: bytes) -> bool:
    upper = data[:16].upper()
    for tag in _HTML_TAGS:
        if not upper.startswith(tag):
            continue
        if data[len(tag) : len(tag) + 1] in (b" ", b">"):
            return True
    return False


def _is_mp4(data: bytes) -> bool:
    if len(data) < 12:
        return False
    box_size = int.from_bytes(data[:4], "big")
    if box_size % 4 != 0 or len(data) < box_size:
        return False
    if data[4:8] != b"ftyp":
        return False
    for start in range(8, box_size, 4):
        if start == 12:
            # Skip the minor version.
            continue
        if data[start : start + 3] == b"mp4":
            return True
    return False
