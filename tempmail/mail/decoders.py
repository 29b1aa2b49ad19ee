"""Transfer-encoding and charset decoding for MIME leaf parts.

Every function here is total: malformed input degrades to the best text we
can recover and nothing is raised to the caller.
"""

from __future__ import annotations

import base64
import binascii
import codecs
import logging
import re

logger = logging.getLogger(__name__)

UTF8_ALIASES = frozenset({"utf-8", "utf8", "us-ascii", "ascii"})

_WHITESPACE_RE = re.compile(r"\s+")
_SOFT_BREAK_RE = re.compile(r"=\r?\n")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_CHARSET_RE = re.compile(r"charset\s*=\s*\"?([^\";\s]+)\"?", re.IGNORECASE)


def _latin1_fallback(exc: UnicodeError) -> tuple[str, int]:
    # Undecodable bytes are read as ISO-8859-1 instead of being dropped.
    if isinstance(exc, UnicodeDecodeError):
        return exc.object[exc.start:exc.end].decode("latin-1"), exc.end
    raise exc


codecs.register_error("tempmail.latin1", _latin1_fallback)


def get_charset(content_type: str | None) -> str:
    """Return the lowercased ``charset`` parameter of a Content-Type, or ''."""
    if not content_type:
        return ""
    m = _CHARSET_RE.search(content_type)
    return m.group(1).strip().strip("'\"").lower() if m else ""


def decode_base64(data: str) -> bytes | None:
    """Decode a base64 body; ``None`` when the alphabet or padding is invalid."""
    cleaned = _WHITESPACE_RE.sub("", data)
    if len(cleaned) % 4 in (2, 3):
        # Unpadded input, as produced by some senders.
        cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        logger.debug("base64 body rejected: %s", exc)
        return None


def decode_quoted_printable(data: str) -> bytes:
    """Decode quoted-printable into raw bytes.

    ``=XX`` with two hex digits becomes that byte; any other ``=`` is kept
    literally. Characters outside Latin-1 are carried as UTF-8.
    """
    s = _SOFT_BREAK_RE.sub("", data)
    out = bytearray()
    i = 0
    n = len(s)
    while i < n:
        ch = s[i]
        if ch == "=" and i + 2 < n:
            hex_pair = s[i + 1:i + 3]
            if hex_pair[0] in _HEX_DIGITS and hex_pair[1] in _HEX_DIGITS:
                out.append(int(hex_pair, 16))
                i += 3
                continue
        code = ord(ch)
        if code < 256:
            out.append(code)
        else:
            out.extend(ch.encode("utf-8"))
        i += 1
    return bytes(out)


def decode_text(data: bytes, charset: str | None = None) -> str:
    """Decode bytes with ``charset``, falling back to UTF-8 for unusable names.

    UTF-8 decoding never fails: bytes that are not valid UTF-8 are read as
    ISO-8859-1.
    """
    name = (charset or "").strip().lower()
    if name and name not in UTF8_ALIASES:
        try:
            return data.decode(name, errors="replace")
        except (LookupError, UnicodeError) as exc:
            # Unknown names, non-text codecs (hex, zlib) and codecs that
            # refuse the replace handler (idna).
            logger.debug("unsupported charset %r, keeping utf-8: %s", name, exc)
    return data.decode("utf-8", errors="tempmail.latin1")


def decode_transfer(body: str, transfer_encoding: str | None) -> str:
    """Undo a Content-Transfer-Encoding, decoding the payload as UTF-8."""
    return decode_leaf(body, transfer_encoding, None)


def decode_leaf(body: str, transfer_encoding: str | None, charset: str | None) -> str:
    """Decode one leaf body: transfer encoding first, then charset remap."""
    if not body:
        return ""
    enc = (transfer_encoding or "").strip().lower()
    if enc == "base64":
        raw = decode_base64(body)
        if raw is None:
            return body
        return decode_text(raw, charset)
    if enc == "quoted-printable":
        return decode_text(decode_quoted_printable(body), charset)
    return remap_charset(body, charset)


def remap_charset(text: str, charset: str | None) -> str:
    """Reinterpret already-decoded text as bytes of ``charset``.

    Only applies when every character fits in a byte; otherwise the text is
    returned as is.
    """
    name = (charset or "").strip().lower()
    if not name or name in UTF8_ALIASES:
        return text
    try:
        raw = text.encode("latin-1")
    except UnicodeEncodeError:
        return text
    return decode_text(raw, name)
