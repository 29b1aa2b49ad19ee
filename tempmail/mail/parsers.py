"""Helpers to extract text/plain and text/html from raw RFC822 messages.

The extractor works on the message text directly instead of going through
``email.parser`` so that broken framing (missing separators, undeclared
boundaries, bad base64) still yields whatever content is recoverable.
"""

from __future__ import annotations

import html as html_lib
import logging
import re
from typing import Iterator, NamedTuple

from tempmail.mail.decoders import decode_leaf, decode_transfer, get_charset

logger = logging.getLogger(__name__)

# Entities nested deeper than this are decoded as leaves.
MAX_DEPTH = 20

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_HEADER_RE = re.compile(r"^([^:]+):\s*(.*)$")
_BOUNDARY_RE = re.compile(r"boundary\s*=\s*\"?([^\";\r\n]+)\"?", re.IGNORECASE)
_HTML_OPEN_MARKERS = ("<html", "<!doctype html")
_HTML_CLOSE_MARKER = "</html>"


class ParsedBody(NamedTuple):
    text: str = ""
    html: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.text and self.html)

    def merge(self, other: "ParsedBody") -> "ParsedBody":
        """First non-empty value wins for each field."""
        return ParsedBody(self.text or other.text, self.html or other.html)


def split_headers_and_body(entity: str) -> tuple[dict[str, str], str]:
    """Split an entity on its first blank line.

    CRLF separators are preferred over bare LF ones. A leading blank line
    means an empty header block. Without any separator the whole input is
    returned as body with no headers.
    """
    if entity.startswith("\r\n"):
        return {}, entity[2:]
    if entity.startswith("\n"):
        return {}, entity[1:]
    idx = entity.find("\r\n\r\n")
    sep_len = 4
    if idx == -1:
        idx = entity.find("\n\n")
        sep_len = 2
    if idx == -1:
        return {}, entity
    return parse_headers(entity[:idx]), entity[idx + sep_len:]


def parse_headers(raw_headers: str) -> dict[str, str]:
    headers: dict[str, str] = {}
    current = ""
    for line in _LINE_SPLIT_RE.split(raw_headers):
        if line[:1].isspace() and current:
            headers[current] += " " + line.strip()
            continue
        m = _HEADER_RE.match(line)
        if m:
            name = m.group(1).strip().lower()
            if not name:
                continue
            current = name
            headers[current] = m.group(2)
    return headers


def get_boundary(content_type: str | None) -> str:
    """Return the multipart boundary token, preserving its case."""
    if not content_type:
        return ""
    m = _BOUNDARY_RE.search(content_type)
    if not m:
        return ""
    return m.group(1).strip().strip("\"'").strip()


def split_multipart(body: str, boundary: str) -> list[str]:
    """Split a multipart body into raw part strings.

    Preamble and epilogue are dropped. A part left open by a truncated
    message (no closing delimiter) is still returned.
    """
    if not boundary:
        return []
    delim = "--" + boundary
    end_delim = delim + "--"
    parts: list[str] = []
    current: list[str] = []
    in_part = False
    closed = False
    for line in _LINE_SPLIT_RE.split(body):
        marker = line.strip()
        if marker == delim:
            if in_part and current:
                parts.append("\n".join(current))
            current = []
            in_part = True
            continue
        if marker == end_delim:
            if in_part and current:
                parts.append("\n".join(current))
            closed = True
            break
        if in_part:
            current.append(line)
    if in_part and not closed and current:
        parts.append("\n".join(current))
    return parts


def _decode_leaf_entity(headers: dict[str, str], body: str, *, default_text: bool) -> ParsedBody:
    content_type = headers.get("content-type", "")
    ctype = content_type.lower()
    decoded = decode_leaf(body, headers.get("content-transfer-encoding"), get_charset(content_type))
    is_html = "text/html" in ctype
    is_text = "text/plain" in ctype or (not is_html and (not ctype.strip() or default_text))
    return ParsedBody(decoded if is_text else "", decoded if is_html else "")


def _iter_children(parts: list[str], depth: int) -> Iterator[ParsedBody]:
    for part in parts:
        headers, body = split_headers_and_body(part)
        ctype = headers.get("content-type", "").lower()
        if "message/rfc822" in ctype:
            # An embedded message may itself be transfer-encoded.
            inner = decode_transfer(body, headers.get("content-transfer-encoding"))
            yield _parse_message(inner, depth + 1)
        else:
            yield parse_entity(headers, body, depth + 1, default_text=False)


def parse_entity(
    headers: dict[str, str],
    body: str,
    depth: int = 0,
    *,
    default_text: bool = True,
) -> ParsedBody:
    """Recursively extract text and html from one MIME entity.

    Multipart children are walked depth-first, left to right, and the walk
    stops as soon as both a text and an html body have been found.
    ``default_text`` controls whether an entity of unknown type counts as
    text; it is only true for a message's own top-level body.
    """
    content_type = headers.get("content-type", "")
    if "multipart/" in content_type.lower():
        if depth >= MAX_DEPTH:
            logger.debug("depth %d reached, treating multipart entity as leaf", depth)
        else:
            parts = split_multipart(body, get_boundary(content_type))
            if parts:
                result = ParsedBody()
                for child in _iter_children(parts, depth):
                    result = result.merge(child)
                    if result.complete:
                        break
                return result
            logger.debug("multipart entity without usable parts, treating as leaf")
    return _decode_leaf_entity(headers, body, default_text=default_text)


def _parse_message(raw: str, depth: int) -> ParsedBody:
    if not raw:
        return ParsedBody()
    headers, body = split_headers_and_body(raw)
    return parse_entity(headers, body, depth)


def guess_html(raw: str) -> str:
    """Slice an embedded HTML document out of arbitrary text, or return ''."""
    lower = raw.lower()
    starts = [pos for pos in (lower.find(m) for m in _HTML_OPEN_MARKERS) if pos != -1]
    if not starts:
        return ""
    start = min(starts)
    end = lower.rfind(_HTML_CLOSE_MARKER)
    if end < start:
        return ""
    return raw[start:end + len(_HTML_CLOSE_MARKER)]


def text_to_html(text: str) -> str:
    return '<pre style="white-space: pre-wrap;">' + html_lib.escape(text, quote=True) + "</pre>"


def parse_email_body(raw: str | None) -> ParsedBody:
    """Return ``ParsedBody(text, html)`` for a raw RFC822 message.

    Never raises. Only empty input gives two empty fields.
    """
    if not raw:
        return ParsedBody()
    headers, body = split_headers_and_body(raw)
    result = parse_entity(headers, body)

    if not result.html:
        guessed = guess_html(raw)
        if guessed:
            logger.debug("html body recovered from raw source")
            result = result._replace(html=guessed)
    if not result.text and not result.html:
        # Nothing was classified as text; keep the body, or the raw source
        # when the body is blank.
        result = result._replace(text=body if body.strip() else raw)
    if not result.html and result.text:
        result = result._replace(html=text_to_html(result.text))
    return result
