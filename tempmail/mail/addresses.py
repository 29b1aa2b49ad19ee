"""Mailbox address helpers: generation, extraction and normalization."""

from __future__ import annotations

import logging
import re
import secrets
from email.header import decode_header, make_header

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = "temp.example.com"
ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"

_LOCAL_PART_RE = re.compile(r"^[a-z0-9._-]{1,64}$", re.IGNORECASE)
_ANGLE_ADDR_RE = re.compile(r"<(.+?)>")
_BARE_ADDR_RE = re.compile(r"([^\s<>]+@[^\s<>]+)")
_DOMAIN_SPLIT_RE = re.compile(r"[,\s]+")


class InvalidAddressError(ValueError):
    """Raised when a string cannot be used as a mailbox address."""


def generate_random_id(length: int | str | None = 8) -> str:
    try:
        n = int(length) if length else 8
    except (TypeError, ValueError):
        n = 8
    n = max(4, min(32, n))
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(n))


def extract_email(value: str | None) -> str:
    """Pull the bare address out of a header value like ``Name <a@b>``."""
    if not value:
        return ""
    m = _ANGLE_ADDR_RE.search(value) or _BARE_ADDR_RE.search(value)
    return m.group(1).strip() if m else value.strip()


def normalize_address(address: str | None) -> tuple[str, str, str]:
    """Return ``(address, local_part, domain)`` lowercased.

    Raises InvalidAddressError when either side of the ``@`` is empty.
    """
    normalized = (address or "").strip().lower()
    local_part, sep, domain = normalized.partition("@")
    if not sep or not local_part or not domain:
        raise InvalidAddressError(f"invalid mailbox address: {address!r}")
    return normalized, local_part, domain


def is_valid_local_part(local: str | None) -> bool:
    return bool(local) and bool(_LOCAL_PART_RE.match(local))


def parse_mail_domains(value: str | None) -> list[str]:
    domains = [d.strip() for d in _DOMAIN_SPLIT_RE.split(value or "") if d.strip()]
    return domains or [DEFAULT_DOMAIN]


def pick_domain(domains: list[str], index: int | str | None) -> str:
    if not domains:
        return DEFAULT_DOMAIN
    try:
        i = int(index or 0)
    except (TypeError, ValueError):
        i = 0
    return domains[max(0, min(len(domains) - 1, i))]


def decode_header_value(value: str | None) -> str:
    """Decode RFC 2047 encoded words; malformed values are returned as is."""
    if not value:
        return ""
    try:
        return str(make_header(decode_header(value)))
    except (LookupError, UnicodeDecodeError, ValueError) as exc:
        logger.debug("could not decode header %r: %s", value, exc)
        return value
