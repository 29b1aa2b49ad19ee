"""Inbound mail handling: parse raw messages and persist them to a mailbox.

Public entrypoints:
- store_inbound_message(...)  raw RFC822 text from the routing hook
- store_submitted_message(...) pre-parsed JSON payload
- reparse_message(...)         rerun the body extractor over a stored source
"""

from __future__ import annotations

import hashlib
import logging

from sqlalchemy.orm import Session

from tempmail.core.config import get_settings
from tempmail.db.crud.mailboxes import get_or_create_mailbox
from tempmail.db.crud.messages import create_message, get_message
from tempmail.db.models import Message
from tempmail.mail.addresses import decode_header_value, extract_email
from tempmail.mail.decoders import decode_text
from tempmail.mail.parsers import parse_email_body, split_headers_and_body

logger = logging.getLogger(__name__)

NO_SUBJECT = "(no subject)"
NO_CONTENT = "(no content)"


class MessageTooLargeError(ValueError):
    """Raised when a raw message exceeds MAX_RAW_MESSAGE_BYTES."""


class MessageNotFoundError(LookupError):
    pass


def decode_raw_bytes(data: bytes) -> str:
    return decode_text(data, None)


def check_message_size(raw: str) -> None:
    """Raise MessageTooLargeError when ``raw`` is over MAX_RAW_MESSAGE_BYTES."""
    limit = get_settings().MAX_RAW_MESSAGE_BYTES
    size = len(raw.encode("utf-8", errors="surrogatepass"))
    if limit and size > limit:
        raise MessageTooLargeError(f"raw message is {size} bytes, limit is {limit}")


def store_submitted_message(
    db: Session,
    *,
    to: str,
    from_: str | None,
    subject: str | None = None,
    text: str | None = None,
    html: str | None = None,
    raw_source: str | None = None,
) -> Message:
    """Insert a message for the mailbox named by ``to``.

    The mailbox is created on first delivery. Raises InvalidAddressError when
    ``to`` holds no usable address.
    """
    mailbox = get_or_create_mailbox(db, extract_email(to))
    message = create_message(
        db,
        mailbox_id=mailbox.id,
        sender=extract_email(from_) or "",
        subject=subject or NO_SUBJECT,
        content=text or html or NO_CONTENT,
        html_content=html or None,
        raw_source=raw_source,
        raw_hash=hashlib.sha256(raw_source.encode("utf-8", errors="surrogatepass")).hexdigest()
        if raw_source
        else None,
    )
    db.commit()
    logger.info("stored message %s for %s", message.id, mailbox.address)
    return message


def store_inbound_message(db: Session, raw: str, envelope_to: str | None = None) -> Message:
    """Parse a raw RFC822 message and store it.

    The envelope recipient wins over the ``To`` header when both are present.
    """
    check_message_size(raw)
    headers, _ = split_headers_and_body(raw)
    recipient = envelope_to or headers.get("to", "")
    parsed = parse_email_body(raw)
    return store_submitted_message(
        db,
        to=recipient,
        from_=decode_header_value(headers.get("from")),
        subject=decode_header_value(headers.get("subject")).strip(),
        text=parsed.text,
        html=parsed.html,
        raw_source=raw,
    )


def reparse_message(db: Session, message_id: int) -> dict[str, object]:
    message = get_message(db, message_id)
    if message is None:
        raise MessageNotFoundError(f"message {message_id} not found")
    if not message.raw_source:
        return {"message_id": message_id, "reparsed": False, "reason": "no-raw-source"}
    parsed = parse_email_body(message.raw_source)
    message.content = parsed.text or parsed.html or NO_CONTENT
    message.html_content = parsed.html or None
    db.commit()
    return {"message_id": message_id, "reparsed": True}
