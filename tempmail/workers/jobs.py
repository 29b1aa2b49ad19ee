"""RQ job definitions for background processing."""

from __future__ import annotations

from tempmail.db.session import SessionLocal
from tempmail.mail.inbound import reparse_message, store_inbound_message


def reparse_message_job(message_id: int) -> dict:
    """Background job: rerun the body extractor for one stored message."""
    db = SessionLocal()
    try:
        return reparse_message(db, message_id)
    finally:
        db.close()


def store_inbound_job(raw: str, envelope_to: str | None = None) -> dict:
    """Background job: parse and store a raw message received by the hook."""
    db = SessionLocal()
    try:
        message = store_inbound_message(db, raw, envelope_to=envelope_to)
        return {"message_id": int(message.id), "mailbox_id": int(message.mailbox_id)}
    finally:
        db.close()
