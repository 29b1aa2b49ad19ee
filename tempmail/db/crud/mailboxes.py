"""Mailbox CRUD: get-or-create by address, history listing, pinning."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from tempmail.db.models import Mailbox, Message
from tempmail.mail.addresses import normalize_address


def get_mailbox_by_address(db: Session, address: str | None) -> Optional[Mailbox]:
    normalized = (address or "").strip().lower()
    if not normalized:
        return None
    return db.query(Mailbox).filter(Mailbox.address == normalized).one_or_none()


def get_or_create_mailbox(db: Session, address: str) -> Mailbox:
    normalized, local_part, domain = normalize_address(address)
    mailbox = db.query(Mailbox).filter(Mailbox.address == normalized).one_or_none()
    if mailbox is None:
        mailbox = Mailbox(address=normalized, local_part=local_part, domain=domain)
        db.add(mailbox)
    mailbox.last_accessed_at = func.now()
    db.flush()
    return mailbox


def list_mailboxes(db: Session, *, limit: int = 10, offset: int = 0) -> list[Mailbox]:
    return (
        db.query(Mailbox)
        .order_by(Mailbox.is_pinned.desc(), Mailbox.created_at.desc(), Mailbox.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


def toggle_pin(db: Session, address: str) -> Optional[Mailbox]:
    mailbox = get_mailbox_by_address(db, address)
    if mailbox is None:
        return None
    mailbox.is_pinned = not mailbox.is_pinned
    db.flush()
    return mailbox


def delete_mailbox(db: Session, address: str) -> bool:
    mailbox = get_mailbox_by_address(db, address)
    if mailbox is None:
        return False
    db.query(Message).filter(Message.mailbox_id == mailbox.id).delete(synchronize_session=False)
    db.delete(mailbox)
    db.flush()
    return True
