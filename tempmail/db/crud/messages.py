"""Message access helpers."""

from __future__ import annotations

from sqlalchemy.orm import Session, joinedload

from tempmail.db.models import Message


def create_message(
    db: Session,
    *,
    mailbox_id: int,
    sender: str,
    subject: str,
    content: str,
    html_content: str | None = None,
    raw_source: str | None = None,
    raw_hash: str | None = None,
) -> Message:
    message = Message(
        mailbox_id=mailbox_id,
        sender=sender,
        subject=subject,
        content=content,
        html_content=html_content,
        raw_source=raw_source,
        raw_hash=raw_hash,
    )
    db.add(message)
    db.flush()
    return message


def list_messages(db: Session, mailbox_id: int, *, limit: int = 50) -> list[Message]:
    return (
        db.query(Message)
        .filter(Message.mailbox_id == mailbox_id)
        .order_by(Message.received_at.desc(), Message.id.desc())
        .limit(limit)
        .all()
    )


def get_message(db: Session, message_id: int) -> Message | None:
    return (
        db.query(Message)
        .options(joinedload(Message.mailbox))
        .filter(Message.id == message_id)
        .one_or_none()
    )


def mark_read(db: Session, message: Message) -> Message:
    if not message.is_read:
        message.is_read = True
        db.flush()
    return message


def delete_message(db: Session, message_id: int) -> bool:
    deleted = db.query(Message).filter(Message.id == message_id).delete(synchronize_session=False)
    db.flush()
    return deleted > 0


def count_messages(db: Session, mailbox_id: int) -> int:
    return db.query(Message).filter(Message.mailbox_id == mailbox_id).count()


def clear_mailbox(db: Session, mailbox_id: int) -> tuple[int, int]:
    """Delete every message of a mailbox; returns ``(previous, deleted)``."""
    previous = count_messages(db, mailbox_id)
    db.query(Message).filter(Message.mailbox_id == mailbox_id).delete(synchronize_session=False)
    db.flush()
    return previous, previous - count_messages(db, mailbox_id)
