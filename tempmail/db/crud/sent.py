"""Ledger of outbound mail sent through the provider."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from tempmail.db.models import SentEmail

UPDATABLE_FIELDS = ("status", "scheduled_at", "resend_id")


def _join_addrs(value: str | Iterable[str] | None) -> str:
    if not value:
        return ""
    if isinstance(value, str):
        return value.strip()
    return ",".join(v.strip() for v in value if v and v.strip())


def record_sent_email(
    db: Session,
    *,
    resend_id: str | None,
    from_addr: str,
    to: str | Iterable[str] | None,
    subject: str | None,
    html: str | None = None,
    text: str | None = None,
    from_name: str | None = None,
    status: str = "delivered",
    scheduled_at: str | None = None,
) -> SentEmail:
    sent = SentEmail(
        resend_id=resend_id,
        from_name=from_name,
        from_addr=(from_addr or "").strip().lower(),
        to_addrs=_join_addrs(to),
        subject=subject or "",
        html_content=html,
        text_content=text,
        status=status,
        scheduled_at=scheduled_at,
    )
    db.add(sent)
    db.flush()
    return sent


def get_sent_email(db: Session, sent_id: int) -> Optional[SentEmail]:
    return db.query(SentEmail).filter(SentEmail.id == sent_id).one_or_none()


def list_sent_emails(db: Session, from_addr: str, *, limit: int = 50) -> list[SentEmail]:
    return (
        db.query(SentEmail)
        .filter(SentEmail.from_addr == from_addr.strip().lower())
        .order_by(SentEmail.created_at.desc(), SentEmail.id.desc())
        .limit(limit)
        .all()
    )


def update_sent_email(db: Session, sent_id: int, fields: dict[str, Any]) -> Optional[SentEmail]:
    sent = get_sent_email(db, sent_id)
    if sent is None:
        return None
    for key in UPDATABLE_FIELDS:
        if key in fields:
            setattr(sent, key, fields[key])
    db.flush()
    return sent


def delete_sent_email(db: Session, sent_id: int) -> bool:
    deleted = db.query(SentEmail).filter(SentEmail.id == sent_id).delete(synchronize_session=False)
    db.flush()
    return deleted > 0
