from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from tempmail.core.config import get_settings
from tempmail.core.security import api_key_auth
from tempmail.db.crud.sent import (
    delete_sent_email,
    get_sent_email,
    list_sent_emails,
    record_sent_email,
    update_sent_email,
)
from tempmail.db.models import SentEmail
from tempmail.db.session import get_db
from tempmail.schemas.dto import SendEmailRequest, SentEmailDetail, SentEmailSummary, UpdateSentRequest
from tempmail.sender.resend import ResendClient, ResendError

router = APIRouter(dependencies=[Depends(api_key_auth)])


def get_optional_resend_client() -> ResendClient | None:
    api_key = get_settings().RESEND_API_KEY
    return ResendClient(api_key) if api_key else None


def get_resend_client(client: ResendClient | None = Depends(get_optional_resend_client)) -> ResendClient:
    if client is None:
        raise HTTPException(status_code=500, detail="Resend API key is not configured")
    return client


def _provider_error(exc: ResendError) -> HTTPException:
    return HTTPException(status_code=502, detail=f"Resend request failed: {exc}")


def _record(db: Session, payload: SendEmailRequest, resend_id: str | None) -> SentEmail:
    return record_sent_email(
        db,
        resend_id=resend_id,
        from_addr=payload.from_,
        from_name=payload.fromName,
        to=payload.to,
        subject=payload.subject,
        html=payload.html,
        text=payload.text,
        status="scheduled" if payload.scheduledAt else "delivered",
        scheduled_at=payload.scheduledAt,
    )


def _detail(sent: SentEmail) -> SentEmailDetail:
    return SentEmailDetail(
        id=int(sent.id),
        resend_id=sent.resend_id,
        from_addr=sent.from_addr,
        recipients=sent.to_addrs,
        subject=sent.subject,
        html_content=sent.html_content,
        text_content=sent.text_content,
        status=sent.status,
        scheduled_at=sent.scheduled_at,
        created_at=sent.created_at,
    )


@router.get("/sent", response_model=list[SentEmailSummary])
def list_sent(
    from_addr: str | None = Query(default=None, alias="from"),
    mailbox: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[SentEmailSummary]:
    sender = from_addr or mailbox
    if not sender:
        raise HTTPException(status_code=400, detail="Missing 'from' parameter")
    return [
        SentEmailSummary(
            id=int(s.id),
            resend_id=s.resend_id,
            recipients=s.to_addrs,
            subject=s.subject,
            created_at=s.created_at,
            status=s.status,
        )
        for s in list_sent_emails(db, sender)
    ]


@router.get("/sent/{sent_id}", response_model=SentEmailDetail)
def read_sent(sent_id: int, db: Session = Depends(get_db)) -> SentEmailDetail:
    sent = get_sent_email(db, sent_id)
    if sent is None:
        raise HTTPException(status_code=404, detail="Sent email not found")
    return _detail(sent)


@router.delete("/sent/{sent_id}")
def remove_sent(sent_id: int, db: Session = Depends(get_db)) -> dict[str, bool]:
    deleted = delete_sent_email(db, sent_id)
    db.commit()
    return {"success": True, "deleted": deleted}


@router.post("/send")
def send_email(
    payload: SendEmailRequest,
    db: Session = Depends(get_db),
    client: ResendClient = Depends(get_resend_client),
) -> dict[str, Any]:
    try:
        result = client.send_email(payload.to_payload())
    except ResendError as exc:
        raise _provider_error(exc) from exc
    resend_id = result.get("id") if isinstance(result, dict) else None
    sent = _record(db, payload, resend_id)
    db.commit()
    return {"success": True, "id": resend_id, "sent_id": int(sent.id)}


@router.post("/send/batch")
def send_batch(
    payloads: list[SendEmailRequest],
    db: Session = Depends(get_db),
    client: ResendClient = Depends(get_resend_client),
) -> dict[str, Any]:
    try:
        result = client.send_batch([p.to_payload() for p in payloads])
    except ResendError as exc:
        raise _provider_error(exc) from exc
    # Resend answers either a bare list or {"data": [...]}
    items = result.get("data", []) if isinstance(result, dict) else result
    items = items if isinstance(items, list) else []
    for i, payload in enumerate(payloads):
        resend_id = items[i].get("id") if i < len(items) and isinstance(items[i], dict) else None
        _record(db, payload, resend_id)
    db.commit()
    return {"success": True, "result": result}


@router.get("/send/{resend_id}")
def read_send_status(resend_id: str, client: ResendClient = Depends(get_resend_client)) -> Any:
    try:
        return client.get_email(resend_id)
    except ResendError as exc:
        raise _provider_error(exc) from exc


def _get_sent_or_404(db: Session, sent_id: int) -> SentEmail:
    sent = get_sent_email(db, sent_id)
    if sent is None:
        raise HTTPException(status_code=404, detail="Sent email not found")
    return sent


@router.patch("/send/{sent_id}")
def update_send(
    sent_id: int,
    payload: UpdateSentRequest = Body(...),
    db: Session = Depends(get_db),
    client: ResendClient | None = Depends(get_optional_resend_client),
) -> Any:
    sent = _get_sent_or_404(db, sent_id)
    data: Any = {"ok": True}
    if payload.status is not None:
        update_sent_email(db, sent_id, {"status": payload.status})
    if payload.scheduledAt:
        if not sent.resend_id:
            raise HTTPException(status_code=409, detail="Email has no provider id")
        if client is None:
            raise HTTPException(status_code=500, detail="Resend API key is not configured")
        try:
            data = client.update_email(sent.resend_id, scheduled_at=payload.scheduledAt)
        except ResendError as exc:
            raise _provider_error(exc) from exc
        update_sent_email(db, sent_id, {"scheduled_at": payload.scheduledAt})
    db.commit()
    return data or {"ok": True}


@router.post("/send/{sent_id}/cancel")
def cancel_send(
    sent_id: int,
    db: Session = Depends(get_db),
    client: ResendClient = Depends(get_resend_client),
) -> Any:
    sent = _get_sent_or_404(db, sent_id)
    if not sent.resend_id:
        raise HTTPException(status_code=409, detail="Email has no provider id")
    try:
        data = client.cancel_email(sent.resend_id)
    except ResendError as exc:
        raise _provider_error(exc) from exc
    update_sent_email(db, sent_id, {"status": "canceled"})
    db.commit()
    return data
