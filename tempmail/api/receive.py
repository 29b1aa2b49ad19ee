import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from tempmail.core.security import api_key_auth
from tempmail.db.session import get_db
from tempmail.mail.addresses import InvalidAddressError
from tempmail.mail.inbound import (
    MessageTooLargeError,
    check_message_size,
    decode_raw_bytes,
    store_inbound_message,
    store_submitted_message,
)
from tempmail.schemas.dto import InboundEmail, InboundResult
from tempmail.workers.jobs import store_inbound_job
from tempmail.workers.queue import get_queue

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(api_key_auth)])


@router.post("", response_model=InboundResult)
def receive_submitted(payload: InboundEmail, db: Session = Depends(get_db)) -> InboundResult:
    """Store a message whose body was already split into text/html upstream."""
    try:
        message = store_submitted_message(
            db,
            to=payload.to,
            from_=payload.from_,
            subject=payload.subject,
            text=payload.text,
            html=payload.html,
        )
    except InvalidAddressError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return InboundResult(message_id=int(message.id))


async def read_raw_body(request: Request) -> bytes:
    return await request.body()


@router.post("/raw", response_model=InboundResult)
def receive_raw(
    body: bytes = Depends(read_raw_body),
    to: str | None = Query(default=None, description="Envelope recipient; defaults to the To header"),
    enqueue: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> InboundResult:
    """Accept a raw RFC822 message as the request body.

    With ``enqueue=true`` parsing and storage happen on the worker.
    """
    raw = decode_raw_bytes(body)
    try:
        check_message_size(raw)
    except MessageTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    if enqueue:
        try:
            job = get_queue("default").enqueue(store_inbound_job, raw, to)
            return InboundResult(job_id=job.get_id())
        except Exception as exc:
            # Redis unavailable: fall through and store inline.
            logger.warning("enqueue failed, storing inline: %s", exc)
    try:
        message = store_inbound_message(db, raw, envelope_to=to)
    except InvalidAddressError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return InboundResult(message_id=int(message.id))
