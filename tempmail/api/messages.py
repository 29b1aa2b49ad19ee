from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from tempmail.core.security import api_key_auth
from tempmail.db.crud.mailboxes import get_or_create_mailbox
from tempmail.db.crud.messages import clear_mailbox, delete_message, get_message, list_messages, mark_read
from tempmail.db.session import get_db
from tempmail.mail.addresses import InvalidAddressError, extract_email
from tempmail.schemas.dto import ClearMailboxResponse, DeleteMessageResponse, MessageDetail, MessageSummary

router = APIRouter(dependencies=[Depends(api_key_auth)])


def _mailbox_id(db: Session, mailbox: str) -> int:
    try:
        return get_or_create_mailbox(db, extract_email(mailbox)).id
    except InvalidAddressError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/emails", response_model=list[MessageSummary])
def list_mailbox_messages(mailbox: str = Query(...), db: Session = Depends(get_db)) -> list[MessageSummary]:
    mailbox_id = _mailbox_id(db, mailbox)
    messages = list_messages(db, mailbox_id, limit=50)
    db.commit()
    return [
        MessageSummary(
            id=int(m.id), sender=m.sender, subject=m.subject, received_at=m.received_at, is_read=m.is_read
        )
        for m in messages
    ]


@router.delete("/emails", response_model=ClearMailboxResponse)
def clear_mailbox_messages(mailbox: str = Query(...), db: Session = Depends(get_db)) -> ClearMailboxResponse:
    mailbox_id = _mailbox_id(db, mailbox)
    previous, deleted = clear_mailbox(db, mailbox_id)
    db.commit()
    return ClearMailboxResponse(deletedCount=deleted, previousCount=previous)


@router.get("/email/{message_id}", response_model=MessageDetail)
def read_message(message_id: int, db: Session = Depends(get_db)) -> MessageDetail:
    message = get_message(db, message_id)
    if message is None:
        raise HTTPException(status_code=404, detail="Message not found")
    mark_read(db, message)
    db.commit()
    return MessageDetail(
        id=int(message.id),
        mailbox=message.mailbox.address if message.mailbox else None,
        sender=message.sender,
        subject=message.subject,
        received_at=message.received_at,
        is_read=message.is_read,
        content=message.content,
        html_content=message.html_content,
    )


@router.delete("/email/{message_id}", response_model=DeleteMessageResponse)
def remove_message(message_id: int, db: Session = Depends(get_db)) -> DeleteMessageResponse:
    deleted = delete_message(db, message_id)
    db.commit()
    return DeleteMessageResponse(
        deleted=deleted,
        message="Message deleted" if deleted else "Message does not exist or was already deleted",
    )
