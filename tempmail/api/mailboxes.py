import time

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from tempmail.core.config import get_settings
from tempmail.core.security import api_key_auth
from tempmail.db.crud.mailboxes import delete_mailbox, get_or_create_mailbox, list_mailboxes, toggle_pin
from tempmail.db.session import get_db
from tempmail.mail.addresses import generate_random_id, is_valid_local_part, pick_domain
from tempmail.schemas.dto import AddressResponse, CreateMailboxRequest, MailboxResponse, PinResponse

router = APIRouter(dependencies=[Depends(api_key_auth)])

ADDRESS_TTL_MS = 3_600_000


def _address_response(address: str) -> AddressResponse:
    return AddressResponse(email=address, expires=int(time.time() * 1000) + ADDRESS_TTL_MS)


@router.get("/domains", response_model=list[str])
def list_domains() -> list[str]:
    return get_settings().MAIL_DOMAINS


@router.get("/generate", response_model=AddressResponse)
def generate_address(
    length: int | None = Query(default=None),
    domain_index: int = Query(default=0, alias="domainIndex"),
    db: Session = Depends(get_db),
) -> AddressResponse:
    domain = pick_domain(get_settings().MAIL_DOMAINS, domain_index)
    mailbox = get_or_create_mailbox(db, f"{generate_random_id(length)}@{domain}")
    db.commit()
    return _address_response(mailbox.address)


@router.post("/create", response_model=AddressResponse)
def create_address(payload: CreateMailboxRequest, db: Session = Depends(get_db)) -> AddressResponse:
    local = payload.local.strip().lower()
    if not is_valid_local_part(local):
        raise HTTPException(status_code=400, detail="Invalid local part")
    domain = pick_domain(get_settings().MAIL_DOMAINS, payload.domainIndex)
    mailbox = get_or_create_mailbox(db, f"{local}@{domain}")
    db.commit()
    return _address_response(mailbox.address)


@router.get("/mailboxes", response_model=list[MailboxResponse])
def list_mailbox_history(
    limit: int = Query(default=10, ge=1),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
) -> list[MailboxResponse]:
    mailboxes = list_mailboxes(db, limit=min(limit, 100), offset=offset)
    return [
        MailboxResponse(address=m.address, created_at=m.created_at, is_pinned=m.is_pinned)
        for m in mailboxes
    ]


@router.post("/mailboxes/pin", response_model=PinResponse)
def pin_mailbox(address: str = Query(...), db: Session = Depends(get_db)) -> PinResponse:
    mailbox = toggle_pin(db, address)
    if mailbox is None:
        raise HTTPException(status_code=404, detail="Mailbox not found")
    db.commit()
    return PinResponse(address=mailbox.address, is_pinned=mailbox.is_pinned)


@router.delete("/mailboxes")
def remove_mailbox(address: str = Query(...), db: Session = Depends(get_db)) -> dict[str, bool]:
    deleted = delete_mailbox(db, address)
    db.commit()
    return {"success": True, "deleted": deleted}
