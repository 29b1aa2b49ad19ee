from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AddressResponse(BaseModel):
    email: str
    expires: int


class CreateMailboxRequest(BaseModel):
    local: str = ""
    domainIndex: int = 0


class MailboxResponse(BaseModel):
    address: str
    created_at: datetime | None = None
    is_pinned: bool = False


class PinResponse(BaseModel):
    success: bool = True
    address: str
    is_pinned: bool


class MessageSummary(BaseModel):
    id: int
    sender: str
    subject: str
    received_at: datetime | None = None
    is_read: bool = False


class MessageDetail(MessageSummary):
    mailbox: str | None = None
    content: str
    html_content: str | None = None


class DeleteMessageResponse(BaseModel):
    success: bool = True
    deleted: bool
    message: str


class ClearMailboxResponse(BaseModel):
    success: bool = True
    deletedCount: int
    previousCount: int


class InboundEmail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: str
    from_: str | None = Field(default=None, alias="from")
    subject: str | None = None
    text: str | None = None
    html: str | None = None


class InboundResult(BaseModel):
    success: bool = True
    message_id: int | None = None
    job_id: str | None = None


class SendEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    from_: str = Field(alias="from")
    fromName: str | None = None
    to: str | list[str]
    subject: str
    html: str | None = None
    text: str | None = None
    cc: str | list[str] | None = None
    bcc: str | list[str] | None = None
    replyTo: str | None = None
    headers: dict[str, str] | None = None
    attachments: list[dict[str, Any]] | None = None
    scheduledAt: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class UpdateSentRequest(BaseModel):
    status: str | None = None
    scheduledAt: str | None = None


class SentEmailSummary(BaseModel):
    id: int
    resend_id: str | None = None
    recipients: str
    subject: str
    created_at: datetime | None = None
    status: str


class SentEmailDetail(SentEmailSummary):
    from_addr: str
    html_content: str | None = None
    text_content: str | None = None
    scheduled_at: str | None = None
