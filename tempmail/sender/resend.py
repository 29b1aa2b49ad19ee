"""Resend transactional email API wrapper (send, batch, status, reschedule, cancel)."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

logger = logging.getLogger(__name__)

RESEND_BASE_URL = "https://api.resend.com"


class ResendError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def normalize_send_payload(payload: Mapping[str, Any] | None) -> dict[str, Any]:
    """Map the API's camelCase send request onto Resend's request body."""
    payload = payload or {}
    body: dict[str, Any] = {
        "from": payload.get("from"),
        "to": _as_list(payload.get("to")),
        "subject": payload.get("subject"),
        "html": payload.get("html"),
        "text": payload.get("text"),
    }
    from_name = payload.get("fromName")
    if isinstance(from_name, str) and from_name.strip() and payload.get("from"):
        body["from"] = f"{from_name.strip()} <{payload['from']}>"
    if payload.get("cc"):
        body["cc"] = _as_list(payload["cc"])
    if payload.get("bcc"):
        body["bcc"] = _as_list(payload["bcc"])
    if payload.get("replyTo"):
        body["reply_to"] = payload["replyTo"]
    if isinstance(payload.get("headers"), dict):
        body["headers"] = payload["headers"]
    if isinstance(payload.get("attachments"), list):
        body["attachments"] = payload["attachments"]
    if payload.get("scheduledAt"):
        body["scheduled_at"] = payload["scheduledAt"]
    return body


class ResendClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = RESEND_BASE_URL,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise ResendError("Resend API key is not configured")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        )

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self._session.request(method, url, json=json, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Resend %s %s failed: %s", method, path, exc)
            raise ResendError(str(exc)) from exc
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not resp.ok:
            message = ""
            if isinstance(data, dict):
                message = data.get("message") or data.get("error") or ""
            raise ResendError(message or resp.reason or "Resend request failed", resp.status_code)
        return data

    def send_email(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/emails", json=normalize_send_payload(payload))

    def send_batch(self, payloads: list[Mapping[str, Any]]) -> Any:
        return self._request("POST", "/emails/batch", json=[normalize_send_payload(p) for p in payloads])

    def get_email(self, email_id: str) -> dict[str, Any]:
        return self._request("GET", f"/emails/{email_id}")

    def update_email(self, email_id: str, *, scheduled_at: str | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if scheduled_at:
            body["scheduled_at"] = scheduled_at
        return self._request("PATCH", f"/emails/{email_id}", json=body)

    def cancel_email(self, email_id: str) -> dict[str, Any]:
        return self._request("POST", f"/emails/{email_id}/cancel")
