import hmac

from fastapi import Header, HTTPException, status

from tempmail.core.config import get_settings


def api_key_auth(x_api_key: str | None = Header(default=None)) -> None:
    """Reject requests whose ``X-API-Key`` header does not match API_KEY."""
    expected = get_settings().API_KEY
    if not x_api_key or not hmac.compare_digest(x_api_key, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
