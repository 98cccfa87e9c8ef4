"""Structured ``detail`` payloads for HTTP errors."""
from typing import Any, Optional


class ErrorCodes:
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def error(code: str, message: str, **extra: Any) -> dict:
    """``{"ok": False, "error": {"code", "message", **extra}}``; None-valued extras are dropped."""
    body = {"code": code, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return {"ok": False, "error": body}


def retry_after_headers(seconds: Optional[int]) -> Optional[dict]:
    if seconds is None:
        return None
    return {"Retry-After": str(seconds)}
