from __future__ import annotations

import hmac
import os

from fastapi import Header, HTTPException, status


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Caller identity, as asserted by the upstream auth layer.

    The gateway authenticates the session and forwards the user id in X-User-Id. Payment
    fields in the body are never trusted; this header is.
    """

    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
    return user_id


def require_admin(x_admin_token: str | None = Header(default=None)) -> None:
    expected = os.getenv("BOOKSHOP_ADMIN_TOKEN", "").strip()
    if not expected:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access disabled")

    if not x_admin_token or not hmac.compare_digest(x_admin_token.encode(), expected.encode()):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin token invalid")
