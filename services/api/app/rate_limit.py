"""Per-client-IP request limits.

Env:
- BOOKSHOP_PAYMENT_RATE_LIMIT: limit on payment confirmations, in slowapi notation
  (default "10/15minutes")
"""

from __future__ import annotations

import logging
import os

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

logger = logging.getLogger("bookshop")

DEFAULT_PAYMENT_RATE_LIMIT = "10/15minutes"

limiter = Limiter(key_func=get_remote_address)


def payment_rate_limit() -> str:
    return os.getenv("BOOKSHOP_PAYMENT_RATE_LIMIT", DEFAULT_PAYMENT_RATE_LIMIT)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(
        "Rate limit exceeded client=%s path=%s limit=%s",
        get_remote_address(request),
        request.url.path,
        exc.detail,
    )
    return JSONResponse(
        status_code=429, content={"error": "too many payment requests, try again later"}
    )
