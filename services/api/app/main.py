"""Bookshop API service entrypoint."""

import logging

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from services.api.app.db.database import db_session
from services.api.app.db.init_db import init_db
from services.api.app.rate_limit import limiter, rate_limit_exceeded_handler
from services.api.app.routers.catalog import router as catalog_router
from services.api.app.routers.orders import router as orders_router
from services.api.app.routers.payment import router as payment_router
from services.api.app.services.product_cache import product_cache

logger = logging.getLogger("bookshop")

app = FastAPI(title="Bookshop API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.include_router(catalog_router)
app.include_router(payment_router)
app.include_router(orders_router)


@app.on_event("startup")
def _startup() -> None:
    init_db()

    db = db_session()
    try:
        count = product_cache.refresh(db)
    finally:
        db.close()
    logger.info("Product cache loaded active_products=%s", count)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
