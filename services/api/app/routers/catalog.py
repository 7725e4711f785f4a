from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, HTTPException
from services.api.app.models.catalog import BookListResponse, BookOut
from services.api.app.services.product_cache import product_cache

router = APIRouter()


@router.get("/v1/books", response_model=BookListResponse)
def list_books() -> BookListResponse:
    return BookListResponse(books=[BookOut(**asdict(p)) for p in product_cache.all()])


@router.get("/v1/books/{book_id}", response_model=BookOut)
def get_book(book_id: int) -> BookOut:
    product = product_cache.lookup(book_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return BookOut(**asdict(product))
