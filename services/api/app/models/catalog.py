from __future__ import annotations

from pydantic import BaseModel


class BookOut(BaseModel):
    id: int
    title: str
    author: str | None = None
    category: str | None = None
    price: int


class BookListResponse(BaseModel):
    books: list[BookOut]
