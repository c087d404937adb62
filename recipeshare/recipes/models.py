from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Comment(BaseModel):
    author: str
    text: str
    created_at: datetime = Field(default_factory=_utcnow)


class Recipe(BaseModel):
    """Stored recipe document. ``version`` increases on every successful write."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    title: str
    description: str
    ingredients: list[str]
    instructions: list[str]
    rating: float = 0.0
    rating_count: list[str] = Field(default_factory=list, description="Ids of users who rated")
    author: str
    shared_with: list[str] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    version: int = 0


# ── Requests ─────────────────────────────────────────────────────────────


class RecipeFields(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    ingredients: list[str]
    instructions: list[str]


class ShareRequest(BaseModel):
    email: str = Field(..., min_length=1)


class RateRequest(BaseModel):
    rating: float = Field(..., ge=0.0, le=5.0)


class CommentRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)


# ── Responses ────────────────────────────────────────────────────────────


class UserRef(BaseModel):
    id: str
    name: str | None = None


class CommentOut(BaseModel):
    author: UserRef
    text: str
    created_at: datetime


class RecipeOut(BaseModel):
    id: str
    title: str
    description: str
    ingredients: list[str]
    instructions: list[str]
    rating: float
    rating_count: list[str]
    author: UserRef
    shared_with: list[str]
    comments: list[CommentOut]


class MessageResponse(BaseModel):
    message: str
