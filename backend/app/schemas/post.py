"""
Inkpost Backend: Post Schemas
===============================

What:  Pydantic models describing posts as the API returns them.
How:   PostResponse.from_post() renders an ORM Post whose author is loaded.
       Create/update bodies arrive as multipart form fields and are declared
       directly on the route handlers.

Example:
    {
        "id": "0d7c...",
        "title": "Hello",
        "summary": "First post",
        "content": "<p>...</p>",
        "cover": "uploads/5f0c...e1.jpg",
        "author": {"id": "6f1c...", "username": "alice"},
        "created_at": "2026-10-19T09:12:44.120Z",
        "updated_at": "2026-10-19T09:12:44.120Z"
    }
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from app.models.post import Post


class AuthorSummary(BaseModel):
    """Author reference resolved to a displayable username."""

    id: uuid.UUID
    username: str

    model_config = {"from_attributes": True}


class PostResponse(BaseModel):
    """Full representation of a post."""

    id: uuid.UUID
    title: str
    summary: str
    content: str
    cover: str = Field(description="Cover image reference, empty when the post has none")
    author: AuthorSummary
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            title=post.title,
            summary=post.summary,
            content=post.content,
            cover=post.cover or "",
            author=AuthorSummary(id=post.author.id, username=post.author.username),
            created_at=post.created_at,
            updated_at=post.updated_at,
        )
