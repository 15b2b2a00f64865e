"""
Inkpost Backend: Post Ownership Policy
========================================

What:  Decides whether the acting identity may change or delete a post.
How:   Both sides are converted to uuid.UUID and compared by value, so an id
       that arrived as a string (token claim, form field) matches the UUID
       stored on the post.
Who:   PostService, before every update and delete.
"""

import uuid
from typing import Optional, Union

from app.exceptions import NotAuthorError
from app.models.post import Post

IdentifierLike = Union[uuid.UUID, str]


def as_identifier(value: IdentifierLike) -> Optional[uuid.UUID]:
    """Canonical UUID for `value`, or None if it is not a valid identifier."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        return None


def is_author(post: Post, acting_user_id: IdentifierLike) -> bool:
    author = as_identifier(post.author_id)
    acting = as_identifier(acting_user_id)
    return author is not None and author == acting


def ensure_author(post: Post, acting_user_id: IdentifierLike) -> None:
    """Raises NotAuthorError unless `acting_user_id` wrote `post`."""
    if not is_author(post, acting_user_id):
        raise NotAuthorError(
            context={"post_id": str(post.id), "acting_user_id": str(acting_user_id)},
        )
