"""
Inkpost Backend: Post Service (Business Logic Orchestrator)
=============================================================

What:  Create, update, delete, list and fetch posts.
How:   Composes the PostRepository and the AssetStorage for cover images,
       consulting the ownership policy before every mutation.
Who:   Called by the /post route handlers with an identity already verified
       by the authorization guard.

Mutation Flow (PUT /post, DELETE /post/{id}):
    ┌─────────┐    ┌───────────┐    ┌────────────────┐    ┌──────────────┐
    │  Guard  │───▶│ Load post │───▶│ ensure_author  │───▶│ Cover + Repo │
    └─────────┘    │ (404)     │    │ (403)          │    │   changes    │
                   └───────────┘    └────────────────┘    └──────────────┘

    Nothing about the target post (fields or cover file) is touched until the
    ownership check has passed.

Cover Lifecycle:
    create: store cover → create record; record failure removes the new cover
    update: ownership check → store new cover → update record → remove the
            superseded cover (failure logged, update stands)
    delete: ownership check → remove cover → delete record. A failed cover
            removal is logged and the record is still deleted.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional

from app.exceptions import DatabaseError, FileStorageError, InkpostError, NotFoundError
from app.models.post import Post
from app.repositories.base import PostRepository
from app.schemas.post import PostResponse
from app.security.tokens import SessionClaims
from app.services.asset_storage import AssetStorage
from app.services.ownership import as_identifier, ensure_author

logger = logging.getLogger(__name__)


@dataclass
class CoverUpload:
    """An uploaded cover image, already read into memory by the route."""

    filename: str
    content: bytes


class PostService:
    """
    Error Handling Strategy:
        - Missing post → NotFoundError (malformed ids count as missing)
        - Wrong owner → NotAuthorError (from ensure_author)
        - Unexpected persistence errors during create → DatabaseError, with
          the freshly stored cover cleaned up
    """

    def __init__(
        self,
        posts: PostRepository,
        assets: AssetStorage,
        list_limit: int = 20,
    ):
        self.posts = posts
        self.assets = assets
        self.list_limit = list_limit

    async def _load(self, post_id: str) -> Post:
        identifier = as_identifier(post_id)
        if identifier is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        post = await self.posts.find_by_id(identifier)
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    async def _render(self, post_id: uuid.UUID) -> PostResponse:
        post = await self.posts.get(post_id)
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return PostResponse.from_post(post)

    async def _discard_cover(self, reference: str, reason: str) -> None:
        """Best-effort cover removal; failures are logged, never raised."""
        if not reference:
            return
        try:
            removed = await self.assets.delete(reference)
        except FileStorageError as e:
            logger.warning(
                "Could not remove cover %s (%s): %s | Context: %s",
                reference, reason, e.message, e.context,
            )
            return
        if not removed:
            logger.warning("Cover %s was already missing (%s)", reference, reason)

    async def create_post(
        self,
        identity: SessionClaims,
        title: str,
        summary: str,
        content: str,
        cover: Optional[CoverUpload] = None,
    ) -> PostResponse:
        """
        Create a post authored by the acting identity.

        Raises:
            ValidationError: unsupported or empty cover file
            FileStorageError: cover could not be written
            DatabaseError: record could not be stored (cover removed again)
        """
        reference = ""
        if cover is not None:
            reference = await self.assets.store(cover.filename, cover.content)

        try:
            post = await self.posts.create(
                author_id=identity.user_id,
                title=title,
                summary=summary,
                content=content,
                cover=reference,
            )
        except Exception as e:
            await self._discard_cover(reference, "post creation failed")
            if isinstance(e, InkpostError):
                raise
            logger.error("Unexpected error creating post: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to create post",
                context={"original_error": type(e).__name__},
            )

        return await self._render(post.id)

    async def update_post(
        self,
        identity: SessionClaims,
        post_id: str,
        title: str,
        summary: str,
        content: str,
        cover: Optional[CoverUpload] = None,
    ) -> PostResponse:
        """
        Update a post in place. Cover is replaced only when a new one is sent.

        Raises:
            NotFoundError: no such post
            NotAuthorError: acting identity is not the author (post unchanged)
        """
        post = await self._load(post_id)
        ensure_author(post, identity.user_id)

        previous_cover = post.cover
        new_reference: Optional[str] = None
        if cover is not None:
            new_reference = await self.assets.store(cover.filename, cover.content)

        try:
            await self.posts.update(
                post,
                title=title,
                summary=summary,
                content=content,
                cover=new_reference,
            )
        except Exception:
            if new_reference:
                await self._discard_cover(new_reference, "post update failed")
            raise

        if new_reference and previous_cover and previous_cover != new_reference:
            await self._discard_cover(previous_cover, "replaced by new cover")

        return await self._render(post.id)

    async def delete_post(self, identity: SessionClaims, post_id: str) -> None:
        """
        Delete a post and its cover.

        Raises:
            NotFoundError: no such post (also on a repeated delete)
            NotAuthorError: acting identity is not the author (nothing removed)
        """
        post = await self._load(post_id)
        ensure_author(post, identity.user_id)

        await self._discard_cover(post.cover, f"post {post.id} deleted")
        await self.posts.delete(post)

    async def list_posts(self) -> List[PostResponse]:
        posts = await self.posts.list_recent(limit=self.list_limit)
        return [PostResponse.from_post(post) for post in posts]

    async def get_post(self, post_id: str) -> PostResponse:
        identifier = as_identifier(post_id)
        if identifier is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return await self._render(identifier)
