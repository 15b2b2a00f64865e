"""
Inkpost Backend: SQLAlchemy Post Repository
=============================================

What:  PostRepository backed by the `posts` table.
How:   Async SQLAlchemy session. Reads that render the author use
       joinedload(Post.author) since the relationship is lazy="raise".
       Each write commits on its own so a post is never half-written.
Who:   Built per request by app.dependencies.get_post_repository.

Query plans:
    list_recent: SELECT ... FROM posts JOIN users ORDER BY created_at DESC LIMIT :n
                 → idx_posts_created_at
    get:         SELECT ... FROM posts JOIN users WHERE posts.id = :uuid
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.exceptions import DatabaseError
from app.models.post import Post
from app.repositories.base import PostRepository

logger = logging.getLogger(__name__)


class SqlAlchemyPostRepository(PostRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _commit(self, action: str) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.error("Database error during post %s: %s", action, str(e), exc_info=True)
            raise DatabaseError(context={"action": action, "error_type": type(e).__name__})

    async def create(
        self,
        author_id: uuid.UUID,
        title: str,
        summary: str,
        content: str,
        cover: str = "",
    ) -> Post:
        post = Post(
            author_id=author_id,
            title=title,
            summary=summary,
            content=content,
            cover=cover or "",
        )
        self._session.add(post)
        await self._commit("create")
        logger.info("Post created: %s (author=%s)", post.id, author_id)
        return post

    async def find_by_id(self, post_id: uuid.UUID) -> Optional[Post]:
        return await self._session.get(Post, post_id)

    async def get(self, post_id: uuid.UUID) -> Optional[Post]:
        result = await self._session.execute(
            select(Post)
            .options(joinedload(Post.author))
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update(
        self,
        post: Post,
        title: str,
        summary: str,
        content: str,
        cover: Optional[str] = None,
    ) -> Post:
        post.title = title
        post.summary = summary
        post.content = content
        if cover is not None:
            post.cover = cover
        await self._commit("update")
        logger.info("Post updated: %s (cover_replaced=%s)", post.id, cover is not None)
        return post

    async def delete(self, post: Post) -> None:
        await self._session.delete(post)
        await self._commit("delete")
        logger.info("Post deleted: %s", post.id)

    async def list_recent(self, limit: int = 20) -> List[Post]:
        result = await self._session.execute(
            select(Post)
            .options(joinedload(Post.author))
            .order_by(desc(Post.created_at))
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
