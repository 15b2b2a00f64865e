"""
Inkpost Backend: Post Route Handlers
======================================

What:  POST/PUT /post (multipart), DELETE /post/{id}, GET /post, GET /post/{id}.
How:   Extracts form fields and the optional cover file, then delegates to
       PostService. Mutating endpoints depend on require_identity, so an
       unauthenticated request is rejected before the body is looked at.
Who:   Called by the frontend editor, post page and home page.

Request Flow (POST /post):
    1. Guard resolves the session cookie (401/403 on failure)
    2. Form fields title, summary, content and optional 'file' extracted
    3. Cover read into memory and the upload closed
    4. PostService stores the cover, then the record
    5. Post returned with its author resolved
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.config import settings
from app.dependencies import get_post_service
from app.exceptions import ValidationError
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.post import PostResponse
from app.security.guard import require_identity
from app.security.tokens import SessionClaims
from app.services.post_service import CoverUpload, PostService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Posts"])

_AUTH_ERRORS = {
    401: {"description": "No session token", "model": ErrorResponse},
    403: {"description": "Invalid token or not the author", "model": ErrorResponse},
}


async def _read_cover(file: Optional[UploadFile]) -> Optional[CoverUpload]:
    """Browsers send an empty file part when no cover was picked."""
    if file is None:
        return None
    try:
        if not file.filename:
            return None
        # Declared size is checked before the body is pulled into memory
        if file.size is not None and file.size > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"Cover is too large. Maximum is {max_mb:.0f}MB.",
                field="file",
                context={"max_size": settings.max_file_size, "declared_size": file.size},
            )
        content = await file.read()
        logger.info("Received cover: filename=%s, size=%d bytes", file.filename, len(content))
        return CoverUpload(filename=file.filename, content=content)
    finally:
        await file.close()


@router.post(
    "/post",
    response_model=PostResponse,
    responses={
        **_AUTH_ERRORS,
        400: {"description": "Unsupported, empty or oversized cover", "model": ErrorResponse},
        500: {"description": "Post could not be stored", "model": ErrorResponse},
    },
    summary="Create a post",
)
async def create_post(
    identity: SessionClaims = Depends(require_identity),
    title: str = Form(..., max_length=255),
    summary: str = Form("", max_length=1000),
    content: str = Form(""),
    file: Optional[UploadFile] = File(default=None, description="Optional cover image"),
    posts: PostService = Depends(get_post_service),
) -> PostResponse:
    cover = await _read_cover(file)
    return await posts.create_post(
        identity,
        title=title,
        summary=summary,
        content=content,
        cover=cover,
    )


@router.put(
    "/post",
    response_model=PostResponse,
    responses={
        **_AUTH_ERRORS,
        400: {"description": "Unsupported, empty or oversized cover", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Update a post you authored",
)
async def update_post(
    identity: SessionClaims = Depends(require_identity),
    id: str = Form(..., description="Id of the post to update"),
    title: str = Form(..., max_length=255),
    summary: str = Form("", max_length=1000),
    content: str = Form(""),
    file: Optional[UploadFile] = File(default=None, description="Replacement cover image"),
    posts: PostService = Depends(get_post_service),
) -> PostResponse:
    cover = await _read_cover(file)
    return await posts.update_post(
        identity,
        post_id=id,
        title=title,
        summary=summary,
        content=content,
        cover=cover,
    )


@router.delete(
    "/post/{post_id}",
    response_model=MessageResponse,
    responses={
        **_AUTH_ERRORS,
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Delete a post you authored",
)
async def delete_post(
    post_id: str,
    identity: SessionClaims = Depends(require_identity),
    posts: PostService = Depends(get_post_service),
) -> MessageResponse:
    await posts.delete_post(identity, post_id)
    return MessageResponse(message="Post deleted successfully")


@router.get(
    "/post",
    response_model=List[PostResponse],
    summary="Most recent posts, newest first",
)
async def list_posts(posts: PostService = Depends(get_post_service)) -> List[PostResponse]:
    return await posts.list_posts()


@router.get(
    "/post/{post_id}",
    response_model=PostResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Get a single post",
)
async def get_post(
    post_id: str,
    posts: PostService = Depends(get_post_service),
) -> PostResponse:
    return await posts.get_post(post_id)
