"""
Inkpost Backend: Cover File Route
===================================

What:  GET /uploads/{file_path} serves stored cover images.
How:   The path is resolved through AssetStorage.resolve(), which refuses
       anything outside the storage root; missing files are a 404.
Who:   Called by <img> tags that point at "<api origin>/<post.cover>".
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from app.dependencies import get_asset_storage
from app.exceptions import NotFoundError
from app.services.asset_storage import REFERENCE_PREFIX, AssetStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])


@router.get(
    f"/{REFERENCE_PREFIX}/{{file_path:path}}",
    summary="Serve an uploaded cover image",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found"},
    },
)
async def serve_cover(
    file_path: str,
    assets: AssetStorage = Depends(get_asset_storage),
) -> FileResponse:
    path = assets.resolve(file_path)
    if path is None or not path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    # Names are random and never reused, so the content never changes
    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
