"""Download endpoint for blobs kept by the local blob store.

Links are minted by `LocalBlobStore.signed_url` and carry a short-lived token;
no bearer header is needed.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import Response

from src.app.api.dependencies import BlobStoreDep
from src.app.core.logging import get_logger
from src.app.core.storage import BlobStoreError, LocalBlobStore

logger = get_logger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


@router.get(
    "/download",
    responses={
        200: {"description": "File content"},
        403: {"description": "Invalid or expired link"},
        404: {"description": "File not found or local storage not in use"},
    },
)
async def download(
    token: Annotated[str, Query(description="Signed download token")],
    blob_store: BlobStoreDep,
) -> Response:
    if not isinstance(blob_store, LocalBlobStore):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    path = blob_store.path_from_token(token)
    if path is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired download link"
        )

    try:
        data = await blob_store.read(path)
    except BlobStoreError as e:
        logger.warning("Download of missing blob", path=path, error=str(e))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found") from e

    file_name = path.rsplit("/", 1)[-1]
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
