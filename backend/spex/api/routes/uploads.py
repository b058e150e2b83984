"""Upload Route — profile image upload to local storage.

Invariants:
    - Multipart field name is "file"
    - Responds with the absolute public URL of the stored image
"""

from fastapi import APIRouter, Depends, File, UploadFile

from spex.api.dependencies import get_upload_store
from spex.infrastructure.uploads import LocalUploadStore

router = APIRouter(prefix="/api", tags=["uploads"])


@router.post("/upload")
async def upload_image(
    file: UploadFile | None = File(None),
    store: LocalUploadStore = Depends(get_upload_store),
):
    url = await store.save(file)
    return {"url": url}
