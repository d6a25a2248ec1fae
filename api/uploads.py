from fastapi import APIRouter, Depends, File, UploadFile

from services.storage import LocalFileStorage

router = APIRouter(prefix="/api/uploads", tags=["uploads"])


def get_storage() -> LocalFileStorage:
    return LocalFileStorage()


@router.post("", response_model=dict, status_code=201)
async def upload_file(
    file: UploadFile = File(..., description="Document image or PDF"),
    storage: LocalFileStorage = Depends(get_storage),
):
    """Store an uploaded document and return its {name, url} reference."""
    content = await file.read()
    return storage.save(file.filename or "upload", content)
