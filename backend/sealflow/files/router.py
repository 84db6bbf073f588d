"""Attachment upload/download API endpoints

Provides POST /files/upload for application attachments and the matching
download route. Validates size and extension before anything is written.
"""

import io
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse

from ..common.responses import ApiResponse, CamelModel
from ..config import settings
from ..workflow.errors import NotFoundError, ValidationError
from .storage import FileStorePort, LocalFileStore
from .validation import validate_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


class UploadResult(CamelModel):
    filename: str
    url: str
    size: int
    type: Optional[str] = None


def get_file_store() -> FileStorePort:
    """Dependency for the attachment store (local directory from settings)."""
    return LocalFileStore(settings.UPLOAD_DIR)


@router.post(
    "/upload",
    response_model=ApiResponse[UploadResult],
    summary="Upload an attachment",
    description="""
    Accepts multipart/form-data with a single ``file`` and an optional
    ``type`` folder (default ``attachment``).

    Allowed extensions: pdf, doc, docx, txt, jpg, png, jpeg, xls, xlsx.
    The size limit comes from MAX_UPLOAD_SIZE_BYTES (10 MB by default).
    """
)
async def upload_file(
    file: Annotated[UploadFile, File(...)],
    store: Annotated[FileStorePort, Depends(get_file_store)],
    type: Annotated[str, Form()] = "attachment",
):
    """Store an uploaded attachment.

    Returns:
        Envelope with filename, url, size and content type

    Raises:
        ValidationError: Empty, oversized or unsupported file, or bad type folder
    """
    content = await file.read()

    is_valid, error = validate_upload(file.filename, len(content))
    if not is_valid:
        logger.info(f"Upload rejected: {error}", extra={"upload_name": file.filename})
        raise ValidationError(error)

    try:
        stored = store.store(type, file.filename, io.BytesIO(content), file.content_type)
    except ValueError:
        raise ValidationError(f"无效的文件分类: {type}")

    result = UploadResult(
        filename=stored.filename,
        url=stored.url,
        size=stored.size,
        type=stored.content_type,
    )
    return ApiResponse.ok(result, "文件上传成功")


@router.get(
    "/download/{file_type}/{year}/{month}/{day}/{filename}",
    summary="Download an attachment",
    response_class=FileResponse,
)
def download_file(
    file_type: str,
    year: str,
    month: str,
    day: str,
    filename: str,
    store: FileStorePort = Depends(get_file_store)
):
    path = store.resolve(file_type, year, month, day, filename)
    if path is None:
        raise NotFoundError(f"文件不存在: {filename}")
    return FileResponse(path, filename=filename)
