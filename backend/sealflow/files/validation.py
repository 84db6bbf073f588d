"""File validation utilities for attachment uploads"""

import re
from typing import Optional, Tuple

from ..config import settings

ALLOWED_EXTENSIONS = ("pdf", "doc", "docx", "txt", "jpg", "png", "jpeg", "xls", "xlsx")

# Storage folder names and stored file names must be a single safe path segment
_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9_-]+$")
_SAFE_STORED_NAME = re.compile(r"^[A-Za-z0-9-]+\.[A-Za-z0-9]+$")


def get_extension(filename: str) -> str:
    """Lower-case extension without the dot, or "" when there is none

    Example:
        >>> get_extension("Contract.PDF")
        'pdf'
    """
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def is_allowed_extension(extension: str) -> bool:
    return extension in ALLOWED_EXTENSIONS


def validate_file_size(size_bytes: int, max_size: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Returns:
        Tuple of (is_valid, error_message)
    """
    if max_size is None:
        max_size = settings.MAX_UPLOAD_SIZE_BYTES

    if size_bytes == 0:
        return False, "文件不能为空"

    if size_bytes > max_size:
        return False, f"文件大小不能超过{max_size // (1024 * 1024)}MB"

    return True, None


def validate_upload(filename: Optional[str], size_bytes: int) -> Tuple[bool, Optional[str]]:
    """Run all upload checks in order: size, name, extension

    Returns:
        Tuple of (is_valid, error_message)
    """
    is_valid, error = validate_file_size(size_bytes)
    if not is_valid:
        return is_valid, error

    if not filename:
        return False, "文件名不能为空"

    if not is_allowed_extension(get_extension(filename)):
        return False, f"不支持的文件类型，仅支持：{', '.join(ALLOWED_EXTENSIONS)}"

    return True, None


def is_safe_segment(value: str) -> bool:
    return bool(_SAFE_SEGMENT.match(value or ""))


def is_safe_stored_name(value: str) -> bool:
    return bool(_SAFE_STORED_NAME.match(value or ""))
