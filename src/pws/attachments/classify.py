"""Classify attachments for display and gate which files may be uploaded.

Classification only decides whether an attachment lands in the media grid or the
document list; the allow-list decides whether a file is sent to the
upload service at all.
"""

from pathlib import PurePath
from typing import Optional, Sequence

from ..config.settings import settings
from ..core.errors import UploadRejected, ValidationError
from ..core.models import FileType

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "bmp"})
DOCUMENT_EXTENSIONS = frozenset({"pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt"})

ALLOWED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/bmp",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "text/plain",
    }
)
ALLOWED_EXTENSIONS = IMAGE_EXTENSIONS | DOCUMENT_EXTENSIONS


def file_extension(filename: str) -> str:
    """Lowercased extension without the dot, or an empty string."""
    return PurePath(filename.strip()).suffix.lstrip(".").lower()


def classify_file_type(filename: str) -> FileType:
    ext = file_extension(filename)
    if ext in IMAGE_EXTENSIONS:
        return FileType.IMAGE
    if ext in DOCUMENT_EXTENSIONS:
        return FileType.DOCUMENT
    return FileType.OTHER


def validate_upload(
    filename: str,
    size: int,
    content_type: Optional[str] = None,
    max_size: Optional[int] = None,
) -> None:
    """
    Reject a file before it is sent to the upload service.

    The MIME type is checked first; when it is missing or not on the
    allow-list the file extension decides.

    Args:
        filename: Original file name
        size: File size in bytes
        content_type: MIME type reported for the file, if known
        max_size: Size limit in bytes, defaults to the configured limit

    Raises:
        UploadRejected: If the type is not allowed or the file is too large
    """
    limit = max_size if max_size is not None else settings.max_upload_size_bytes
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if mime not in ALLOWED_MIME_TYPES and file_extension(filename) not in ALLOWED_EXTENSIONS:
        raise UploadRejected(
            f"File type not allowed: {filename!r}. "
            f"Supported formats: {', '.join(sorted(e.upper() for e in ALLOWED_EXTENSIONS))}"
        )
    if size > limit:
        raise UploadRejected(
            f"File {filename!r} is {format_file_size(size)}, limit is {format_file_size(limit)}"
        )


def validate_before_after_pair(filenames: Sequence[str]) -> None:
    """A before/after upload needs exactly two files."""
    if len(filenames) != 2:
        raise ValidationError(
            f"Before/after upload needs exactly 2 files, got {len(filenames)}"
        )


def format_file_size(size: Optional[int]) -> str:
    if not size:
        return ""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
