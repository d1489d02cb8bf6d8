"""Attachment classification and upload validation."""

from .classify import (  # noqa: F401
    classify_file_type,
    format_file_size,
    validate_before_after_pair,
    validate_upload,
)
