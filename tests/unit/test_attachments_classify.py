"""Unit tests for attachment classification and upload validation."""

import pytest

from pws.attachments.classify import (
    classify_file_type,
    format_file_size,
    validate_before_after_pair,
    validate_upload,
)
from pws.core.errors import UploadRejected, ValidationError
from pws.core.models import FileType


class TestClassifyFileType:
    """Tests for the display bucket of an attachment."""

    @pytest.mark.parametrize("name", ["a.jpg", "a.jpeg", "a.png", "a.gif", "a.webp", "a.bmp"])
    def test_images(self, name: str) -> None:
        assert classify_file_type(name) == FileType.IMAGE

    @pytest.mark.parametrize(
        "name", ["a.pdf", "a.doc", "a.docx", "a.xls", "a.xlsx", "a.ppt", "a.pptx", "a.txt"]
    )
    def test_documents(self, name: str) -> None:
        assert classify_file_type(name) == FileType.DOCUMENT

    def test_case_insensitive(self) -> None:
        assert classify_file_type("PHOTO.JPG") == FileType.IMAGE
        assert classify_file_type("Offer.PDF") == FileType.DOCUMENT

    def test_everything_else_is_other(self) -> None:
        assert classify_file_type("archive.zip") == FileType.OTHER
        assert classify_file_type("README") == FileType.OTHER
        assert classify_file_type("drawing.svg") == FileType.OTHER


class TestValidateUpload:
    """Tests for the upload allow-list."""

    def test_allowed_by_mime(self) -> None:
        validate_upload("scan", 1000, "image/png")

    def test_allowed_by_extension_when_mime_unknown(self) -> None:
        validate_upload("offer.docx", 1000, "application/octet-stream")
        validate_upload("offer.pdf", 1000, None)

    def test_mime_parameters_ignored(self) -> None:
        validate_upload("notes", 10, "text/plain; charset=utf-8")

    def test_executable_rejected(self) -> None:
        with pytest.raises(UploadRejected):
            validate_upload("malware.exe", 1000, "application/x-msdownload")

    def test_rejection_is_a_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            validate_upload("script.sh", 10)

    def test_too_large_rejected(self) -> None:
        with pytest.raises(UploadRejected, match="limit"):
            validate_upload("big.png", 11 * 1024 * 1024, "image/png", max_size=10 * 1024 * 1024)

    def test_exact_limit_accepted(self) -> None:
        validate_upload("ok.png", 1024, "image/png", max_size=1024)


class TestBeforeAfterPair:
    def test_two_files_accepted(self) -> None:
        validate_before_after_pair(["before.jpg", "after.jpg"])

    @pytest.mark.parametrize("names", [[], ["one.jpg"], ["a.jpg", "b.jpg", "c.jpg"]])
    def test_wrong_count_rejected(self, names) -> None:
        with pytest.raises(ValidationError):
            validate_before_after_pair(names)


class TestFormatFileSize:
    def test_units(self) -> None:
        assert format_file_size(None) == ""
        assert format_file_size(512) == "512 B"
        assert format_file_size(2048) == "2.0 KB"
        assert format_file_size(5 * 1024 * 1024) == "5.0 MB"
