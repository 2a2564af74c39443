"""
Daygrid Backend - File Service Unit Tests
===========================================

What:  Upload validation (extension, size, MIME), storage layout, public
       URLs, cleanup, and the path checks used when serving /media.

Test Strategy:
    ✅ Allowed and rejected extensions
    ✅ Size limits, including the Content-Length header check
    ✅ Files land in YYYY/MM/DD/<uuid>.<ext> under the storage root
    ✅ Path traversal is rejected when resolving media paths
    ❌ Real MIME sniffing needs libmagic (skipped when python-magic is unavailable)
"""

from unittest.mock import patch

import pytest

from daygrid.config import settings
from daygrid.exceptions import FileStorageError, NotFoundError, ValidationError
from daygrid.services.file_service import FileService


class TestFileValidation:

    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.service = FileService(storage_root=temp_storage, media_base_url="/media")

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("filename", ["photo.jpg", "photo.jpeg", "photo.png"])
    def test_allowed_extensions(self, filename):
        assert self.service.validate_extension(filename) == "." + filename.split(".")[-1]

    def test_extension_is_case_insensitive(self):
        assert self.service.validate_extension("photo.JPG") == ".jpg"
        assert self.service.validate_extension("photo.Jpeg") == ".jpeg"

    @pytest.mark.parametrize("filename", ["animation.gif", "document.pdf", "noextension", "malware.exe"])
    def test_rejected_extensions(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(filename)

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_within_limit(self):
        self.service.validate_size(None, 1000)

    def test_size_at_limit(self):
        self.service.validate_size(settings.max_file_size, settings.max_file_size)

    def test_size_over_limit(self):
        with pytest.raises(ValidationError, match="too large"):
            self.service.validate_size(None, settings.max_file_size + 1)

    def test_reported_size_over_limit(self):
        with pytest.raises(ValidationError, match="too large"):
            self.service.validate_size(settings.max_file_size + 1, 10)

    def test_empty_file(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(0, 0)

    # ── MIME Validation ───────────────────────────────────────────────────

    def test_mime_jpeg_detected(self, sample_image_bytes):
        pytest.importorskip("magic")
        assert self.service.validate_mime_type(sample_image_bytes, "a.jpg") == "image/jpeg"

    def test_mime_text_rejected(self):
        pytest.importorskip("magic")
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_mime_type(b"just some text, not an image", "fake.jpg")

    def test_mime_detection_failure_is_storage_error(self, sample_image_bytes):
        pytest.importorskip("magic")
        with patch("magic.from_buffer", side_effect=RuntimeError("libmagic broken")):
            with pytest.raises(FileStorageError):
                self.service.validate_mime_type(sample_image_bytes, "a.jpg")

    # ── Storage ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_validate_and_store_writes_dated_file(self, temp_storage, sample_image_bytes):
        with patch.object(self.service, "validate_mime_type", return_value="image/jpeg"):
            stored = await self.service.validate_and_store(
                filename="cell.JPG",
                content=sample_image_bytes,
                content_length=len(sample_image_bytes),
            )

        year, month, day, name = stored.relative_path.split("/")
        assert len(year) == 4 and len(month) == 2 and len(day) == 2
        assert name.endswith(".jpg")
        assert stored.url == f"/media/{stored.relative_path}"
        with open(stored.absolute_path, "rb") as f:
            assert f.read() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_invalid_upload_writes_nothing(self, temp_storage):
        with pytest.raises(ValidationError):
            await self.service.validate_and_store(filename="a.gif", content=b"GIF89a")
        assert list(self.service.storage_root.rglob("*.*")) == []

    def test_public_url_joins_base(self):
        service = FileService(storage_root=str(self.service.storage_root), media_base_url="https://cdn.example.com/media/")
        assert service.public_url("/2024/01/02/x.png") == "https://cdn.example.com/media/2024/01/02/x.png"

    # ── Cleanup ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_cleanup_file_removes_file(self, tmp_path):
        test_file = tmp_path / "test.jpg"
        test_file.write_bytes(b"test content")

        await self.service.cleanup_file(str(test_file))
        assert not test_file.exists()

    @pytest.mark.asyncio
    async def test_cleanup_file_nonexistent(self, tmp_path):
        await self.service.cleanup_file(str(tmp_path / "nonexistent.jpg"))

    # ── Serving ───────────────────────────────────────────────────────────

    def test_resolve_media_path(self):
        target = self.service.storage_root / "2024" / "01" / "02" / "x.png"
        target.parent.mkdir(parents=True)
        target.write_bytes(b"png")

        resolved = self.service.resolve_media_path("2024/01/02/x.png")
        assert resolved == target.resolve()
        assert self.service.media_type_for(resolved) == "image/png"

    def test_resolve_media_path_rejects_traversal(self):
        with pytest.raises(ValidationError, match="Invalid file path"):
            self.service.resolve_media_path("../../etc/passwd")

    def test_resolve_media_path_missing(self):
        with pytest.raises(NotFoundError):
            self.service.resolve_media_path("2024/01/02/missing.jpg")
