"""
Inkpost Backend: Cover Storage Unit Tests
===========================================

What we test:
    ✅ Extension, size and content type validation
    ✅ Stored files get a random name under the storage root
    ✅ References resolve inside the root only (no path traversal)
    ✅ Delete reports whether a file was actually removed
"""

from pathlib import Path
from unittest.mock import patch

import magic
import pytest

from app.exceptions import FileStorageError, ValidationError
from app.services.asset_storage import LocalAssetStorage


class TestLocalAssetStorageValidation:

    def setup_method(self):
        self.max_size = 1024

    def storage(self, root):
        return LocalAssetStorage(root=root, max_size=self.max_size)

    @pytest.mark.parametrize("filename,expected", [
        ("cover.png", ".png"),
        ("COVER.JPG", ".jpg"),
        ("photo.jpeg", ".jpeg"),
        ("anim.gif", ".gif"),
        ("modern.webp", ".webp"),
    ])
    def test_allowed_extensions(self, temp_storage, filename, expected):
        assert self.storage(temp_storage).validate_extension(filename) == expected

    @pytest.mark.parametrize("filename", ["script.exe", "noextension", "image.svg", "a.png.html"])
    def test_rejected_extensions(self, temp_storage, filename):
        with pytest.raises(ValidationError):
            self.storage(temp_storage).validate_extension(filename)

    def test_empty_file_rejected(self, temp_storage):
        with pytest.raises(ValidationError, match="empty"):
            self.storage(temp_storage).validate_size(0)

    def test_oversized_file_rejected(self, temp_storage):
        with pytest.raises(ValidationError) as exc_info:
            self.storage(temp_storage).validate_size(self.max_size + 1)
        assert exc_info.value.context["max_size"] == self.max_size

    def test_size_at_limit_accepted(self, temp_storage):
        self.storage(temp_storage).validate_size(self.max_size)

    def test_image_content_detected(self, temp_storage, sample_png_bytes, sample_gif_bytes):
        storage = self.storage(temp_storage)
        assert storage.validate_content_type(sample_png_bytes) == "image/png"
        assert storage.validate_content_type(sample_gif_bytes) == "image/gif"

    def test_markup_content_rejected(self, temp_storage, sample_html_bytes):
        with pytest.raises(ValidationError) as exc_info:
            self.storage(temp_storage).validate_content_type(sample_html_bytes)
        assert exc_info.value.context["detected_mime"] == "text/html"

    def test_detection_failure(self, temp_storage, sample_png_bytes):
        with patch(
            "app.services.asset_storage.magic.from_buffer",
            side_effect=magic.MagicException("no magic database"),
        ):
            with pytest.raises(FileStorageError):
                self.storage(temp_storage).validate_content_type(sample_png_bytes)


class TestLocalAssetStorageFiles:

    @pytest.mark.asyncio
    async def test_store_writes_file(self, asset_storage, sample_png_bytes):
        reference = await asset_storage.store("My Cover.PNG", sample_png_bytes)

        assert reference.startswith("uploads/")
        assert reference.endswith(".png")
        assert "My Cover" not in reference
        path = asset_storage.resolve(reference)
        assert path is not None
        assert path.read_bytes() == sample_png_bytes

    @pytest.mark.asyncio
    async def test_store_names_are_unique(self, asset_storage, sample_png_bytes):
        first = await asset_storage.store("a.png", sample_png_bytes)
        second = await asset_storage.store("a.png", sample_png_bytes)
        assert first != second

    @pytest.mark.asyncio
    async def test_store_rejects_before_writing(self, asset_storage, temp_storage):
        with pytest.raises(ValidationError):
            await asset_storage.store("evil.exe", b"MZ")
        assert list(Path(temp_storage).iterdir()) == []

    @pytest.mark.asyncio
    async def test_store_rejects_markup_with_image_extension(
        self, asset_storage, temp_storage, sample_html_bytes
    ):
        with pytest.raises(ValidationError):
            await asset_storage.store("x.png", sample_html_bytes)
        assert list(Path(temp_storage).iterdir()) == []

    @pytest.mark.asyncio
    async def test_store_os_error(self, asset_storage, sample_png_bytes):
        with patch("app.services.asset_storage.aiofiles.open", side_effect=OSError("disk full")):
            with pytest.raises(FileStorageError):
                await asset_storage.store("a.png", sample_png_bytes)

    @pytest.mark.asyncio
    async def test_delete_existing(self, asset_storage, sample_png_bytes):
        reference = await asset_storage.store("a.png", sample_png_bytes)
        path = asset_storage.resolve(reference)

        assert await asset_storage.delete(reference) is True
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_delete_missing(self, asset_storage):
        assert await asset_storage.delete("uploads/" + "0" * 32 + ".png") is False

    @pytest.mark.asyncio
    async def test_delete_refuses_traversal(self, asset_storage, tmp_path):
        outside = tmp_path / "keep.txt"
        outside.write_text("important")

        assert await asset_storage.delete("uploads/../keep.txt") is False
        assert outside.exists()


class TestResolve:

    def test_bare_name_and_reference(self, asset_storage):
        name = "0" * 32 + ".png"
        assert asset_storage.resolve(name) == asset_storage.root / name
        assert asset_storage.resolve(f"uploads/{name}") == asset_storage.root / name

    @pytest.mark.parametrize("reference", [
        "",
        "uploads/../../etc/passwd",
        "../secret.png",
        "nested/dir/file.png",
    ])
    def test_outside_root(self, asset_storage, reference):
        assert asset_storage.resolve(reference) is None
