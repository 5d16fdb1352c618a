"""
Tests for UploadService: validation before upload, storage errors and
deletion by public URL.
"""

import asyncio
import io

import pytest
from fastapi import HTTPException, UploadFile
from starlette.datastructures import Headers

from profile_pages.config.settings import settings
from profile_pages.modules.uploads.service import UploadService, build_object_path


def _upload(filename, content=b"\x89PNG data", content_type="image/png"):
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class FakeS3:
    base_url = "https://bucket.s3.us-east-1.amazonaws.com/"

    def __init__(self):
        self.objects = {}

    def upload_file(self, content, key, content_type):
        self.objects[key] = content
        return f"{self.base_url}{key}"

    def key_from_url(self, url):
        if url.startswith(self.base_url):
            return url[len(self.base_url):] or None
        return None

    def delete_file(self, key):
        return self.objects.pop(key, None) is not None


@pytest.fixture
def service(db, admin):
    return UploadService(db, token=admin.token)


class TestValidateImage:
    @pytest.mark.parametrize("filename", ["a.jpg", "a.JPEG", "a.png", "a.gif", "a.webp"])
    def test_allowed_types(self, service, filename):
        assert service.validate_image(filename, 10) == filename.rsplit(".", 1)[1].lower()

    @pytest.mark.parametrize("filename", ["a.svg", "a.pdf", "noextension", None])
    def test_rejected_types(self, service, filename):
        with pytest.raises(HTTPException) as exc_info:
            service.validate_image(filename, 10)
        assert exc_info.value.status_code == 400

    def test_size_limit(self, service):
        assert service.validate_image("a.png", settings.max_upload_bytes) == "png"
        with pytest.raises(HTTPException) as exc_info:
            service.validate_image("a.png", settings.max_upload_bytes + 1)
        assert exc_info.value.status_code == 413
        assert "10 MB" in exc_info.value.detail


class TestUploadImages:
    def test_returns_public_urls_in_order(self, db, service):
        urls = asyncio.run(service.upload_images([_upload("a.png"), _upload("b.jpg")], "footer"))

        assert len(urls) == 2
        assert urls[0].startswith("https://fake.supabase.co/storage/v1/object/public/images/footer/")
        assert urls[0].endswith(".png")
        assert urls[1].endswith(".jpg")
        assert len(db.storage.objects) == 2

    def test_content_type_forwarded(self, db, service):
        asyncio.run(service.upload_image(_upload("a.webp", content_type="image/webp")))
        (_, options), = db.storage.objects.values()
        assert options["content-type"] == "image/webp"

    def test_bad_file_aborts_whole_batch(self, db, service):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(service.upload_images([_upload("a.png"), _upload("b.exe")]))
        assert exc_info.value.status_code == 400
        assert db.storage.objects == {}

    def test_oversize_rejected_before_storage(self, db, service, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_bytes", 4)
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(service.upload_image(_upload("a.png", content=b"12345")))
        assert exc_info.value.status_code == 413
        assert db.storage.objects == {}

    def test_missing_bucket_explains_fix(self, db, service):
        db.storage.buckets.clear()
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(service.upload_image(_upload("a.png")))
        assert exc_info.value.status_code == 500
        assert "Create bucket" in exc_info.value.detail
        assert "'images'" in exc_info.value.detail

    def test_requires_admin(self, db, alice):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(UploadService(db, token=alice.token).upload_image(_upload("a.png")))
        assert exc_info.value.status_code == 403
        assert db.storage.objects == {}

    def test_no_files(self, service):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(service.upload_images([]))
        assert exc_info.value.status_code == 400

    def test_invalid_folder(self, service):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(service.upload_image(_upload("a.png"), "../etc"))
        assert exc_info.value.status_code == 400

    def test_s3_backend(self, db, admin):
        s3 = FakeS3()
        url = asyncio.run(UploadService(db, token=admin.token, s3_storage=s3).upload_image(_upload("a.png")))
        assert url.startswith(FakeS3.base_url + "templates/")
        assert db.storage.objects == {}


class TestDeleteImage:
    def test_by_public_url(self, db, service):
        url = asyncio.run(service.upload_image(_upload("a.png")))
        assert service.delete_image(url) is True
        assert db.storage.objects == {}

    def test_by_object_path(self, db, service):
        asyncio.run(service.upload_image(_upload("a.png")))
        stored_key = next(iter(db.storage.objects))
        assert stored_key.startswith("images/templates/")
        assert service.delete_image(stored_key) is True
        assert db.storage.objects == {}

    def test_unrecognized_url(self, service):
        with pytest.raises(HTTPException) as exc_info:
            service.delete_image("https://elsewhere.example.com/a.png")
        assert exc_info.value.status_code == 400

    def test_s3_backend(self, db, admin):
        s3 = FakeS3()
        service = UploadService(db, token=admin.token, s3_storage=s3)
        url = asyncio.run(service.upload_image(_upload("a.png")))
        assert service.delete_image(url) is True
        assert s3.objects == {}


def test_object_path_shape():
    path = build_object_path("footer", "png")
    folder, name = path.split("/")
    assert folder == "footer"
    stamp, rest = name.split("-", 1)
    assert stamp.isdigit()
    assert rest.endswith(".png")
