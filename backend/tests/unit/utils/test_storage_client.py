"""
Tests for stored-file URLs
"""
from io import BytesIO
from unittest.mock import MagicMock

import pytest

from dintask.core.config import settings
from dintask.utils import storage_client
from dintask.utils.storage_client import StorageClient, object_name_from_url, public_url


@pytest.fixture
def minio(monkeypatch) -> MagicMock:
    backend = MagicMock()
    monkeypatch.setattr(settings, "USE_MINIO", True)
    monkeypatch.setattr(settings, "STORAGE_PUBLIC_URL", "")
    monkeypatch.setattr(storage_client, "Minio", lambda *args, **kwargs: backend)
    return backend


class TestPublicUrls:

    def test_minio_default(self, monkeypatch):
        monkeypatch.setattr(settings, "USE_MINIO", True)
        monkeypatch.setattr(settings, "MINIO_SECURE", False)
        monkeypatch.setattr(settings, "MINIO_ENDPOINT", "files.local:9000")
        monkeypatch.setattr(settings, "STORAGE_PUBLIC_URL", "")

        assert public_url("a/b.png") == f"http://files.local:9000/{settings.S3_BUCKET_NAME}/a/b.png"

    def test_s3_default(self, monkeypatch):
        monkeypatch.setattr(settings, "USE_MINIO", False)
        monkeypatch.setattr(settings, "AWS_REGION", "ap-south-1")
        monkeypatch.setattr(settings, "STORAGE_PUBLIC_URL", "")

        assert public_url("a/b.png") == f"https://{settings.S3_BUCKET_NAME}.s3.ap-south-1.amazonaws.com/a/b.png"

    def test_configured_base_wins(self, monkeypatch):
        monkeypatch.setattr(settings, "STORAGE_PUBLIC_URL", "https://cdn.dintask.test/")
        assert public_url("a/b.png") == "https://cdn.dintask.test/a/b.png"

    @pytest.mark.parametrize("url,expected", [
        ("https://cdn.dintask.test/profiles/x.png", "profiles/x.png"),
        ("https://elsewhere.test/profiles/x.png", None),
        ("https://cdn.dintask.test/", None),
        ("", None),
        (None, None),
    ])
    def test_object_name_from_url(self, monkeypatch, url, expected):
        monkeypatch.setattr(settings, "STORAGE_PUBLIC_URL", "https://cdn.dintask.test")
        assert object_name_from_url(url) == expected


class TestStorageClient:

    def test_upload_returns_permanent_url(self, minio):
        client = StorageClient()

        url = client.upload_fileobj(BytesIO(b"data"), "profiles/x.png", "image/png")

        assert url == public_url("profiles/x.png")
        assert "X-Amz" not in url
        minio.put_object.assert_called_once()
        minio.presigned_get_object.assert_not_called()

    def test_delete_reports_failure(self, minio):
        minio.remove_object.side_effect = RuntimeError("gone")
        client = StorageClient()

        assert client.delete_file("profiles/x.png") is False
        assert minio.remove_object.call_args.args == (settings.S3_BUCKET_NAME, "profiles/x.png")
