"""
Integration tests for file uploads (storage client mocked)
"""
import pytest
from httpx import AsyncClient

from dintask.core.config import settings

API = "/api/v1"

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class TestUpload:

    @pytest.mark.asyncio
    async def test_single_image(self, client: AsyncClient, employee_user, mock_storage, auth_headers):
        response = await client.post(
            f"{API}/upload/",
            files={"image": ("avatar.PNG", PNG, "image/png")},
            headers=auth_headers(employee_user),
        )

        assert response.status_code == 200
        url = response.json()["imageUrl"]
        assert url.startswith("https://files.test/dintask-uploads/")
        assert url.endswith(".png")

        fileobj, object_name, content_type, size = mock_storage.upload_fileobj.call_args.args
        assert content_type == "image/png"
        assert size == len(PNG)

    @pytest.mark.asyncio
    async def test_rejects_unknown_extension(self, client: AsyncClient, employee_user, mock_storage, auth_headers):
        response = await client.post(
            f"{API}/upload/",
            files={"image": ("payload.exe", b"MZ", "application/octet-stream")},
            headers=auth_headers(employee_user),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE_TYPE"
        mock_storage.upload_fileobj.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_oversized_file(
        self, client: AsyncClient, employee_user, mock_storage, monkeypatch, auth_headers
    ):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 16)

        response = await client.post(
            f"{API}/upload/",
            files={"image": ("big.png", PNG, "image/png")},
            headers=auth_headers(employee_user),
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("File too large")

    @pytest.mark.asyncio
    async def test_requires_login(self, client: AsyncClient, mock_storage):
        response = await client.post(f"{API}/upload/", files={"image": ("a.png", PNG, "image/png")})
        assert response.status_code == 401


class TestMultipleUpload:

    @pytest.mark.asyncio
    async def test_batch(self, client: AsyncClient, admin_user, mock_storage, auth_headers):
        response = await client.post(
            f"{API}/upload/multiple",
            files=[
                ("files", ("one.jpg", b"jpeg-bytes", "image/jpeg")),
                ("files", ("clip.mp4", b"video-bytes", "video/mp4")),
            ],
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        urls = response.json()["urls"]
        assert len(urls) == 2
        assert urls[1].endswith(".mp4")

    @pytest.mark.asyncio
    async def test_one_bad_file_stores_nothing(self, client: AsyncClient, admin_user, mock_storage, auth_headers):
        response = await client.post(
            f"{API}/upload/multiple",
            files=[
                ("files", ("one.jpg", b"jpeg-bytes", "image/jpeg")),
                ("files", ("notes.txt", b"text", "text/plain")),
            ],
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 400
        mock_storage.upload_fileobj.assert_not_called()

    @pytest.mark.asyncio
    async def test_too_many_files(self, client: AsyncClient, admin_user, mock_storage, auth_headers):
        files = [("files", (f"{i}.png", PNG, "image/png")) for i in range(settings.MAX_FILES_PER_UPLOAD + 1)]

        response = await client.post(f"{API}/upload/multiple", files=files, headers=auth_headers(admin_user))

        assert response.status_code == 400
        assert response.json()["error"] == f"You can upload at most {settings.MAX_FILES_PER_UPLOAD} files"


class TestProfileImage:

    @pytest.mark.asyncio
    async def test_operator_profile_image(self, client: AsyncClient, superadmin_user, mock_storage, auth_headers):
        response = await client.put(
            f"{API}/superadmin/updateprofileimage",
            files={"image": ("me.webp", b"webp-bytes", "image/webp")},
            headers=auth_headers(superadmin_user),
        )

        assert response.status_code == 200
        assert response.json()["data"]["profileImage"].startswith("https://files.test/profiles/")

    @pytest.mark.asyncio
    async def test_replaced_image_is_removed(
        self, client: AsyncClient, db_session, superadmin_user, mock_storage, auth_headers
    ):
        superadmin_user.profile_image = "https://files.test/profiles/2026/01/old.png"
        await db_session.commit()

        response = await client.put(
            f"{API}/superadmin/updateprofileimage",
            files={"image": ("me.png", b"png-bytes", "image/png")},
            headers=auth_headers(superadmin_user),
        )

        assert response.status_code == 200
        mock_storage.delete_file.assert_called_once_with("profiles/2026/01/old.png")

    @pytest.mark.asyncio
    async def test_external_image_is_left_alone(
        self, client: AsyncClient, db_session, superadmin_user, mock_storage, auth_headers
    ):
        superadmin_user.profile_image = "https://gravatar.example/avatar.png"
        await db_session.commit()

        response = await client.put(
            f"{API}/superadmin/updateprofileimage",
            files={"image": ("me.png", b"png-bytes", "image/png")},
            headers=auth_headers(superadmin_user),
        )

        assert response.status_code == 200
        mock_storage.delete_file.assert_not_called()
