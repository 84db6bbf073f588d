"""Integration tests for attachment upload and download"""

import io

from sealflow.config import settings


def _upload(client, name="盖章文件.pdf", content=b"%PDF-1.4\ntest content\n", **data):
    return client.post(
        "/api/files/upload",
        files={"file": (name, io.BytesIO(content), "application/pdf")},
        data=data,
    )


class TestUpload:

    def test_upload_pdf(self, client):
        response = _upload(client)

        assert response.status_code == 200
        assert response.json()["message"] == "文件上传成功"
        data = response.json()["data"]
        assert data["filename"] == "盖章文件.pdf"
        assert data["size"] == len(b"%PDF-1.4\ntest content\n")
        assert data["type"] == "application/pdf"
        assert data["url"].startswith("/api/files/download/attachment/2024/03/15/")
        assert data["url"].endswith(".pdf")

    def test_custom_type_folder(self, client):
        response = _upload(client, type="seal_images")
        assert "/api/files/download/seal_images/" in response.json()["data"]["url"]

    def test_invalid_type_folder(self, client):
        response = _upload(client, type="../etc")
        assert response.status_code == 400
        assert response.json()["message"] == "无效的文件分类: ../etc"

    def test_empty_file(self, client):
        response = _upload(client, content=b"")
        assert response.status_code == 400
        assert response.json()["message"] == "文件不能为空"

    def test_unsupported_extension(self, client):
        response = _upload(client, name="tool.exe")
        assert response.status_code == 400
        assert response.json()["message"].startswith("不支持的文件类型")

    def test_too_large(self, client, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_BYTES", 1024 * 1024)
        response = _upload(client, content=b"x" * (1024 * 1024 + 1))
        assert response.status_code == 400
        assert response.json()["message"] == "文件大小不能超过1MB"


class TestDownload:

    def test_download_uploaded_file(self, client):
        url = _upload(client).json()["data"]["url"]

        response = client.get(url)
        assert response.status_code == 200
        assert response.content == b"%PDF-1.4\ntest content\n"

    def test_missing_file(self, client):
        response = client.get("/api/files/download/attachment/2024/03/15/missing.pdf")
        assert response.status_code == 404
        assert response.json()["message"] == "文件不存在: missing.pdf"
