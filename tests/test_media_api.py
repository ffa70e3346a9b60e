"""Media uploads with the MinIO client mocked out."""

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from tms_backend.services.media_service import MAX_IMAGE_BYTES, media_service


@pytest.fixture
def minio_client():
    client = MagicMock()
    client.presigned_put_object.return_value = "http://minio.local/signed"
    with patch.object(media_service, "client", client):
        yield client


def test_upload_image(client, trainee, trainee_headers, minio_client):
    resp = client.post(
        "/api/media/images/upload/avatar",
        files=[("files", ("me.png", b"\x89PNG fake", "image/png"))],
        headers=trainee_headers,
    )
    assert resp.status_code == 200, resp.text
    uploaded = resp.json()["data"][0]
    assert uploaded["key"].startswith(f"avatar/{trainee.id}/")
    assert uploaded["key"].endswith(".png")
    assert uploaded["content_type"] == "image/png"
    assert uploaded["url"].endswith(uploaded["key"])
    minio_client.put_object.assert_called_once()


def test_unsupported_image_type_uploads_nothing(client, trainee_headers, minio_client):
    resp = client.post(
        "/api/media/images/upload/avatar",
        files=[
            ("files", ("ok.png", b"png", "image/png")),
            ("files", ("anim.gif", b"GIF89a", "image/gif")),
        ],
        headers=trainee_headers,
    )
    assert resp.status_code == 400
    minio_client.put_object.assert_not_called()


def test_image_size_limit(client, trainee_headers, minio_client):
    big = b"0" * (MAX_IMAGE_BYTES + 1)
    resp = client.post(
        "/api/media/images/upload/avatar",
        files=[("files", ("big.jpg", big, "image/jpeg"))],
        headers=trainee_headers,
    )
    assert resp.status_code == 400


def test_upload_document(client, trainee_headers, minio_client):
    resp = client.post(
        "/api/media/docs/upload/report",
        files=[("files", ("notes.pdf", b"%PDF-1.4", "application/pdf"))],
        headers=trainee_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"][0]["key"].startswith("report/")


def test_unknown_media_type_is_a_validation_error(client, trainee_headers, minio_client):
    resp = client.post(
        "/api/media/images/upload/banner",
        files=[("files", ("me.png", b"png", "image/png"))],
        headers=trainee_headers,
    )
    assert resp.status_code == 422


def test_presigned_image_url_expires_quickly(client, trainee_headers, minio_client):
    resp = client.post(
        "/api/media/images/upload/presigned-url",
        json={"filename": "me.jpg", "content_type": "image/jpeg", "media_type": "avatar"},
        headers=trainee_headers,
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["upload_url"] == "http://minio.local/signed"
    assert data["expires_in"] == 30
    assert minio_client.presigned_put_object.call_args.kwargs["expires"] == timedelta(seconds=30)


def test_presigned_doc_url(client, trainee_headers, minio_client):
    resp = client.post(
        "/api/media/docs/upload/presigned-url",
        json={"filename": "cv.pdf", "content_type": "application/pdf", "media_type": "template"},
        headers=trainee_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["expires_in"] == 60
    assert resp.json()["data"]["key"].endswith(".pdf")


def test_media_requires_authentication(client, seeded, minio_client):
    resp = client.post(
        "/api/media/images/upload/presigned-url",
        json={"filename": "me.jpg", "content_type": "image/jpeg", "media_type": "avatar"},
    )
    assert resp.status_code == 401
