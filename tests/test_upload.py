"""Presigned uploads and storage helpers."""

import re
from unittest.mock import patch

import pytest
from fastapi import HTTPException

from gigit.core.exceptions import StorageNotConfigured
from gigit.db.database import execute_raw_sql
from gigit.services.storage_service import StorageClient
from gigit.utils.file_upload import MAX_FILE_SIZE_BYTES, generate_file_key, validate_upload


def test_generate_file_key_sanitizes_filename():
    key = generate_file_key("resumes", "user1", "My Résumé (final).pdf", timestamp_ms=1700000000000)
    assert key == "resumes/user1/1700000000000-My_R_sum___final_.pdf"


def test_generate_file_key_uses_current_time():
    key = generate_file_key("profiles", "user1", "me.png")
    assert re.fullmatch(r"profiles/user1/\d{13}-me\.png", key)


@pytest.mark.parametrize("folder,content_type", [
    ("resumes", "application/pdf"),
    ("resumes", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
    ("profiles", "image/webp"),
    ("licenses", "image/png"),
])
def test_validate_upload_accepts(folder, content_type):
    validate_upload(folder, content_type, 1024)


@pytest.mark.parametrize("folder,content_type,size,status", [
    ("resumes", "image/png", None, 400),
    ("portfolios", "application/pdf", None, 400),
    ("avatars", "image/png", None, 400),
    ("profiles", "image/png", MAX_FILE_SIZE_BYTES + 1, 413),
])
def test_validate_upload_rejects(folder, content_type, size, status):
    with pytest.raises(HTTPException) as exc:
        validate_upload(folder, content_type, size)
    assert exc.value.status_code == status


def test_presign_upload(client, worker):
    user_id = execute_raw_sql("SELECT id FROM users WHERE email = 'worker@test.com'")[0]["id"]

    resp = client.post("/api/upload", headers=worker["headers"], json={
        "filename": "resume.pdf", "content_type": "application/pdf", "folder": "resumes", "size": 2048
    })

    assert resp.status_code == 200
    body = resp.json()
    assert body["key"].startswith(f"resumes/{user_id}/")
    assert body["key"].endswith("-resume.pdf")
    assert body["public_url"] == f"https://cdn.test.example/gigit-test/{body['key']}"
    assert "storage.test.example" in body["upload_url"]
    assert "X-Amz-Signature=" in body["upload_url"]


def test_presign_upload_rejections(client, worker):
    too_big = client.post("/api/upload", headers=worker["headers"], json={
        "filename": "huge.png", "content_type": "image/png", "folder": "profiles", "size": 11 * 1024 * 1024
    })
    wrong_type = client.post("/api/upload", headers=worker["headers"], json={
        "filename": "x.exe", "content_type": "application/octet-stream", "folder": "resumes"
    })

    assert too_big.status_code == 413
    assert wrong_type.status_code == 400


def test_presign_upload_requires_login(client):
    resp = client.post("/api/upload", json={
        "filename": "resume.pdf", "content_type": "application/pdf", "folder": "resumes"
    })
    assert resp.status_code == 401


def test_presign_upload_without_storage(client, worker):
    with patch("gigit.api.routes.upload_routes.get_storage_client",
               side_effect=StorageNotConfigured("missing credentials")):
        resp = client.post("/api/upload", headers=worker["headers"], json={
            "filename": "resume.pdf", "content_type": "application/pdf", "folder": "resumes"
        })

    assert resp.status_code == 503
    assert resp.json()["error"] == "storage_not_configured"


def test_formats(client):
    body = client.get("/api/upload/formats").json()
    assert body["max_size_mb"] == 10
    assert "image/webp" in body["folders"]["portfolios"]


def test_storage_client_helpers():
    storage = StorageClient()

    url = storage.get_public_url("profiles/u1/1-me.png")
    assert url == "https://cdn.test.example/gigit-test/profiles/u1/1-me.png"
    assert storage.extract_key(url) == "profiles/u1/1-me.png"
    assert storage.extract_key("https://elsewhere.example/profiles/u1/1-me.png") is None
    assert "X-Amz-Signature=" in storage.presign_download("profiles/u1/1-me.png")


def test_storage_delete_reports_failure():
    from botocore.exceptions import ClientError

    storage = StorageClient()
    error = ClientError({"Error": {"Code": "NoSuchBucket", "Message": "gone"}}, "DeleteObject")
    with patch.object(storage.client, "delete_object", side_effect=error):
        assert storage.delete("profiles/u1/1-me.png") is False
    with patch.object(storage.client, "delete_object", return_value={}):
        assert storage.delete("profiles/u1/1-me.png") is True
