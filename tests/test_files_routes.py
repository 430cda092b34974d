"""Tests for the files upload, download, delete, rename and move routes."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest

from storage import StorageIOError


def _upload(client, content: bytes = b"PDF data", filename: str = "report.pdf"):
    return client.post(
        "/files/upload",
        data={"file": (BytesIO(content), filename)},
        content_type="multipart/form-data",
    )


def test_upload_stores_file_and_returns_name(app, client):
    """Uploading a file writes it to the storage directory."""

    response = _upload(client)

    assert response.status_code == 201
    name = response.get_json()["name"]
    assert name.endswith(".pdf")
    stored_file = Path(app.config["STORAGE_DIR"]) / name
    assert stored_file.read_bytes() == b"PDF data"


def test_upload_without_file_part_is_rejected(client):
    response = client.post(
        "/files/upload", data={}, content_type="multipart/form-data"
    )

    assert response.status_code == 400
    assert response.get_json()["detail"] == "A file is required."


def test_upload_of_empty_file_is_rejected(app, client):
    response = _upload(client, content=b"")

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"] == "Bad Request"
    assert "empty" in payload["detail"]
    assert list(Path(app.config["STORAGE_DIR"]).iterdir()) == []


def test_download_returns_attachment(client):
    name = _upload(client, content=b"document-body").get_json()["name"]

    response = client.get(f"/files/download/{name}")

    assert response.status_code == 200
    assert response.data == b"document-body"
    assert response.mimetype == "application/octet-stream"
    disposition = response.headers["Content-Disposition"]
    assert disposition.startswith("attachment")
    assert name in disposition


def test_download_unknown_file_returns_404(client):
    response = client.get("/files/download/missing.pdf")

    assert response.status_code == 404
    payload = response.get_json()
    assert payload["error"] == "Not Found"
    assert payload["request_id"]


def test_delete_removes_file(client):
    name = _upload(client).get_json()["name"]

    response = client.delete(f"/files/{name}")

    assert response.status_code == 204
    assert client.get(f"/files/download/{name}").status_code == 404
    assert client.delete(f"/files/{name}").status_code == 404


def test_delete_io_failure_returns_500(app, client, monkeypatch):
    name = _upload(client).get_json()["name"]
    storage = app.extensions["storage"]

    def _fail(target):
        raise StorageIOError(f"Could not delete file: {target}", name=target)

    monkeypatch.setattr(storage, "delete", _fail)

    response = client.delete(f"/files/{name}")

    assert response.status_code == 500
    assert response.get_json()["error"] == "Internal Server Error"


def test_rename_with_form_fields(client):
    name = _upload(client, content=b"abc").get_json()["name"]

    response = client.post(
        "/files/rename", data={"old_name": name, "new_name": "final.pdf"}
    )

    assert response.status_code == 200
    assert response.get_json() == {"name": "final.pdf"}
    assert client.get("/files/download/final.pdf").data == b"abc"


def test_rename_with_json_body(client):
    name = _upload(client).get_json()["name"]

    response = client.post(
        "/files/rename", json={"old_name": name, "new_name": "renamed.pdf"}
    )

    assert response.status_code == 200
    assert response.get_json()["name"] == "renamed.pdf"


def test_rename_conflict_returns_409(client):
    first = _upload(client, content=b"first").get_json()["name"]
    second = _upload(client, content=b"second").get_json()["name"]

    response = client.post(
        "/files/rename", data={"old_name": first, "new_name": second}
    )

    assert response.status_code == 409
    assert client.get(f"/files/download/{first}").data == b"first"
    assert client.get(f"/files/download/{second}").data == b"second"


def test_rename_unknown_file_returns_404(client):
    response = client.post(
        "/files/rename", data={"old_name": "missing.pdf", "new_name": "x.pdf"}
    )

    assert response.status_code == 404


@pytest.mark.parametrize(
    "path, data",
    [
        ("/files/rename", {"old_name": "a.pdf"}),
        ("/files/move", {"new_location": "sub"}),
    ],
)
def test_missing_parameters_return_400(client, path, data):
    response = client.post(path, data=data)

    assert response.status_code == 400
    assert "Missing required fields" in response.get_json()["detail"]


def test_move_relocates_file(app, client):
    name = _upload(client, content=b"moving").get_json()["name"]

    response = client.post(
        "/files/move", data={"name": name, "new_location": "sub/dir"}
    )

    assert response.status_code == 200
    new_path = Path(response.get_json()["path"])
    expected = (Path(app.config["STORAGE_DIR"]) / "sub" / "dir" / name).resolve()
    assert new_path == expected
    assert client.get(f"/files/download/sub/dir/{name}").data == b"moving"
    assert client.get(f"/files/download/{name}").status_code == 404


def test_move_outside_storage_returns_400(client):
    name = _upload(client).get_json()["name"]

    response = client.post(
        "/files/move", json={"name": name, "new_location": "../../tmp"}
    )

    assert response.status_code == 400
    assert "escapes" in response.get_json()["detail"]


def test_upload_over_size_limit_returns_413(tmp_path):
    from app import create_app
    from config import Config

    class SmallUploadConfig(Config):
        TESTING = True
        STORAGE_DIR = str(tmp_path / "storage")
        MAX_CONTENT_LENGTH = 16

    client = create_app(SmallUploadConfig).test_client()

    response = _upload(client, content=b"x" * 1024)

    assert response.status_code == 413
    assert response.get_json()["error"] == "Request Entity Too Large"


def test_download_with_overlong_name_returns_400(client):
    response = client.get("/files/download/" + "a" * 300)

    assert response.status_code == 400
    assert response.get_json()["error"] == "Bad Request"


@pytest.mark.parametrize(
    "path, body",
    [
        ("/files/rename", {"old_name": 123, "new_name": "x.pdf"}),
        ("/files/rename", {"old_name": "a.pdf", "new_name": ["x.pdf"]}),
        ("/files/move", {"name": "a.pdf", "new_location": {"dir": "sub"}}),
    ],
)
def test_non_string_parameters_return_400(client, path, body):
    response = client.post(path, json=body)

    assert response.status_code == 400
    assert "must be strings" in response.get_json()["detail"]


def test_interrupted_upload_leaves_no_partial_file(app, client, monkeypatch):
    from storage import local_storage as local_storage_module

    storage_dir = str(app.extensions["storage"].root)
    real_copy = local_storage_module.shutil.copyfileobj

    def _broken_copy(source, target, length=0):
        if not str(getattr(target, "name", "")).startswith(storage_dir):
            return real_copy(source, target, length)
        target.write(b"half")
        raise OSError("No space left on device")

    monkeypatch.setattr(local_storage_module.shutil, "copyfileobj", _broken_copy)

    response = _upload(client, content=b"complete payload")

    assert response.status_code == 500
    assert list(Path(app.config["STORAGE_DIR"]).iterdir()) == []
