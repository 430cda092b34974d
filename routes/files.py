"""Files blueprint exposing upload, download, delete, rename and move."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request, send_file
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest

from storage import AbstractStorage
from utils.request_validation import parse_form_or_json

files_bp = Blueprint("files", __name__)


def _get_storage() -> AbstractStorage:
    return current_app.extensions["storage"]


@files_bp.route("/upload", methods=["POST"])
def upload_file():
    """Store the uploaded ``file`` part and return its generated name."""

    file = request.files.get("file")
    if not isinstance(file, FileStorage):
        raise BadRequest("A file is required.")

    name = _get_storage().store(file, file.filename)
    return jsonify({"name": name}), 201


@files_bp.route("/download/<path:name>", methods=["GET"])
def download_file(name: str):
    """Stream a stored file back as an attachment."""

    storage = _get_storage()
    location = storage.load(name)
    return send_file(
        storage.open(name),
        mimetype="application/octet-stream",
        as_attachment=True,
        download_name=location.name,
    )


@files_bp.route("/<path:name>", methods=["DELETE"])
def delete_file(name: str):
    _get_storage().delete(name)
    return "", 204


@files_bp.route("/rename", methods=["POST"])
def rename_file():
    """Rename a stored file; the target name must not be taken."""

    params = parse_form_or_json(request, required_keys=("old_name", "new_name"))
    renamed = _get_storage().rename(params["old_name"], params["new_name"])
    return jsonify({"name": renamed})


@files_bp.route("/move", methods=["POST"])
def move_file():
    """Move a stored file into another directory of the storage root."""

    params = parse_form_or_json(request, required_keys=("name", "new_location"))
    new_path = _get_storage().move(params["name"], params["new_location"])
    return jsonify({"path": new_path})
