# Overview: Serves stored documents behind signed, expiring tokens.

from flask import Blueprint, jsonify, current_app, send_file

from ..services.storage_service import CollaboratorError, get_file_store


files_bp = Blueprint("files", __name__, url_prefix="/files")


@files_bp.get("/<token>")
def download_file(token: str):
    """
    Download or preview a document.

    Tokens come from /api/dashboard/jobs/<id>/file-url and expire after
    FILE_URL_TTL_SECONDS.
    """
    store = get_file_store()
    try:
        path = store.resolve_token(token, current_app.config["FILE_URL_TTL_SECONDS"])
        full_path = store.open_path(path)
    except CollaboratorError as e:
        return jsonify({"error": str(e)}), 404

    # Stored names are "<uuid hex>-<original name>"
    download_name = full_path.name.split("-", 1)[-1]
    return send_file(full_path, download_name=download_name)
