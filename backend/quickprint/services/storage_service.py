# Overview: File-store collaborator for uploaded documents; local disk plus signed, expiring URLs.

"""
Document storage.

Uploaded files are written under STORAGE_DIR using the job group id as a
folder (``<group_id>/<uuid>-<file name>``). Downloads and previews use
temporary URLs: an itsdangerous token that embeds the storage path and
expires after FILE_URL_TTL_SECONDS (one hour by default).

Every failure at this boundary is raised as CollaboratorError so callers
can show a retry-capable message and keep prior state intact.
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path

from flask import current_app, url_for
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.utils import secure_filename


class CollaboratorError(Exception):
    """Storage or record-store failure (I/O, timeout, missing object)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class LocalFileStore:
    """File store backed by a directory on local disk."""

    TOKEN_SALT = "quickprint-file-url"

    def __init__(self, root: str | os.PathLike, secret_key: str):
        self.root = Path(root).resolve()
        self._serializer = URLSafeTimedSerializer(secret_key, salt=self.TOKEN_SALT)

    def _resolve(self, path: str) -> Path:
        full = (self.root / path).resolve()
        if self.root not in full.parents:
            raise CollaboratorError("Invalid storage path", details={"path": path})
        return full

    def build_path(self, job_group_id: str, file_name: str) -> str:
        safe_name = secure_filename(file_name) or "document"
        return f"{job_group_id}/{uuid.uuid4().hex}-{safe_name}"

    def store(self, path: str, data: bytes) -> None:
        full = self._resolve(path)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            full.write_bytes(data)
        except OSError as exc:
            raise CollaboratorError(f"Failed to store {path}", details={"error": str(exc)}) from exc

    def delete(self, path: str, *, missing_ok: bool = False) -> None:
        full = self._resolve(path)
        try:
            full.unlink()
        except FileNotFoundError as exc:
            if missing_ok:
                return
            raise CollaboratorError(f"Stored file not found: {path}") from exc
        except OSError as exc:
            raise CollaboratorError(f"Failed to delete {path}", details={"error": str(exc)}) from exc

        # Drop the per-order folder once it is empty
        try:
            if full.parent != self.root and not any(full.parent.iterdir()):
                full.parent.rmdir()
        except OSError as exc:
            raise CollaboratorError(
                f"Deleted {path} but could not remove its folder",
                details={"error": str(exc)},
            ) from exc

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def open_path(self, path: str) -> Path:
        full = self._resolve(path)
        if not full.is_file():
            raise CollaboratorError(f"Stored file not found: {path}")
        return full

    def make_token(self, path: str) -> str:
        return self._serializer.dumps({"path": path})

    def resolve_token(self, token: str, max_age: int) -> str:
        """Return the storage path embedded in a token that has not expired."""
        try:
            payload = self._serializer.loads(token, max_age=max_age)
        except SignatureExpired as exc:
            raise CollaboratorError("File link has expired") from exc
        except BadSignature as exc:
            raise CollaboratorError("Invalid file link") from exc
        return payload["path"]

    def get_temporary_access_url(self, path: str, ttl: int) -> dict:
        if not self.exists(path):
            raise CollaboratorError(f"Stored file not found: {path}")
        token = self.make_token(path)
        return {
            "url": url_for("files.download_file", token=token, _external=True),
            "expires_in": ttl,
        }


def init_file_store(app) -> LocalFileStore:
    root = Path(app.config["STORAGE_DIR"])
    if not root.is_absolute():
        root = Path(app.instance_path) / root
    store = LocalFileStore(root, app.config["SECRET_KEY"])
    app.extensions["quickprint.file_store"] = store
    return store


def get_file_store() -> LocalFileStore:
    return current_app.extensions["quickprint.file_store"]
