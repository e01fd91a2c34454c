"""
Local document store and signed download links.
"""

from pathlib import Path

import pytest

from conftest import make_pdf
from quickprint.services.document_service import count_document_pages, is_pdf
from quickprint.services.storage_service import CollaboratorError, LocalFileStore
from quickprint.validation import ValidationError


@pytest.fixture
def store(tmp_path):
    return LocalFileStore(tmp_path / "docs", "secret")


class TestLocalFileStore:

    def test_store_and_delete(self, store):
        path = store.build_path("group-1", "My Thesis (final).pdf")
        store.store(path, b"data")

        assert path.startswith("group-1/")
        assert path.endswith("-My_Thesis_final.pdf")
        assert store.exists(path)
        assert store.open_path(path).read_bytes() == b"data"

        store.delete(path)

        assert not store.exists(path)
        assert not (store.root / "group-1").exists()

    def test_folder_kept_while_other_files_remain(self, store):
        first = store.build_path("g", "a.pdf")
        second = store.build_path("g", "b.pdf")
        store.store(first, b"1")
        store.store(second, b"2")

        store.delete(first)

        assert (store.root / "g").is_dir()
        assert store.exists(second)

    def test_folder_cleanup_failure_is_a_collaborator_error(self, store, monkeypatch):
        path = store.build_path("g", "a.pdf")
        store.store(path, b"1")

        def locked_rmdir(self):
            raise PermissionError("folder is locked")

        monkeypatch.setattr(Path, "rmdir", locked_rmdir)

        with pytest.raises(CollaboratorError, match="could not remove its folder"):
            store.delete(path)
        assert not store.exists(path)

    def test_delete_missing(self, store):
        with pytest.raises(CollaboratorError, match="not found"):
            store.delete("g/nothing.pdf")
        store.delete("g/nothing.pdf", missing_ok=True)

    def test_unsafe_name_falls_back(self, store):
        assert store.build_path("g", "../../").endswith("-document")

    @pytest.mark.parametrize("path", ["../outside.pdf", "g/../../outside.pdf", "/etc/passwd"])
    def test_paths_cannot_escape_root(self, store, path):
        with pytest.raises(CollaboratorError, match="Invalid storage path"):
            store.store(path, b"x")

    def test_open_missing(self, store):
        with pytest.raises(CollaboratorError):
            store.open_path("g/missing.pdf")


class TestTokens:

    def test_round_trip(self, store):
        token = store.make_token("g/file.pdf")
        assert store.resolve_token(token, max_age=3600) == "g/file.pdf"

    def test_expired(self, store):
        token = store.make_token("g/file.pdf")
        with pytest.raises(CollaboratorError, match="expired"):
            store.resolve_token(token, max_age=-1)

    def test_tampered(self, store):
        token = store.make_token("g/file.pdf")
        with pytest.raises(CollaboratorError, match="Invalid file link"):
            store.resolve_token(token[:-2] + "xx", max_age=3600)

    def test_other_secret(self, store, tmp_path):
        other = LocalFileStore(tmp_path / "docs", "another-secret")
        with pytest.raises(CollaboratorError):
            other.resolve_token(store.make_token("g/file.pdf"), max_age=3600)


class TestDocumentInspection:

    def test_pdf_page_count(self):
        assert count_document_pages("scan.pdf", make_pdf(7)) == 7

    def test_pdf_detected_by_content(self):
        assert is_pdf("upload.bin", make_pdf(1))
        assert is_pdf("UPLOAD.PDF", b"")
        assert not is_pdf("photo.jpg", b"\xff\xd8\xff")

    def test_non_pdf_needs_explicit_count(self):
        with pytest.raises(ValidationError) as exc_info:
            count_document_pages("photo.jpg", b"\xff\xd8\xff")
        assert exc_info.value.field == "total_pages"
