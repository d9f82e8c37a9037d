"""Tests for remembered form snapshots."""

import json
from pathlib import Path

import pytest

from formstate.core import RememberedSnapshot
from formstate.io import read_json, write_json
from formstate.remember import (
    FileRememberStore,
    MemoryRememberStore,
    SnapshotValidationError,
    validate_document,
)


@pytest.fixture
def store(tmp_path: Path) -> FileRememberStore:
    return FileRememberStore(tmp_path / "remembered")


@pytest.fixture
def snapshot() -> RememberedSnapshot:
    return RememberedSnapshot(data={"name": "Ada", "tags": ["a"]}, errors={"email": "bad"})


class TestMemoryRememberStore:
    """Tests for the in-process store."""

    def test_load_missing(self) -> None:
        assert MemoryRememberStore().load("signup") is None

    def test_saved_snapshot_is_isolated(self, snapshot: RememberedSnapshot) -> None:
        """Test later mutation of either side does not leak into the store."""
        store = MemoryRememberStore()
        store.save("signup", snapshot)

        snapshot.data["tags"].append("b")
        loaded = store.load("signup")
        loaded.data["name"] = "Grace"

        assert store.load("signup").data == {"name": "Ada", "tags": ["a"]}

    def test_forget(self, snapshot: RememberedSnapshot) -> None:
        store = MemoryRememberStore()
        store.save("signup", snapshot)

        assert store.keys() == ["signup"]
        assert store.forget("signup") is True
        assert store.forget("signup") is False
        assert store.load("signup") is None


class TestFileRememberStore:
    """Tests for the file-backed store."""

    def test_creates_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "remembered"
        FileRememberStore(path)
        assert path.is_dir()

    def test_save_and_load(self, store: FileRememberStore, snapshot: RememberedSnapshot) -> None:
        store.save("signup", snapshot)

        assert store.load("signup") == snapshot

    def test_document_layout(self, store: FileRememberStore, snapshot: RememberedSnapshot) -> None:
        store.save("signup", snapshot)

        document = read_json(store.storage_path / "signup.json")

        assert document["remember_key"] == "signup"
        assert document["snapshot"] == {
            "data": {"name": "Ada", "tags": ["a"]},
            "errors": {"email": "bad"},
        }
        assert set(document["meta"]) == {"created_at", "updated_at"}

    def test_resave_keeps_created_at(
        self, store: FileRememberStore, snapshot: RememberedSnapshot
    ) -> None:
        store.save("signup", snapshot)
        path = store.storage_path / "signup.json"
        document = read_json(path)
        document["meta"]["created_at"] = "2020-01-01T00:00:00+00:00"
        write_json(path, document)

        store.save("signup", RememberedSnapshot(data={"name": "Grace"}))

        document = read_json(path)
        assert document["meta"]["created_at"] == "2020-01-01T00:00:00+00:00"
        assert document["snapshot"]["data"] == {"name": "Grace"}

    def test_key_is_sanitized(self, store: FileRememberStore, snapshot: RememberedSnapshot) -> None:
        store.save("users/42:edit", snapshot)

        assert (store.storage_path / "users_42_edit.json").exists()
        assert store.load("users/42:edit") == snapshot
        assert store.keys() == ["users/42:edit"]

    def test_key_mismatch_is_ignored(
        self, store: FileRememberStore, snapshot: RememberedSnapshot
    ) -> None:
        """Test two keys sanitizing to one file do not read each other."""
        store.save("users/42", snapshot)

        assert store.load("users:42") is None

    def test_invalid_json(self, store: FileRememberStore) -> None:
        (store.storage_path / "signup.json").write_text("{not json")

        with pytest.raises(SnapshotValidationError, match="Invalid JSON"):
            store.load("signup")

    def test_invalid_document(self, store: FileRememberStore) -> None:
        write_json(
            store.storage_path / "signup.json",
            {"remember_key": "signup", "snapshot": {"data": {}, "errors": {"email": ["bad"]}}},
        )

        with pytest.raises(SnapshotValidationError, match="Invalid snapshot"):
            store.load("signup")

    def test_forget(self, store: FileRememberStore, snapshot: RememberedSnapshot) -> None:
        store.save("signup", snapshot)

        assert store.forget("signup") is True
        assert store.forget("signup") is False
        assert store.load("signup") is None

    def test_keys_skip_unreadable_files(
        self, store: FileRememberStore, snapshot: RememberedSnapshot
    ) -> None:
        store.save("signup", snapshot)
        (store.storage_path / "broken.json").write_text("[]")

        assert store.keys() == ["signup"]


class TestValidateDocument:
    """Tests for validate_document()."""

    def test_valid(self) -> None:
        validate_document({"remember_key": "k", "snapshot": {"data": {}, "errors": {}}})

    @pytest.mark.parametrize(
        "document",
        [
            {"snapshot": {"data": {}, "errors": {}}},
            {"remember_key": "", "snapshot": {"data": {}, "errors": {}}},
            {"remember_key": "k", "snapshot": {"data": []}},
            {"remember_key": "k", "snapshot": {"data": {}, "errors": {}, "extra": 1}},
            [],
        ],
    )
    def test_invalid(self, document) -> None:
        with pytest.raises(SnapshotValidationError):
            validate_document(document, source="test.json")


class TestRememberedForm:
    """Tests for a Form opted into persistence."""

    def test_form_without_key_is_not_rememberable(self, make_form) -> None:
        form = make_form({"name": ""}, store=MemoryRememberStore())

        assert form.is_rememberable is False
        assert form.persist() is False

    def test_remember_snapshot(self, make_form) -> None:
        form = make_form({"name": "", "tags": []}, remember_key="signup")
        form["name"] = "Ada"
        form.state.errors = {"email": "bad"}

        snapshot = form.remember()
        with form.edit("tags") as tags:
            tags.append("x")

        assert snapshot == RememberedSnapshot(data={"name": "Ada", "tags": []}, errors={"email": "bad"})
        assert form.persist() is False

    def test_restore_seeds_fields_not_defaults(self, make_form) -> None:
        store = MemoryRememberStore()
        first = make_form({"name": "", "email": ""}, remember_key="signup", store=store)
        first["name"] = "Ada"
        first.state.errors = {"email": "bad"}
        assert first.persist() is True

        second = make_form({"name": "", "email": ""}, remember_key="signup", store=store)

        assert second.data() == {"name": "Ada", "email": ""}
        assert second.defaults == {"name": "", "email": ""}
        assert second.is_dirty is True
        assert second.errors == {"email": "bad"}
        assert second.has_errors is True

    def test_restore_ignores_unknown_fields(self, make_form) -> None:
        store = MemoryRememberStore()
        store.save("signup", RememberedSnapshot(data={"name": "Ada", "phone": "555"}))

        form = make_form({"name": ""}, remember_key="signup", store=store)

        assert form.data() == {"name": "Ada"}
        assert "phone" not in form

    def test_restore_from_file(self, make_form, tmp_path: Path) -> None:
        store = FileRememberStore(tmp_path)
        make_form({"name": "Ada"}, remember_key="signup", store=store).persist()

        form = make_form({"name": ""}, remember_key="signup", store=store)

        assert form["name"] == "Ada"
        document = json.loads((tmp_path / "signup.json").read_text())
        assert document["snapshot"]["data"] == {"name": "Ada"}
