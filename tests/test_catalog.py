import base64
import io
import os

import pytest
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import ClientDisconnected

from romdepot import catalog as catalog_module
from romdepot import upload_index
from romdepot import uploads as uploads_module
from romdepot.catalog import CatalogService
from romdepot.errors import (
    FileTooLargeError,
    InternalError,
    InvalidFileTypeError,
    InvalidFilenameError,
    MissingFileError,
    NotFoundError,
)
from romdepot.models import UploadConstraint
from romdepot.storage import StoragePathResolver
from romdepot.upload_filter import UploadFilter
from romdepot.uploads import UploadHandler


@pytest.fixture
def resolver(tmp_path):
    return StoragePathResolver(str(tmp_path / "uploads"))


@pytest.fixture
def catalog(resolver):
    return CatalogService(resolver)


@pytest.fixture
def handler(resolver):
    constraint = UploadConstraint(frozenset({".nes", ".gb"}), max_size_bytes=64)
    return UploadHandler(resolver, UploadFilter(constraint), chunk_size=16)


def _file(data: bytes, name: str) -> FileStorage:
    return FileStorage(stream=io.BytesIO(data), filename=name, name="rom")


def test_list_missing_directory_twice(catalog, resolver):
    assert catalog.list_roms() == []
    assert catalog.list_roms() == []
    assert not resolver.exists()


def test_upload_list_load_delete_round_trip(catalog, handler):
    result = handler.handle(_file(b"0123456789", "zelda.nes"))

    assert result["success"] is True
    assert result["gameName"] == "The Legend of Zelda"
    assert result["system"] == "NES"
    assert result["size"] == 10
    assert result["originalName"] == "zelda.nes"
    stored = result["filename"]
    assert stored != "zelda.nes" and stored.endswith(".nes")

    entries = catalog.list_roms()
    assert [e.stored.stored_filename for e in entries] == [stored]
    assert entries[0].rom.display_name == "The Legend of Zelda"
    assert entries[0].stored.size_bytes == 10

    assert catalog.load(stored) == b"0123456789"
    assert base64.b64decode(catalog.load_base64(stored)) == b"0123456789"

    catalog.delete(stored)
    assert catalog.list_roms() == []
    with pytest.raises(NotFoundError):
        catalog.load(stored)
    with pytest.raises(NotFoundError):
        catalog.delete(stored)


def test_list_skips_internal_files_and_directories(catalog, handler, resolver):
    handler.handle(_file(b"abc", "pokemon-red.gb"))
    os.makedirs(os.path.join(resolver.root, "subdir"))
    with open(os.path.join(resolver.root, ".tmp-deadbeef"), "wb") as f:
        f.write(b"partial")

    entries = catalog.list_roms()

    assert len(entries) == 1
    assert entries[0].rom.system == "Game Boy"


def test_unindexed_file_is_identified_by_its_own_name(catalog, resolver):
    resolver.ensure_directory()
    with open(os.path.join(resolver.root, "unknown_game_123.nes"), "wb") as f:
        f.write(b"12345")

    (entry,) = catalog.list_roms()

    assert entry.stored.original_filename == "unknown_game_123.nes"
    assert entry.rom.display_name == "Unknown Game 123"
    assert entry.rom.system == "Unknown"


def test_corrupt_index_falls_back_to_stored_names(catalog, handler, resolver):
    stored = handler.handle(_file(b"x", "zelda.nes"))["filename"]
    with open(upload_index.index_path(resolver.root), "w", encoding="utf-8") as f:
        f.write("{not json")

    (entry,) = catalog.list_roms()

    assert entry.stored.original_filename == stored
    assert entry.rom.system == "Unknown"


def test_get_returns_single_entry(catalog, handler):
    stored = handler.handle(_file(b"abcd", "super-mario-bros.nes"))["filename"]

    entry = catalog.get(stored)

    assert entry.to_dict() == {
        "filename": stored,
        "originalName": "super-mario-bros.nes",
        "name": "Super Mario Bros",
        "system": "NES",
        "size": 4,
    }
    with pytest.raises(NotFoundError):
        catalog.get("nope.nes")


def test_traversal_is_rejected_before_touching_disk(catalog):
    for bad in ("../etc/passwd", "..", "a/b.nes"):
        with pytest.raises(InvalidFilenameError):
            catalog.delete(bad)
        with pytest.raises(InvalidFilenameError):
            catalog.load(bad)


def test_index_file_is_not_loadable(catalog, handler):
    handler.handle(_file(b"x", "zelda.nes"))

    with pytest.raises(InvalidFilenameError):
        catalog.load(".romdepot_index.json")


def test_upload_errors(handler, resolver):
    with pytest.raises(MissingFileError):
        handler.handle(None)
    with pytest.raises(MissingFileError):
        handler.handle(_file(b"x", ""))
    with pytest.raises(InvalidFileTypeError):
        handler.handle(_file(b"x", "notes.txt"))
    assert resolver.listdir() == []


def test_upload_size_limit_is_inclusive(handler, resolver, catalog):
    ok = handler.handle(_file(b"a" * 64, "exact.nes"))
    assert ok["size"] == 64

    with pytest.raises(FileTooLargeError):
        handler.handle(_file(b"a" * 65, "over.nes"))

    # the partial temp file is gone and only the first upload remains
    assert [n for n in resolver.listdir() if not n.startswith(".")] == [ok["filename"]]
    assert len(catalog.list_roms()) == 1


class _DisconnectingStream(io.BytesIO):
    def read(self, size=-1):
        if self.tell() >= 8:
            raise ClientDisconnected()
        return super().read(min(size, 8) if size and size > 0 else 8)


def _temp_files(resolver):
    return [n for n in resolver.listdir() if n.startswith(".tmp-")]


def test_client_disconnect_leaves_no_partial_file(handler, resolver):
    rom = FileStorage(stream=_DisconnectingStream(b"a" * 40), filename="zelda.nes", name="rom")

    with pytest.raises(ClientDisconnected):
        handler.handle(rom)

    assert _temp_files(resolver) == []
    assert [n for n in resolver.listdir() if not n.startswith(".")] == []


def test_failed_rename_is_internal_error(handler, resolver, monkeypatch):
    def refuse(src, dst):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(uploads_module.os, "replace", refuse)

    with pytest.raises(InternalError) as exc:
        handler.handle(_file(b"abc", "zelda.nes"))

    assert exc.value.status_code == 500
    monkeypatch.undo()
    assert _temp_files(resolver) == []


def test_unreadable_file_is_internal_error(catalog, handler, monkeypatch):
    stored = handler.handle(_file(b"abc", "zelda.nes"))["filename"]

    def refuse(path, mode="r", *args, **kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(catalog_module, "open", refuse, raising=False)

    with pytest.raises(InternalError) as exc:
        catalog.load(stored)
    assert exc.value.status_code == 500
    assert "Permission denied" in exc.value.message


def test_undeletable_file_is_internal_error(catalog, handler, monkeypatch):
    stored = handler.handle(_file(b"abc", "zelda.nes"))["filename"]

    def refuse(path):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(catalog_module.os, "remove", refuse)
    with pytest.raises(InternalError):
        catalog.delete(stored)
    monkeypatch.undo()

    assert [e.stored.stored_filename for e in catalog.list_roms()] == [stored]


def test_loading_a_directory_is_not_found(catalog, resolver):
    os.makedirs(os.path.join(resolver.root, "folder.nes"))

    with pytest.raises(NotFoundError):
        catalog.load("folder.nes")


def test_entry_vanishing_before_stat_is_skipped(catalog, handler, resolver, monkeypatch):
    stored = handler.handle(_file(b"abc", "zelda.nes"))["filename"]
    real_listdir = resolver.listdir

    monkeypatch.setattr(resolver, "listdir", lambda: real_listdir() + ["ghost.nes"])
    monkeypatch.setattr(catalog_module.os.path, "isfile", lambda path: True)

    entries = catalog.list_roms()

    assert [e.stored.stored_filename for e in entries] == [stored]


def test_list_drops_index_entries_for_files_removed_outside_the_api(catalog, handler, resolver):
    gone = handler.handle(_file(b"abc", "zelda.nes"))["filename"]
    kept = handler.handle(_file(b"abc", "pokemon-red.gb"))["filename"]
    os.remove(os.path.join(resolver.root, gone))

    entries = catalog.list_roms()

    assert [e.stored.stored_filename for e in entries] == [kept]
    assert upload_index.original_names(resolver.root) == {kept: "pokemon-red.gb"}
