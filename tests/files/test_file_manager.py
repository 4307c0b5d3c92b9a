"""
Tests for FileManager operations.

Every test runs against the bootstrap tree:

    root/
        documents/report (Annual Report.pdf)
        images/profile (profile.jpg)
        readme (README.md)
"""

import asyncio

import pytest

from fileforge.events import EventDispatcher
from fileforge.files import ErrorKind, FileKind, StorageError
from fileforge.files.manager import FileManager
from fileforge.files.permissions import PermissionGate
from fileforge.files.store import TreeStore
from fileforge.storage import MemoryStorage


class FailingStorage(MemoryStorage):
    async def save(self, key, value):
        raise StorageError("quota exceeded")


def titles(notifications):
    return [n.title for n in notifications]


class TestCreateAndEdit:
    @pytest.mark.asyncio
    async def test_create_folder_then_sort_file_inside(self, manager, notifications):
        created = await manager.create("Photos", "root", kind=FileKind.FOLDER)
        assert created.success
        photos = created.data
        assert photos.is_folder
        assert photos.content is None
        assert photos.size == 0

        result = await manager.create("a.txt", photos.id, content="b\na\nc")
        assert result.success
        assert result.message == "a.txt has been created successfully."
        text = result.data
        assert text.kind == FileKind.DOCUMENT
        assert text.size == 5

        sorted_result = await manager.sort_content(text.id)
        assert sorted_result.success
        assert manager.store.get(text.id).content == "a\nb\nc"
        assert titles(notifications) == ["File Created", "File Created", "File Sorted"]

    @pytest.mark.asyncio
    async def test_create_infers_kind_from_name(self, manager):
        result = await manager.create("song.mp3", "root")
        assert result.data.kind == FileKind.AUDIO

    @pytest.mark.asyncio
    async def test_create_with_explicit_size(self, manager):
        result = await manager.create("movie.mp4", "root", size=2048)
        assert result.data.size == 2048

    @pytest.mark.asyncio
    async def test_create_under_file_fails(self, manager, notifications):
        result = await manager.create("x.txt", "readme")
        assert not result.success
        assert result.error == ErrorKind.INVALID_STATE
        assert result.message == "README.md is not a folder."
        assert notifications[-1].variant == "destructive"
        assert len(manager.store) == 6

    @pytest.mark.asyncio
    async def test_create_under_missing_parent_fails(self, manager):
        result = await manager.create("x.txt", "ghost")
        assert result.error == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_create_with_blank_name_fails(self, manager):
        result = await manager.create("   ", "root")
        assert result.error == ErrorKind.INVALID_STATE

    @pytest.mark.asyncio
    async def test_create_with_negative_size_fails(self, manager):
        version = manager.store.version
        result = await manager.create("x.txt", "root", size=-1)
        assert result.error == ErrorKind.INVALID_STATE
        assert result.message == "File size must not be negative."
        assert len(manager.store) == 6
        assert manager.store.version == version

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, manager):
        first = await manager.create("one.txt", "root")
        second = await manager.create("one.txt", "root")
        ids = [r.id for r in manager.store.records]
        assert first.data.id != second.data.id
        assert len(ids) == len(set(ids))

    @pytest.mark.asyncio
    async def test_rename(self, manager, notifications):
        result = await manager.rename("readme", "NOTES.md")
        assert result.success
        assert manager.store.get("readme").name == "NOTES.md"
        assert notifications[-1].title == "File Renamed"

    @pytest.mark.asyncio
    async def test_rename_to_blank_fails(self, manager):
        result = await manager.rename("readme", "")
        assert result.error == ErrorKind.INVALID_STATE
        assert manager.store.get("readme").name == "README.md"

    @pytest.mark.asyncio
    async def test_edit_content_updates_size_in_bytes(self, manager):
        result = await manager.edit_content("readme", "héllo")
        assert result.success
        record = manager.store.get("readme")
        assert record.content == "héllo"
        assert record.size == 6

    @pytest.mark.asyncio
    async def test_edit_folder_fails(self, manager):
        result = await manager.edit_content("documents", "text")
        assert result.error == ErrorKind.INVALID_STATE

    @pytest.mark.asyncio
    async def test_clear_content(self, manager, notifications):
        await manager.encrypt_file("readme", "pw")
        result = await manager.clear_content("readme")
        assert result.success
        record = manager.store.get("readme")
        assert record.content == ""
        assert record.size == 0
        assert not record.is_encrypted
        assert notifications[-1].title == "File Cleared"


class TestBatchOperations:
    @pytest.mark.asyncio
    async def test_delete_folder_removes_descendants(self, manager, notifications):
        result = await manager.delete(["documents"])
        assert result.success
        assert result.message == "1 file deleted successfully."
        assert result.file_ids == ["documents", "report"]
        assert "documents" not in manager.store
        assert "report" not in manager.store
        assert notifications[-1].title == "Files Deleted"

    @pytest.mark.asyncio
    async def test_delete_many(self, manager):
        result = await manager.delete(["readme", "images"])
        assert result.message == "2 files deleted successfully."
        assert [r.id for r in manager.store.records] == ["root", "documents", "report"]

    @pytest.mark.asyncio
    async def test_delete_clears_selection(self, manager):
        manager.navigator.toggle_select("readme")
        await manager.delete(["readme"])
        assert manager.navigator.selection == []

    @pytest.mark.asyncio
    async def test_empty_batch_fails(self, manager):
        for result in (
            await manager.delete([]),
            await manager.move([], "documents"),
            await manager.copy([], "documents"),
        ):
            assert not result.success
            assert result.message == "No files selected."

    @pytest.mark.asyncio
    async def test_batch_with_missing_id_changes_nothing(self, manager):
        version = manager.store.version
        result = await manager.delete(["readme", "ghost"])
        assert result.error == ErrorKind.NOT_FOUND
        assert "readme" in manager.store
        assert manager.store.version == version

    @pytest.mark.asyncio
    async def test_viewer_cannot_delete(self, manager, notifications):
        manager.gate.set_role("viewer")
        result = await manager.delete(["readme", "images"])
        assert result.error == ErrorKind.PERMISSION_DENIED
        assert len(manager.store) == 6
        assert notifications[-1].title == "Permission Denied"
        assert notifications[-1].variant == "destructive"

    @pytest.mark.asyncio
    async def test_move_into_folder(self, manager, notifications):
        result = await manager.move(["readme", "images"], "documents")
        assert result.success
        assert result.message == "2 files moved successfully."
        assert manager.store.get("readme").parent_id == "documents"
        assert manager.store.get("images").parent_id == "documents"
        assert manager.store.get("profile").parent_id == "images"
        assert notifications[-1].title == "Files Moved"

    @pytest.mark.asyncio
    async def test_move_into_itself_is_rejected(self, manager, notifications):
        result = await manager.move(["images"], "images")
        assert result.error == ErrorKind.INVALID_STATE
        assert notifications[-1].title == "Move Failed"
        assert manager.store.get("images").parent_id == "root"

    @pytest.mark.asyncio
    async def test_move_into_descendant_is_rejected(self, manager):
        result = await manager.move(["root"], "documents")
        assert result.error == ErrorKind.INVALID_STATE
        assert manager.store.get("root").parent_id is None

    @pytest.mark.asyncio
    async def test_move_into_file_is_rejected(self, manager):
        result = await manager.move(["images"], "readme")
        assert result.error == ErrorKind.INVALID_STATE

    @pytest.mark.asyncio
    async def test_copy_creates_new_records(self, manager):
        result = await manager.copy(["readme"], "documents")
        assert result.success
        (copy,) = result.data
        assert copy.id != "readme"
        assert copy.name == "README.md (copy)"
        assert copy.parent_id == "documents"
        assert copy.content == manager.store.get("readme").content
        assert manager.store.get("readme").parent_id == "root"

    @pytest.mark.asyncio
    async def test_copy_of_folder_is_shallow(self, manager):
        result = await manager.copy(["images"], "documents")
        (copy,) = result.data
        assert copy.name == "Images (copy)"
        assert manager.store.children_of(copy.id) == []

    @pytest.mark.asyncio
    async def test_viewer_can_copy(self, manager):
        manager.gate.set_role("viewer")
        result = await manager.copy(["readme"], "documents")
        assert result.success


class TestProtection:
    @pytest.mark.asyncio
    async def test_encrypt_then_decrypt_restores_content(self, manager, notifications):
        original = manager.store.get("readme").content

        encrypted = await manager.encrypt_file("readme", "hunter2")
        assert encrypted.success
        record = manager.store.get("readme")
        assert record.is_encrypted
        assert record.content != original

        decrypted = await manager.decrypt_file("readme", "hunter2")
        assert decrypted.success
        record = manager.store.get("readme")
        assert not record.is_encrypted
        assert record.content == original
        assert titles(notifications)[-2:] == ["File Encrypted", "File Decrypted"]

    @pytest.mark.asyncio
    async def test_wrong_passphrase_leaves_file_encrypted(self, manager, notifications):
        await manager.edit_content("readme", "é")
        await manager.encrypt_file("readme", "a")
        stored = manager.store.get("readme").content

        result = await manager.decrypt_file("readme", "b")
        assert result.error == ErrorKind.TRANSFORM_FAILURE
        assert result.file_ids == ["readme"]
        assert manager.store.get("readme").content == stored
        assert manager.store.get("readme").is_encrypted
        assert notifications[-1].title == "Decryption Failed"

    @pytest.mark.asyncio
    async def test_cannot_encrypt_twice(self, manager):
        await manager.encrypt_file("readme", "pw")
        result = await manager.encrypt_file("readme", "pw")
        assert result.message == "This file is already encrypted."

    @pytest.mark.asyncio
    async def test_cannot_encrypt_without_content(self, manager, notifications):
        for file_id in ("profile", "documents"):
            result = await manager.encrypt_file(file_id, "pw")
            assert result.message == "Cannot encrypt a file without content."
        assert notifications[-1].title == "Encryption Failed"

    @pytest.mark.asyncio
    async def test_empty_passphrase_is_rejected(self, manager):
        result = await manager.encrypt_file("readme", "")
        assert result.message == "A password is required."
        assert not manager.store.get("readme").is_encrypted

    @pytest.mark.asyncio
    async def test_decrypt_plain_file_fails(self, manager):
        result = await manager.decrypt_file("readme", "pw")
        assert result.message == "This file is not encrypted."

    @pytest.mark.asyncio
    async def test_editor_cannot_encrypt(self, manager):
        manager.gate.set_role("editor")
        result = await manager.encrypt_file("readme", "pw")
        assert result.error == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_change_permissions(self, manager, notifications):
        result = await manager.change_permissions("readme", "755")
        assert result.success
        assert manager.store.get("readme").permissions == "755"
        assert notifications[-1].title == "Permissions Changed"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["999", "75", "rwx", "7555"])
    async def test_change_permissions_rejects_malformed_tokens(self, manager, token):
        result = await manager.change_permissions("readme", token)
        assert result.error == ErrorKind.INVALID_STATE
        assert manager.store.get("readme").permissions is None

    @pytest.mark.asyncio
    async def test_viewer_cannot_change_permissions(self, manager):
        manager.gate.set_role("viewer")
        result = await manager.change_permissions("readme", "644")
        assert result.error == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_backup_adds_sibling(self, manager, notifications):
        result = await manager.backup_file("readme")
        backup = result.data
        assert backup.name == "README.md.bak"
        assert backup.parent_id == "root"
        assert backup.content == manager.store.get("readme").content
        assert notifications[-1].title == "File Backed Up"


class TestContentTransforms:
    @pytest.mark.asyncio
    async def test_compress_then_decompress(self, manager, notifications):
        compressed = await manager.compress_file("readme")
        archive = compressed.data
        assert archive.name == "README.md.gz"
        assert archive.kind == FileKind.ARCHIVE
        assert archive.size == 717
        assert archive.original_id == "readme"
        assert archive.content == "[Compressed content of README.md]"

        decompressed = await manager.decompress_file(archive.id)
        extracted = decompressed.data
        assert extracted.name == "README.md"
        assert extracted.kind == FileKind.DOCUMENT
        assert extracted.size == 933
        assert extracted.content == "[Decompressed content of README.md.gz]"
        assert len(manager.store) == 8
        assert titles(notifications)[-2:] == ["File Compressed", "File Decompressed"]

    @pytest.mark.asyncio
    async def test_decompressed_kind_follows_original(self, manager):
        created = await manager.create("main.py", "root", content="print(1)")
        archive = (await manager.compress_file(created.data.id)).data
        extracted = (await manager.decompress_file(archive.id)).data
        assert extracted.kind == FileKind.CODE

    @pytest.mark.asyncio
    async def test_decompress_foreign_archive(self, manager):
        created = await manager.create("bundle.zip", "root", content="zip", size=7)
        extracted = (await manager.decompress_file(created.data.id)).data
        assert extracted.name == "decompressed_bundle.zip"
        assert extracted.kind == FileKind.DOCUMENT
        assert extracted.size == 10

    @pytest.mark.asyncio
    async def test_decompress_non_archive_fails(self, manager, notifications):
        result = await manager.decompress_file("readme")
        assert result.message == "This file is not an archive."
        assert notifications[-1].title == "Decompression Failed"

    @pytest.mark.asyncio
    async def test_compress_folder_fails(self, manager):
        result = await manager.compress_file("documents")
        assert result.error == ErrorKind.INVALID_STATE

    @pytest.mark.asyncio
    async def test_sort_without_content_fails(self, manager, notifications):
        result = await manager.sort_content("profile")
        assert result.message == "Cannot sort this type of file."
        assert notifications[-1].title == "Sort Failed"

    @pytest.mark.asyncio
    async def test_search_content(self, manager):
        lines = await manager.search_content("readme", "SECURE")
        assert lines == ["Line 3: A secure file management system"]

    @pytest.mark.asyncio
    async def test_search_missing_file(self, manager, notifications):
        assert await manager.search_content("ghost", "x") == []
        assert notifications[-1].title == "Permission Denied"

    @pytest.mark.asyncio
    async def test_search_does_not_change_tree(self, manager):
        version = manager.store.version
        await manager.search_content("readme", "file")
        assert manager.store.version == version


class TestDeniedOperations:
    """A denied operation reports PERMISSION_DENIED and leaves the tree alone."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "role, call",
        [
            ("viewer", lambda m: m.create("x.txt", "root")),
            ("viewer", lambda m: m.rename("readme", "x.md")),
            ("viewer", lambda m: m.edit_content("readme", "changed")),
            ("viewer", lambda m: m.clear_content("readme")),
            ("viewer", lambda m: m.sort_content("readme")),
            ("viewer", lambda m: m.compress_file("readme")),
            ("viewer", lambda m: m.decompress_file("readme")),
            ("viewer", lambda m: m.move(["readme", "images"], "documents")),
            ("viewer", lambda m: m.decrypt_file("readme", "pw")),
            ("editor", lambda m: m.delete(["readme"])),
            ("guest", lambda m: m.backup_file("readme")),
            ("guest", lambda m: m.copy(["readme"], "documents")),
        ],
    )
    async def test_denied_operation_changes_nothing(self, manager, notifications, role, call):
        version = manager.store.version
        before = [r.model_dump() for r in manager.store.records]
        manager.gate.set_role(role)

        result = await call(manager)

        assert result.error == ErrorKind.PERMISSION_DENIED
        assert manager.store.version == version
        assert [r.model_dump() for r in manager.store.records] == before
        assert notifications[-1].variant == "destructive"

    @pytest.mark.asyncio
    async def test_denied_search_returns_nothing(self, manager, notifications):
        manager.gate.set_role("guest")
        assert await manager.search_content("readme", "secure") == []
        assert notifications[-1].title == "Permission Denied"


class TestOperationBoundary:
    @pytest.mark.asyncio
    async def test_storage_failure_keeps_change_and_warns(self, dispatcher, notifications):
        manager = FileManager(
            TreeStore(FailingStorage()),
            PermissionGate("admin"),
            dispatcher=dispatcher,
            latency=0,
        )
        await manager.load()

        result = await manager.rename("readme", "NOTES.md")
        assert result.success
        assert not result.persisted
        assert manager.store.get("readme").name == "NOTES.md"
        assert titles(notifications) == ["Storage Error", "File Renamed"]

    @pytest.mark.asyncio
    async def test_changes_are_persisted(self, manager, storage):
        await manager.rename("readme", "NOTES.md")

        reloaded = TreeStore(storage)
        await reloaded.load()
        assert reloaded.get("readme").name == "NOTES.md"

    @pytest.mark.asyncio
    async def test_tree_changed_event_carries_version(self, manager, dispatcher):
        received = []

        async def on_change(event):
            received.append(event)

        dispatcher.on_tree_changed(on_change)
        await manager.delete(["documents"])
        await manager.decrypt_file("readme", "pw")  # fails, no tree change

        assert len(received) == 1
        assert received[0].operation == "delete"
        assert received[0].version == manager.store.version
        assert received[0].file_ids == ["documents", "report"]

    @pytest.mark.asyncio
    async def test_is_loading_while_operation_runs(self):
        manager = FileManager(
            TreeStore(MemoryStorage()),
            PermissionGate("admin"),
            dispatcher=EventDispatcher(),
            latency=0.05,
        )
        await manager.load()
        assert not manager.is_loading

        pending = asyncio.create_task(manager.rename("readme", "x.md"))
        await asyncio.sleep(0.01)
        assert manager.is_loading

        await pending
        assert not manager.is_loading

    @pytest.mark.asyncio
    async def test_concurrent_operations_are_serialized(self, manager):
        results = await asyncio.gather(
            manager.create("one.txt", "root"),
            manager.create("two.txt", "root"),
            manager.rename("readme", "NOTES.md"),
        )
        assert all(r.success for r in results)
        names = {r.name for r in manager.store.records}
        assert {"one.txt", "two.txt", "NOTES.md"} <= names
        assert len(manager.store) == 8
