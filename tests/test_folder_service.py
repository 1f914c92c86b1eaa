from core.models import ActionKind, ActionStatus
from infrastructure import folder_service as folder_service_module
from infrastructure.folder_service import FolderService
from tests.helpers import make_folders


def test_create_directory(tmp_path):
    target = tmp_path / "1983"
    entry = FolderService().create_directory(target)
    assert target.is_dir()
    assert entry.kind is ActionKind.APPLIED
    assert entry.status is ActionStatus.DONE
    # Existing folder is not an error
    assert FolderService().create_directory(target).status is ActionStatus.DONE


def test_create_directory_failure_is_reported(tmp_path):
    blocker = tmp_path / "1983"
    blocker.write_text("file in the way")
    entry = FolderService().create_directory(blocker / "sub")
    assert entry.status is ActionStatus.ERROR
    assert entry.detail


def test_move_folder(thumbs_root):
    (src,) = make_folders(thumbs_root, "PacMan")
    (thumbs_root / "1983").mkdir()
    dst = thumbs_root / "1983" / "PacMan"

    entry = FolderService().move_folder(src, dst)

    assert entry.status is ActionStatus.DONE
    assert not src.exists()
    assert (dst / "thumb.png").exists()


def test_move_missing_source_is_reported(thumbs_root):
    entry = FolderService().move_folder(thumbs_root / "nope", thumbs_root / "x")
    assert entry.status is ActionStatus.ERROR


def test_trash_folders(thumbs_root, monkeypatch):
    a, b = make_folders(thumbs_root, "a", "b")
    trashed = []
    monkeypatch.setattr(folder_service_module, "send2trash", lambda p: trashed.append(p))

    result = FolderService().trash_folders([str(a), str(thumbs_root / "missing"), str(b)])

    assert result.success_paths == [str(a), str(b)]
    assert result.failed == [(str(thumbs_root / "missing"), "Folder does not exist")]
    assert len(trashed) == 2


def test_trash_failure_is_reported(thumbs_root, monkeypatch):
    (a,) = make_folders(thumbs_root, "a")

    def refuse(path):
        raise OSError("locked")

    monkeypatch.setattr(folder_service_module, "send2trash", refuse)
    result = FolderService().trash_folders([str(a)])

    assert result.success_paths == []
    assert result.failed[0][0] == str(a)
    assert "locked" in result.failed[0][1]
