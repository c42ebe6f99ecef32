import os
import time

import pytest

from texteditor.errors import HintError
from texteditor.storage import LocalFileStore


@pytest.fixture
def store(tmp_path):
    (tmp_path / "users").mkdir()
    return LocalFileStore(str(tmp_path / "users"), "alice")


def user_file(tmp_path, path, content=b""):
    target = tmp_path / "users" / "alice" / "files" / path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    return target


def test_stat_describes_file(tmp_path, store):
    target = user_file(tmp_path, "docs/page.html", b"<p>hello</p>")
    os.utime(target, (1500, 1500))

    info = store.stat("/docs/page.html")

    assert info.size == 12
    assert info.mtime == 1500
    assert info.mimetype == "text/html"
    assert info.owner == "alice"
    assert info.updatable is True
    assert info.file_type == "file"
    assert info.file_id == str(target.stat().st_ino)


def test_stat_directory(tmp_path, store):
    user_file(tmp_path, "docs/a.txt")

    info = store.stat("docs")

    assert info.file_type == "folder"
    assert info.mimetype == "httpd/unix-directory"


def test_stat_missing_file_raises_hint(store):
    with pytest.raises(HintError) as exc_info:
        store.stat("nope.txt")
    assert exc_info.value.hint == "File not found."


def test_paths_outside_user_files_are_refused(tmp_path, store):
    (tmp_path / "users" / "bob" / "files").mkdir(parents=True)
    (tmp_path / "users" / "bob" / "files" / "x.txt").write_bytes(b"x")

    with pytest.raises(HintError) as exc_info:
        store.read_bytes("../../bob/files/x.txt")
    assert exc_info.value.hint == "Invalid file path supplied."


def test_read_bytes_of_directory_returns_none(tmp_path, store):
    user_file(tmp_path, "docs/a.txt")
    assert store.read_bytes("docs") is None


def test_stat_is_cached_until_invalidated(tmp_path, store):
    target = user_file(tmp_path, "a.txt", b"one")
    assert store.stat("a.txt").size == 3

    target.write_bytes(b"three")
    assert store.stat("a.txt").size == 3

    store.invalidate_stat_cache()
    assert store.stat("a.txt").size == 5


def test_write_always_advances_mtime(tmp_path, store):
    target = user_file(tmp_path, "a.txt", b"old")
    future = int(time.time()) + 100
    os.utime(target, (future, future))

    assert store.write_bytes("a.txt", b"new") is True

    assert target.read_bytes() == b"new"
    assert int(target.stat().st_mtime) == future + 1


@pytest.mark.parametrize("user_id", ["../outside", "alice/../../outside", "..", "a/b"])
def test_user_id_outside_storage_root_is_refused(tmp_path, user_id):
    (tmp_path / "users").mkdir()
    store = LocalFileStore(str(tmp_path / "users"), user_id)

    with pytest.raises(HintError) as exc_info:
        store.read_bytes("secret.txt")

    assert exc_info.value.hint == "Invalid user id supplied."
    assert not (tmp_path / "outside").exists()


def test_absolute_user_id_is_refused(tmp_path):
    outside = tmp_path / "outside"
    (outside / "files").mkdir(parents=True)
    (outside / "files" / "secret.txt").write_bytes(b"top secret")
    store = LocalFileStore(str(tmp_path / "users"), str(outside))

    with pytest.raises(HintError):
        store.stat("secret.txt")
