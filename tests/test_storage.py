"""
Тесты локального хранилища: запись, чтение, удаление, листинг
и защита от выхода за пределы корня.
"""

import os
from unittest.mock import patch

import pytest

from ocr_gateway.errors import (
    Forbidden,
    InvalidContentType,
    NotAFile,
    NotFound,
    SizeLimitExceeded,
)

PNG_TYPES = {"image/png", "image/jpeg"}


def _put(store, content=b"0123456789", name="a.png", folder="images", **kwargs):
    kwargs.setdefault("content_type", "image/png")
    kwargs.setdefault("allowed_content_types", PNG_TYPES)
    kwargs.setdefault("max_size_bytes", 1024)
    return store.put(content, original_name=name, folder_name=folder, **kwargs)


def test_put_then_get_returns_same_bytes(store):
    content = bytes(range(256))
    url = _put(store, content=content)

    stored = store.get(url)

    assert stored.content == content
    assert stored.size_bytes == 256
    assert stored.content_type == "image/png"
    assert stored.folder_name == "images"


def test_put_generates_uuid_prefixed_name(store):
    url = _put(store, name="scan.png")

    assert url.startswith("/uploads/images/")
    generated = url.rsplit("/", 1)[1]
    prefix, original = generated.split("_", 1)
    assert len(prefix) == 36
    assert original == "scan.png"


def test_put_strips_directories_from_names(store):
    url = _put(store, name="C:\\Users\\me\\photo.png", file_name="nested/dir/explicit.png")

    assert url == "/uploads/images/explicit.png"
    assert (store.root / "images" / "explicit.png").is_file()


def test_put_with_explicit_name_overwrites(store):
    _put(store, content=b"first", file_name="same.png")
    url = _put(store, content=b"second", file_name="same.png")

    assert store.get(url).content == b"second"


def test_put_creates_nested_folders(store):
    url = _put(store, folder="images/2024/05")

    assert url.startswith("/uploads/images/2024/05/")
    assert store.get(url).folder_name == "images/2024/05"


def test_invalid_content_type_writes_nothing(store):
    with pytest.raises(InvalidContentType):
        _put(store, content_type="application/zip")

    assert not store.root.exists()


def test_size_limit_writes_nothing(store):
    with pytest.raises(SizeLimitExceeded):
        _put(store, content=b"x" * 11, max_size_bytes=10)

    assert not store.root.exists()


def test_size_exactly_at_limit_is_accepted(store):
    url = _put(store, content=b"x" * 10, max_size_bytes=10)

    assert store.get(url).size_bytes == 10


@pytest.mark.parametrize("folder", ["../outside", "images/../../outside", "/../outside"])
def test_put_rejects_folder_outside_root(store, folder):
    with pytest.raises(Forbidden):
        _put(store, folder=folder)

    assert not (store.root.parent / "outside").exists()


@pytest.mark.parametrize("file_name", ["..", ".", "images/.."])
def test_put_rejects_dot_file_names(store, file_name):
    with pytest.raises(Forbidden):
        _put(store, file_name=file_name)


def test_get_accepts_public_internal_and_relative_keys(store):
    url = _put(store, file_name="a.png")

    assert store.get(url).content == b"0123456789"
    assert store.get("/api/files/images/a.png").content == b"0123456789"
    assert store.get("images/a.png").content == b"0123456789"


def test_get_missing_file_is_not_found(store):
    with pytest.raises(NotFound):
        store.get("/uploads/images/missing.png")


def test_get_directory_is_not_found(store):
    _put(store)

    with pytest.raises(NotFound):
        store.get("/uploads/images")


@pytest.mark.parametrize(
    "key",
    [
        "../secret.txt",
        "/uploads/../secret.txt",
        "/api/files/images/../../secret.txt",
        "images/../../secret.txt",
    ],
)
def test_traversal_is_forbidden_for_every_operation(store, key):
    secret = store.root.parent / "secret.txt"
    secret.write_text("top secret")
    _put(store)

    with pytest.raises(Forbidden):
        store.get(key)
    with pytest.raises(Forbidden):
        store.delete(key)
    with pytest.raises(Forbidden):
        store.list(key)

    assert secret.read_text() == "top secret"


def test_symlink_out_of_root_is_forbidden(store):
    outside = store.root.parent / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("top secret")
    store.root.mkdir()
    os.symlink(outside, store.root / "link")

    with pytest.raises(Forbidden):
        store.get("link/secret.txt")


def test_sibling_directory_with_same_prefix_is_forbidden(store):
    sibling = store.root.parent / "uploads-evil"
    sibling.mkdir()
    (sibling / "x.txt").write_text("x")

    with pytest.raises(Forbidden):
        store.get("../uploads-evil/x.txt")


def test_absolute_looking_key_stays_inside_root(store):
    with pytest.raises(NotFound):
        store.get("/etc/passwd")


def test_delete_then_get_is_not_found(store):
    url = _put(store)

    store.delete(url)

    with pytest.raises(NotFound):
        store.get(url)


def test_delete_missing_file_is_not_found(store):
    with pytest.raises(NotFound):
        store.delete("/uploads/images/missing.png")


def test_list_missing_folder_is_empty(store):
    assert store.list("nothing-here") == []


def test_list_returns_only_regular_files_sorted(store):
    _put(store, file_name="b.png")
    _put(store, file_name="a.png")
    _put(store, folder="images/sub", file_name="c.png")

    assert store.list("images") == ["images/a.png", "images/b.png"]
    assert store.list("/uploads/images/sub") == ["images/sub/c.png"]


def test_list_on_file_is_not_a_folder(store):
    _put(store, file_name="a.png")

    with pytest.raises(NotAFile):
        store.list("images/a.png")


def test_file_removed_during_read_is_not_found(store):
    url = _put(store)

    with patch("pathlib.Path.read_bytes", side_effect=FileNotFoundError("gone")):
        with pytest.raises(NotFound):
            store.get(url)
