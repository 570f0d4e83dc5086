import io
import os

import pytest
from fastapi import UploadFile

from errors import ValidationError
from uploads import UploadStore, safe_filename


def upload(name: str, content: bytes = b"data") -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=name)


@pytest.fixture
def store(tmp_path) -> UploadStore:
    return UploadStore(str(tmp_path / "uploads"), "/projects", max_files=2)


def test_safe_filename():
    assert safe_filename("..\\..\\etc/my photo.png") == "my_photo.png"


def test_save_returns_public_paths(store):
    paths = store.save([upload("shot one.png", b"1")])

    assert len(paths) == 1
    assert paths[0].startswith("/projects/") and paths[0].endswith("_shot_one.png")
    with open(os.path.join(store.directory, paths[0].rsplit("/", 1)[-1]), "rb") as f:
        assert f.read() == b"1"


def test_save_rejects_too_many_files(store):
    with pytest.raises(ValidationError):
        store.save([upload("a.png"), upload("b.png"), upload("c.png")])
    assert not os.path.exists(store.directory)


def test_discard_removes_saved_files(store):
    paths = store.save([upload("a.png"), upload("b.png")])

    store.discard(paths)

    assert os.listdir(store.directory) == []


def test_discard_ignores_paths_outside_upload_dir(store, tmp_path):
    outside = tmp_path / "keep.txt"
    outside.write_text("keep", encoding="utf-8")

    store.discard(["/projects/../keep.txt", "/projects/missing.png"])

    assert outside.exists()
