"""
Tests for the local upload storage.
"""
import re

import pytest

from clinisync.common.errors import FileRejectedError, ValidationFailedError
from clinisync.common.storage.file_storage import FileStorage


@pytest.fixture
def storage(tmp_path):
    return FileStorage(tmp_path / "uploads", max_bytes=16)


def test_store_writes_file_with_generated_name(storage):
    stored = storage.store(b"png-bytes", "Panoramic.PNG", "image/png")

    assert re.fullmatch(r"image-\d+-\d+\.png", stored.filename)
    assert stored.original_name == "Panoramic.PNG"
    assert stored.size == 9
    assert (storage.upload_dir / stored.filename).read_bytes() == b"png-bytes"


def test_two_uploads_never_share_a_name(storage):
    first = storage.store(b"a", "scan.pdf", "application/pdf")
    second = storage.store(b"a", "scan.pdf", "application/pdf")
    assert first.filename != second.filename


@pytest.mark.parametrize("name, content_type", [
    ("notes.txt", "text/plain"),
    ("scan.png", "text/plain"),
    ("scan.exe", "image/png"),
    ("scan.png", None),
])
def test_rejects_disallowed_types(storage, name, content_type):
    with pytest.raises(FileRejectedError):
        storage.store(b"data", name, content_type)


def test_accepts_dicom(storage):
    assert storage.store(b"dicom", "ct.dcm", "application/dicom").filename.endswith(".dcm")


def test_rejects_oversized_files(storage):
    with pytest.raises(FileRejectedError):
        storage.store(b"x" * 17, "scan.png", "image/png")
    assert not storage.upload_dir.exists()


def test_validate_checks_size_without_the_bytes(storage):
    with pytest.raises(FileRejectedError) as excinfo:
        storage.validate("scan.png", "image/png", 17)
    assert excinfo.value.status_code == 422


def test_missing_name_is_unprocessable(storage):
    with pytest.raises(ValidationFailedError) as excinfo:
        storage.validate("", "image/png", 1)
    assert excinfo.value.status_code == 422


def test_requires_a_file_name(storage):
    with pytest.raises(ValidationFailedError):
        storage.store(b"data", "", "image/png")


def test_remove(storage):
    stored = storage.store(b"a", "scan.gif", "image/gif")
    assert storage.remove(stored.filename) is True
    assert storage.remove(stored.filename) is False
