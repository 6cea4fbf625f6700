import os
import zipfile
from datetime import datetime
from pathlib import Path

import pytest

from xml_archiver.domains.archive import Archiver, read_entries, read_entry_bytes, recover_staging


@pytest.fixture
def archiver(tmp_path: Path) -> Archiver:
    return Archiver(tmp_path / "xml_archive.zip", root=tmp_path)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def names(archive: Path) -> list[str]:
    return [entry.name for entry in read_entries(archive)]


def test_commit_into_missing_archive(tmp_path, archiver):
    source = write(tmp_path / "a.xml", "<a>1</a>")

    assert archiver.commit(source) == "a.xml"

    entries = read_entries(archiver.archive_path)
    assert [entry.name for entry in entries] == ["a.xml"]
    assert entries[0].compressed
    assert entries[0].size == len("<a>1</a>")
    assert read_entry_bytes(archiver.archive_path, "a.xml") == source.read_bytes()


def test_commits_append_in_order(tmp_path, archiver):
    a = write(tmp_path / "a.xml", "<a/>")
    b = write(tmp_path / "b.xml", "<b/>")

    archiver.commit(a)
    archiver.commit(b)

    assert names(archiver.archive_path) == ["a.xml", "b.xml"]
    assert read_entry_bytes(archiver.archive_path, "a.xml") == b"<a/>"
    assert read_entry_bytes(archiver.archive_path, "b.xml") == b"<b/>"


def test_same_file_twice_keeps_both_entries(tmp_path, archiver):
    a = write(tmp_path / "a.xml", "<a>old</a>")
    archiver.commit(a)
    write(a, "<a>new</a>")
    archiver.commit(a)

    assert names(archiver.archive_path) == ["a.xml", "a.xml"]
    assert read_entry_bytes(archiver.archive_path, "a.xml", occurrence=0) == b"<a>old</a>"
    assert read_entry_bytes(archiver.archive_path, "a.xml") == b"<a>new</a>"


def test_copied_entries_keep_metadata(tmp_path, archiver):
    a = write(tmp_path / "a.xml", "<a/>")
    archiver.commit(a)
    before = read_entries(archiver.archive_path)[0]

    archiver.commit(write(tmp_path / "b.xml", "<b/>"))
    after = read_entries(archiver.archive_path)[0]

    assert after.name == before.name
    assert after.modified == before.modified
    assert after.mode == before.mode
    assert after.size == before.size


def test_folder_structure_preserved(tmp_path, archiver):
    nested = write(tmp_path / "orders" / "2024" / "c.xml", "<c/>")

    assert archiver.commit(nested) == "orders/2024/c.xml"
    assert names(archiver.archive_path) == ["orders/2024/c.xml"]


def test_entry_name_without_root_is_path_as_given(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write(tmp_path / "d.xml", "<d/>")
    archiver = Archiver(Path("xml_archive.zip"))

    assert archiver.commit("d.xml") == "d.xml"


def test_missing_file_fails_but_keeps_previous_entries(tmp_path, archiver):
    archiver.commit(write(tmp_path / "a.xml", "<a/>"))

    with pytest.raises(FileNotFoundError):
        archiver.commit(tmp_path / "gone.xml")

    assert names(archiver.archive_path) == ["a.xml"]


def test_directory_is_rejected(tmp_path, archiver):
    (tmp_path / "folder.xml").mkdir()

    with pytest.raises(IsADirectoryError):
        archiver.commit(tmp_path / "folder.xml")


def test_previous_version_left_in_staging(tmp_path, archiver):
    archiver.commit(write(tmp_path / "a.xml", "<a/>"))
    assert not archiver.staging_path.exists()

    archiver.commit(write(tmp_path / "b.xml", "<b/>"))

    assert archiver.staging_path == tmp_path / "_xml_archive.zip"
    assert names(archiver.staging_path) == ["a.xml"]


def test_stale_staging_file_is_discarded(tmp_path, archiver):
    archiver.staging_path.write_bytes(b"left over from a crash")

    archiver.commit(write(tmp_path / "a.xml", "<a/>"))

    assert not archiver.staging_path.exists()
    assert names(archiver.archive_path) == ["a.xml"]


def test_unreadable_previous_archive_degrades_to_empty(tmp_path, archiver, log_messages):
    archiver.archive_path.write_bytes(b"not a zip file")

    archiver.commit(write(tmp_path / "b.xml", "<b/>"))

    assert names(archiver.archive_path) == ["b.xml"]
    assert any("Could not open previous archive" in message for message in log_messages)


def test_stored_entries_are_copied(tmp_path, archiver):
    with zipfile.ZipFile(archiver.archive_path, "w") as archive:
        archive.writestr("legacy.xml", "<legacy/>")

    archiver.commit(write(tmp_path / "a.xml", "<a/>"))

    entries = read_entries(archiver.archive_path)
    assert [entry.name for entry in entries] == ["legacy.xml", "a.xml"]
    assert not entries[0].compressed
    assert read_entry_bytes(archiver.archive_path, "legacy.xml") == b"<legacy/>"


def test_compression_level_is_applied(tmp_path):
    source = write(tmp_path / "big.xml", "<row>value</row>" * 2000)
    fast = Archiver(tmp_path / "fast.zip", root=tmp_path, compression_level=0)
    best = Archiver(tmp_path / "best.zip", root=tmp_path, compression_level=9)

    fast.commit(source)
    best.commit(source)

    assert read_entries(best.archive_path)[0].compressed_size < read_entries(fast.archive_path)[0].compressed_size


def test_read_entry_bytes_unknown_name(tmp_path, archiver):
    archiver.commit(write(tmp_path / "a.xml", "<a/>"))

    with pytest.raises(KeyError):
        read_entry_bytes(archiver.archive_path, "b.xml")
    with pytest.raises(IndexError):
        read_entry_bytes(archiver.archive_path, "a.xml", occurrence=1)


def test_recover_staging_restores_previous_version(tmp_path, archiver):
    archiver.commit(write(tmp_path / "a.xml", "<a/>"))
    archiver.commit(write(tmp_path / "b.xml", "<b/>"))

    assert recover_staging(archiver.archive_path)

    assert names(archiver.archive_path) == ["a.xml"]
    assert not archiver.staging_path.exists()
    assert not recover_staging(archiver.archive_path)


def test_file_dated_before_1980_is_archived(tmp_path, archiver):
    source = write(tmp_path / "a.xml", "<a>copied with old mtime</a>")
    os.utime(source, (0, 0))

    assert archiver.commit(source) == "a.xml"

    entry = read_entries(archiver.archive_path)[0]
    assert entry.modified == datetime(1980, 1, 1)
    assert read_entry_bytes(archiver.archive_path, "a.xml") == source.read_bytes()


def test_damaged_previous_entry_is_left_out(tmp_path, archiver, log_messages):
    with zipfile.ZipFile(archiver.archive_path, "w") as archive:
        archive.writestr("good.xml", "<good/>")
        archive.writestr("bad.xml", "<bad>payload</bad>")
    raw = bytearray(archiver.archive_path.read_bytes())
    offset = raw.index(b"payload")
    raw[offset] ^= 0xFF
    archiver.archive_path.write_bytes(bytes(raw))

    archiver.commit(write(tmp_path / "b.xml", "<b/>"))

    assert names(archiver.archive_path) == ["good.xml", "b.xml"]
    assert read_entry_bytes(archiver.archive_path, "good.xml") == b"<good/>"
    assert any("Could not copy entry bad.xml" in message for message in log_messages)
    assert "Carried over 1 entries from " + str(archiver.staging_path) in log_messages


def test_failed_staging_rename_drops_previous_entries(tmp_path, archiver, monkeypatch, log_messages):
    archiver.commit(write(tmp_path / "old.xml", "<old/>"))

    def refuse(self, target):
        raise PermissionError(f"cannot rename {self}")

    monkeypatch.setattr(Path, "replace", refuse)
    archiver.commit(write(tmp_path / "new.xml", "<new/>"))

    assert names(archiver.archive_path) == ["new.xml"]
    assert any("previous entries will be dropped" in message for message in log_messages)
