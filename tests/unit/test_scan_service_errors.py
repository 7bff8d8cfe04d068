import io
import logging
import os
import stat
from typing import Iterator

import pytest

from linkindex.adapters.index.memory_index import DedupIndex
from linkindex.config import MAX_PATH, ScanOptions
from linkindex.domain.errors import IndexStreamError, PathTooLongError
from linkindex.ports.filesystem import EntryKind, FilesystemPort, WalkEntry
from linkindex.services.scan_service import ScanService


def fake_stat(ino: int, nlink: int, mode: int = stat.S_IFREG | 0o644, dev: int = 1):
    return os.stat_result((mode, ino, dev, nlink, 0, 0, 0, 0, 0, 0))


class ScriptedFS(FilesystemPort):
    """Replays a fixed list of walk entries."""

    def __init__(self, entries):
        self.entries = entries
        self.walk_args = None

    def walk(self, root, *, follow_symlinks=False, one_filesystem=False) -> Iterator[WalkEntry]:
        self.walk_args = (root, follow_symlinks, one_filesystem)
        yield from self.entries

    def remove(self, path):
        raise AssertionError("scan must not remove anything")

    def link(self, source, destination):
        raise AssertionError("scan must not link anything")


def _scan(entries, options=None, **kwargs):
    out = io.BytesIO()
    summary = ScanService(ScriptedFS(entries), options, **kwargs).scan(".", out)
    return summary, out.getvalue()


def test_records_every_encounter_after_the_first():
    entries = [
        WalkEntry(b".", EntryKind.DIRECTORY, fake_stat(1, 3, stat.S_IFDIR | 0o755)),
        WalkEntry(b"./a", EntryKind.FILE, fake_stat(10, 3)),
        WalkEntry(b"./b", EntryKind.FILE, fake_stat(10, 3)),
        WalkEntry(b"./c", EntryKind.FILE, fake_stat(10, 3)),
    ]
    summary, out = _scan(entries)
    assert out == b'"./a" "./b"\n"./a" "./c"\n'
    assert summary.records == 2
    assert summary.groups == 1
    assert summary.hardlinked == 3
    assert summary.entries == 4


def test_skips_single_links_directories_and_other_kinds():
    entries = [
        WalkEntry(b"./dir", EntryKind.DIRECTORY, fake_stat(2, 2, stat.S_IFDIR | 0o755)),
        WalkEntry(b"./dir2", EntryKind.DIRECTORY, fake_stat(2, 2, stat.S_IFDIR | 0o755)),
        WalkEntry(b"./lonely", EntryKind.FILE, fake_stat(3, 1)),
        WalkEntry(b"./fifo1", EntryKind.OTHER, fake_stat(4, 2, stat.S_IFIFO)),
        WalkEntry(b"./fifo2", EntryKind.OTHER, fake_stat(4, 2, stat.S_IFIFO)),
    ]
    summary, out = _scan(entries)
    assert out == b""
    assert summary.groups == 0


def test_symlinks_are_grouped_like_files():
    entries = [
        WalkEntry(b"./s1", EntryKind.SYMLINK, fake_stat(5, 2, stat.S_IFLNK | 0o777)),
        WalkEntry(b"./s2", EntryKind.DANGLING_SYMLINK, fake_stat(5, 2, stat.S_IFLNK | 0o777)),
    ]
    _, out = _scan(entries)
    assert out == b'"./s1" "./s2"\n'


def test_device_is_not_compared():
    entries = [
        WalkEntry(b"./a", EntryKind.FILE, fake_stat(7, 2, dev=1)),
        WalkEntry(b"./b", EntryKind.FILE, fake_stat(7, 2, dev=2)),
    ]
    _, out = _scan(entries)
    assert out == b'"./a" "./b"\n'


def test_unreadable_entries_warn_and_scan_continues(caplog):
    denied = PermissionError(13, "Permission denied")
    entries = [
        WalkEntry(b"./locked", EntryKind.UNREADABLE_DIRECTORY, None, denied),
        WalkEntry(b"./nostat", EntryKind.UNSTATABLE, None, denied),
        WalkEntry(b"./a", EntryKind.FILE, fake_stat(8, 2)),
        WalkEntry(b"./b", EntryKind.FILE, fake_stat(8, 2)),
    ]
    with caplog.at_level(logging.WARNING):
        summary, out = _scan(entries)
    assert out == b'"./a" "./b"\n'
    assert summary.warnings == 2
    assert "./locked: Permission denied" in caplog.text
    assert "./nostat: Permission denied" in caplog.text


def test_quiet_suppresses_unreadable_warnings(caplog):
    entries = [WalkEntry(b"./locked", EntryKind.UNREADABLE_DIRECTORY, None, None)]
    with caplog.at_level(logging.WARNING):
        _scan(entries, ScanOptions(quiet=True))
    assert caplog.records == []


def test_path_too_long_aborts_and_tears_down_index():
    created = []

    def factory():
        idx = DedupIndex()
        created.append(idx)
        return idx

    long_path = b"./" + b"x" * MAX_PATH
    entries = [
        WalkEntry(b"./a", EntryKind.FILE, fake_stat(9, 2)),
        WalkEntry(long_path, EntryKind.FILE, fake_stat(9, 2)),
        WalkEntry(b"./never", EntryKind.FILE, fake_stat(9, 2)),
    ]
    with pytest.raises(PathTooLongError):
        _scan(entries, index_factory=factory)
    assert created and created[0].closed


def test_options_reach_the_walk():
    fs = ScriptedFS([])
    ScanService(fs, ScanOptions(follow_symlinks=True, one_filesystem=True)).scan(
        "root", io.BytesIO()
    )
    assert fs.walk_args == (b"root", True, True)


def test_write_failure_is_an_index_stream_error():
    class FullDisk(io.BytesIO):
        def write(self, data):
            raise OSError(28, "No space left on device")

    entries = [
        WalkEntry(b"./a", EntryKind.FILE, fake_stat(11, 2)),
        WalkEntry(b"./b", EntryKind.FILE, fake_stat(11, 2)),
    ]
    with pytest.raises(IndexStreamError, match="No space left on device"):
        ScanService(ScriptedFS(entries)).scan(".", FullDisk())
