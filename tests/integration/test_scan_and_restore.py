import io
import os
import shutil
from pathlib import Path

from linkindex.adapters.filesystem.local_fs import LocalFS
from linkindex.codec import decode_record
from linkindex.services import RestoreService, ScanService


def write_file(p: Path, data: bytes) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data)


def build_tree(root: Path) -> dict:
    """
    Three hardlink groups (sizes 3, 2 and 2) plus one unlinked file.
    Returns the groups as lists of paths relative to the parent of `root`.
    """
    write_file(root / "a.txt", b"group one\n")
    write_file(root / "solo.txt", b"single link\n")
    write_file(root / "x" / "p", b"group two\n")
    write_file(root / 'odd "name"\\with\nnewline', b"group three\n")

    (root / "nested").mkdir()
    os.link(root / "a.txt", root / "nested" / "b.txt")
    os.link(root / "a.txt", root / "c.txt")
    os.link(root / "x" / "p", root / "y")
    os.link(root / 'odd "name"\\with\nnewline', root / "x" / "q")

    def rel(*parts: str) -> str:
        return os.path.join(root.name, *parts)

    return {
        "one": {rel("a.txt"), rel("nested", "b.txt"), rel("c.txt")},
        "two": {rel("x", "p"), rel("y")},
        "three": {rel('odd "name"\\with\nnewline'), rel("x", "q")},
    }


def scan_bytes(root) -> bytes:
    out = io.BytesIO()
    ScanService(LocalFS()).scan(root, out)
    return out.getvalue()


def test_scan_emits_one_record_per_duplicate(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    groups = build_tree(tmp_path / "data")

    out = scan_bytes("data")
    lines = out.splitlines(keepends=True)
    assert len(lines) == sum(len(g) - 1 for g in groups.values()) == 4

    records = [decode_record(line)[0] for line in lines]
    for rec in records:
        src, dst = os.fsdecode(rec.source), os.fsdecode(rec.destination)
        assert any(src in g and dst in g for g in groups.values())
        assert os.lstat(src).st_ino == os.lstat(dst).st_ino
    assert b"solo.txt" not in out


def test_rescan_is_byte_identical(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    build_tree(tmp_path / "data")
    assert scan_bytes("data") == scan_bytes("data")


def test_restore_rebuilds_links_in_a_copy(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    groups = build_tree(tmp_path / "data")
    index = scan_bytes("data")

    # A plain copy loses every hardlink, like an archive that dropped them.
    target = tmp_path / "restored"
    shutil.copytree(tmp_path / "data", target / "data")
    for group in groups.values():
        inodes = {os.lstat(target / p).st_ino for p in group}
        assert len(inodes) == len(group)

    summary = RestoreService(LocalFS()).restore(io.BytesIO(index), target)

    assert summary.linked == 4 and summary.failed == 0
    for group in groups.values():
        inodes = {os.lstat(target / p).st_ino for p in group}
        assert len(inodes) == 1
    assert os.lstat(target / "data" / "solo.txt").st_nlink == 1
