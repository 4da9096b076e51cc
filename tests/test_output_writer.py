"""
Test suite for the file-based LootStore sink.
"""

import json
import os
import threading

from sharespider.models.report import OSInfo
from sharespider.models.share import Share, ShareType
from sharespider.output.writer import NOTES_FILE, LootStore


def read_notes(outdir):
    with open(os.path.join(outdir, NOTES_FILE), encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


class TestStore:
    """Tests for LootStore.store"""

    def test_writes_csv_file(self, tmp_path):
        store = LootStore(str(tmp_path / "loot"))

        path = store.store("smb.enumshares", "text/csv", "10.0.0.5", "IP Address,Type\n")

        assert os.path.dirname(path) == str(tmp_path / "loot")
        assert path.endswith("_10.0.0.5_smb.enumshares.csv")
        with open(path, encoding="utf-8") as f:
            assert f.read() == "IP Address,Type\n"

    def test_plain_text_extension(self, tmp_path):
        path = LootStore(str(tmp_path)).store("smb.enumshares", "text/plain", "fs01", "x\n")
        assert path.endswith(".txt")

    def test_host_sanitized(self, tmp_path):
        path = LootStore(str(tmp_path)).store("smb.enumshares", "text/plain", "fe80::1", "x")
        assert "fe80__1" in os.path.basename(path)

    def test_concurrent_stores_do_not_collide(self, tmp_path):
        store = LootStore(str(tmp_path))
        paths = []
        lock = threading.Lock()

        def worker(i):
            p = store.store("smb.enumshares", "text/plain", f"host{i}", f"{i}\n")
            with lock:
                paths.append(p)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(paths)) == 8
        assert all(os.path.exists(p) for p in paths)


class TestNotes:
    """Tests for report_shares / report_service"""

    def test_report_shares(self, tmp_path):
        store = LootStore(str(tmp_path))
        shares = [Share("C$", ShareType.DISK, "Default share"), Share("IPC$", ShareType.IPC, "Remote IPC")]

        store.report_shares("10.0.0.5", 445, shares)

        notes = read_notes(store.outdir)
        assert len(notes) == 1
        assert notes[0]["type"] == "smb.shares"
        assert notes[0]["port"] == 445
        assert notes[0]["shares"] == [["C$", "DISK", "Default share"], ["IPC$", "IPC", "Remote IPC"]]

    def test_report_service(self, tmp_path):
        store = LootStore(str(tmp_path))

        store.report_service("10.0.0.5", 139, OSInfo(os="Windows 10", name="WS01"))

        with open(tmp_path / NOTES_FILE, encoding="utf-8") as f:
            note = json.loads(f.readline())
        assert note["type"] == "smb.service"
        assert note["info"] == "Windows 10 (name:WS01)"
        assert note["name"] == "smb"

    def test_notes_append(self, tmp_path):
        store = LootStore(str(tmp_path))
        store.report_shares("a", 139, [])
        store.report_shares("b", 445, [])

        assert [n["host"] for n in read_notes(store.outdir)] == ["a", "b"]
