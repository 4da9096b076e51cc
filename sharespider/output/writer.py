# File-based persistence sink.
#
# LootStore is the sink the orchestrator reports to: spider results are
# written to one file per host and format, while share and service notes
# are appended as JSON lines to a single notes file. Hosts may report from
# worker threads, so every write happens under a lock.

import json
import os
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List

from ..models.report import OSInfo
from ..models.share import Share
from ..utils.helpers import safe_filename
from ..utils.logging import debug

NOTES_FILE = "notes.jsonl"

_EXTENSIONS = {
    "text/csv": "csv",
    "text/plain": "txt",
    "application/json": "json",
}


class LootStore:
    """
    Persist spider results and host notes under a single output directory.

    Args:
        outdir: Directory to write loot into (created on first write)
    """

    def __init__(self, outdir: str):
        self.outdir = outdir
        self._lock = threading.Lock()

    @property
    def notes_path(self) -> str:
        return os.path.join(self.outdir, NOTES_FILE)

    def _timestamp(self) -> str:
        return datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")

    def store(self, kind: str, mime_type: str, host_key: str, payload: str) -> str:
        """
        Write one loot file and return its path.

        The file is named <timestamp>_<host>_<kind>.<ext>, where the extension
        follows the MIME type (.csv for text/csv, .txt for text/plain).
        """
        ext = _EXTENSIONS.get(mime_type, "bin")
        filename = f"{self._timestamp()}_{safe_filename(host_key)}_{safe_filename(kind)}.{ext}"
        path = os.path.join(self.outdir, filename)

        with self._lock:
            os.makedirs(self.outdir, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(payload)
        debug(f"Stored {kind} ({mime_type}, {len(payload)} bytes) for {host_key} in {path}")
        return path

    def _append_note(self, note: Dict[str, Any]) -> None:
        note = {"time": datetime.now(timezone.utc).isoformat(), **note}
        with self._lock:
            os.makedirs(self.outdir, exist_ok=True)
            with open(self.notes_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(note) + "\n")

    def report_shares(self, host: str, port: int, shares: List[Share]) -> None:
        """Record the share list a host exposed on `port`."""
        self._append_note(
            {
                "type": "smb.shares",
                "host": host,
                "port": port,
                "shares": [share.to_report() for share in shares],
            }
        )

    def report_service(self, host: str, port: int, info: OSInfo) -> None:
        """Record the SMB service and its fingerprint."""
        self._append_note(
            {
                "type": "smb.service",
                "host": host,
                "port": port,
                "proto": "tcp",
                "name": "smb",
                "info": info.describe(),
                "os": info.os,
                "domain": info.domain,
                "server_name": info.name,
            }
        )
