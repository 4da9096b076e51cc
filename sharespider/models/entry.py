# Directory listing and spider result models.
#
# DirectoryEntry and PermissionFlags are produced once by the SMB adapter
# and never re-interpreted downstream. PendingPath is a unit of spider work
# and FileRecord is the flattened row accumulated per host.

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from .share import Share

# Access mask bits (MS-SMB2 2.2.13.1.1)
FILE_READ_EA = 0x00000008
FILE_WRITE_EA = 0x00000010

PATH_SEP = "\\"


@dataclass(frozen=True)
class PermissionFlags:
    """Read/write capability of a connected tree."""

    can_read: bool = False
    can_write: bool = False

    @classmethod
    def from_access_mask(cls, mask: int) -> "PermissionFlags":
        return cls(can_read=bool(mask & FILE_READ_EA), can_write=bool(mask & FILE_WRITE_EA))

    def describe(self) -> str:
        if self.can_read and self.can_write:
            return "READ, WRITE"
        if self.can_read:
            return "READ"
        if self.can_write:
            return "WRITE"
        return "NO ACCESS"


@dataclass(frozen=True)
class DirectoryEntry:
    """One entry of a directory listing."""

    name: str
    created: Optional[datetime] = None
    accessed: Optional[datetime] = None
    written: Optional[datetime] = None
    changed: Optional[datetime] = None
    is_directory: bool = False
    size: Optional[int] = None


@dataclass(frozen=True)
class PendingPath:
    """A directory of a share waiting to be listed."""

    share: Share
    relative_path: str = ""

    @property
    def depth(self) -> int:
        return self.relative_path.count(PATH_SEP)

    def child(self, name: str) -> "PendingPath":
        return PendingPath(self.share, self.relative_path + PATH_SEP + name)


def _fmt_time(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else ""


@dataclass(frozen=True)
class FileRecord:
    """
    Flattened metadata for one spidered file or directory.

    Attributes:
        host: Target the record was collected from
        share_name: Share the entry lives on
        path: Parent directory with a trailing backslash (e.g. "\\logs\\")
        name: Full entry name (never truncated)
        type: "DIR" or "FILE"
        created/accessed/written/changed: Entry timestamps
        size: File size in bytes (None for directories)
    """

    host: str
    share_name: str
    path: str
    name: str
    type: str
    created: Optional[datetime] = None
    accessed: Optional[datetime] = None
    written: Optional[datetime] = None
    changed: Optional[datetime] = None
    size: Optional[int] = None

    @property
    def is_directory(self) -> bool:
        return self.type == "DIR"

    @property
    def unc_path(self) -> str:
        """host\\share\\dir\\name form used by the one-liner log."""
        return f"{self.host}{PATH_SEP}{self.share_name}{self.path}{self.name}"

    def to_row(self) -> List[str]:
        """Row matching the spidered results table columns."""
        return [
            self.host,
            self.type,
            self.share_name,
            self.path,
            self.name,
            _fmt_time(self.created),
            _fmt_time(self.accessed),
            _fmt_time(self.written),
            _fmt_time(self.changed),
            "" if self.size is None else str(self.size),
        ]
