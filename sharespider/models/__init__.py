# Data models for sharespider.
#
# This package contains dataclasses and enums for shares, directory
# listings, spider records and per-host reports.

from .entry import DirectoryEntry, FileRecord, PendingPath, PermissionFlags
from .report import HostReport, OSInfo
from .share import Share, ShareType

__all__ = [
    "DirectoryEntry",
    "FileRecord",
    "HostReport",
    "OSInfo",
    "PendingPath",
    "PermissionFlags",
    "Share",
    "ShareType",
]
