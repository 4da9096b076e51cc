# Per-host outcome models.

from dataclasses import dataclass, field
from typing import List, Optional

from .entry import FileRecord
from .share import Share


@dataclass
class OSInfo:
    """Best-effort fingerprint of the remote host."""

    os: str = ""
    domain: str = ""
    name: str = ""

    def describe(self) -> Optional[str]:
        """Human readable fingerprint, or None when nothing is known."""
        if not self.os or self.os.lower() == "unknown":
            return None
        parts = [self.os]
        if self.name and self.domain:
            parts.append(f"(name:{self.name}) (domain:{self.domain})")
        elif self.name:
            parts.append(f"(name:{self.name})")
        return " ".join(parts)


@dataclass
class HostReport:
    """Result of enumerating one target."""

    target: str
    """Target IP or hostname."""

    port: Optional[int] = None
    """Port that produced the share list."""

    shares: List[Share] = field(default_factory=list)
    records: List[FileRecord] = field(default_factory=list)
    os_info: Optional[str] = None

    loot_path: Optional[str] = None
    """Location returned by the persistence sink, if spider results were stored."""

    error: Optional[str] = None
    """Last error message seen while processing the host."""

    fatal: bool = False
    """Processing stopped early because of an unexpected error."""

    @property
    def success(self) -> bool:
        return bool(self.shares) and not self.fatal
