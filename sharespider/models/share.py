# Share data model.
#
# Shares are decoded once at the protocol boundary from the SHARE_INFO_1
# structures returned by NetrShareEnum and are immutable afterwards.

from dataclasses import dataclass
from enum import Enum

# SHARE_INFO_1.shi1_type layout (MS-SRVS 2.2.2.4)
STYPE_MASK = 0x000000FF
STYPE_DISKTREE = 0x00000000
STYPE_PRINTQ = 0x00000001
STYPE_DEVICE = 0x00000002
STYPE_IPC = 0x00000003
STYPE_TEMPORARY = 0x40000000
STYPE_SPECIAL = 0x80000000


class ShareType(str, Enum):
    """Type of an exposed share."""

    DISK = "DISK"
    TEMPORARY = "TEMPORARY"
    PRINTER = "PRINTER"
    IPC = "IPC"
    DEVICE = "DEVICE"
    SPECIAL = "SPECIAL"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_stype(cls, value: int) -> "ShareType":
        """
        Decode a raw shi1_type value.

        The low byte carries the base type; the high bits are flags. A
        hidden administrative disk such as C$ (0x80000000) is still a DISK.
        """
        base = value & STYPE_MASK
        if base == STYPE_DISKTREE:
            return cls.TEMPORARY if value & STYPE_TEMPORARY else cls.DISK
        if base == STYPE_PRINTQ:
            return cls.PRINTER
        if base == STYPE_DEVICE:
            return cls.DEVICE
        if base == STYPE_IPC:
            return cls.IPC
        if value & STYPE_SPECIAL:
            return cls.SPECIAL
        return cls.UNKNOWN


@dataclass(frozen=True)
class Share:
    """A named, typed resource exposed by the remote host."""

    name: str
    type: ShareType
    comment: str = ""

    def describe(self) -> str:
        """One-line description used when reporting shares."""
        return f"{self.name} - ({self.type.value}) {self.comment}".rstrip()

    def to_report(self) -> list:
        """[name, type, comment] triple handed to the persistence sink."""
        return [self.name, self.type.value, self.comment]
