# Helpers for listing directories of a connected share.
#
# A listing failure is returned as a value rather than raised: the spider
# treats a ListError as "no entries" for that path and keeps draining its
# queue, so one permission issue doesn't abort the entire walk.

from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..models.entry import DirectoryEntry, PermissionFlags
from .exceptions import ProtocolError


@dataclass
class TreeHandle:
    """A connection to one share, owned by a single spider invocation."""

    session: Any
    share_name: str
    tree_id: Any = None
    maximal_access: int = 0


@dataclass(frozen=True)
class ListError:
    """Why a directory could not be listed."""

    path: str
    reason: str


@dataclass
class Listing:
    """Normalized result of one directory listing call."""

    path: str
    entries: List[DirectoryEntry] = field(default_factory=list)
    access_mask: int = 0
    error: Optional[ListError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def read_permissions(listing: Listing) -> PermissionFlags:
    """Read/write capability of the tree a listing came from."""
    return PermissionFlags.from_access_mask(listing.access_mask)


def list_tree(transport, tree: TreeHandle, path: str) -> Listing:
    # List `path` on `tree` with exactly one transport call.
    #
    # Protocol-level failures come back as Listing.error; connection-level
    # failures (timeouts, resets) still raise since they end the port attempt.
    # The '.' and '..' pseudo-entries are dropped, server order is kept.
    try:
        raw = transport.list_directory(tree, path)
    except ProtocolError as e:
        return Listing(
            path=path,
            access_mask=tree.maximal_access,
            error=ListError(path=path, reason=e.status or str(e)),
        )

    entries = [entry for entry in raw if entry.name not in (".", "..")]
    return Listing(path=path, entries=entries, access_mask=tree.maximal_access)
