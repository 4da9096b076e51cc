# Share spidering.
#
# spider_share() walks a single share breadth-first from an explicit queue of
# PendingPaths. Each popped directory is listed once; every entry becomes a
# FileRecord and subdirectories go to the back of the queue. A path that
# cannot be listed (error, empty or unreadable) is dropped and the walk goes
# on. Drive shares (C$..Z$) under the profiles-only policy are seeded from
# the user profile directories instead of the root.

from collections import deque
from typing import Deque, List

from ..classification import (
    DOCUMENTS_DIR,
    PROFILE_ROOTS,
    USERS_DIR,
    is_default_share,
    should_spider,
    skip_reason,
)
from ..config_model import EnumerationPolicy
from ..models.entry import FileRecord, PendingPath, PermissionFlags
from ..models.share import Share
from ..output.loot import SpiderResults
from ..output.printer import directory_header, format_directory_table
from ..smb.exceptions import SMB_ERRORS, ProtocolError
from ..smb.tree import TreeHandle, list_tree, read_permissions
from ..utils.console import print_table
from ..utils.logging import debug, good, status, verror, warn

# Depth of "\Users\<profile>" seeds relative to the share root
PROFILE_SEED_DEPTH = 2


def resolve_profile_dirs(transport, tree: TreeHandle, share: Share) -> List[PendingPath]:
    """
    Find the user profile directories of a drive share.

    Lists \\Users first and falls back to \\Documents and Settings when the
    modern location gives nothing usable (error, unreadable or empty).

    Returns:
        One PendingPath per profile directory, e.g. "\\Users\\bob"
    """
    for base in (USERS_DIR, DOCUMENTS_DIR):
        listing = list_tree(transport, tree, base)
        if not listing.ok:
            debug(f"{share.name}{base}: {listing.error.reason}")
            continue
        if not read_permissions(listing).can_read or not listing.entries:
            continue
        return [PendingPath(share, f"{base}\\{entry.name}") for entry in listing.entries]
    return []


def _seed(transport, tree: TreeHandle, share: Share, policy: EnumerationPolicy) -> List[PendingPath]:
    if is_default_share(share.name) and policy.spider_profiles_only:
        return resolve_profile_dirs(transport, tree, share)
    return [PendingPath(share)]


def _discard(pending: PendingPath, policy: EnumerationPolicy) -> bool:
    # Profile roots are left alone when profiles are not the target
    if pending.relative_path in PROFILE_ROOTS and not policy.spider_profiles_only:
        return True
    # Seeds start at depth 2, so the bound is relative to the profile dir
    if is_default_share(pending.share.name) and policy.spider_profiles_only:
        return pending.depth - PROFILE_SEED_DEPTH > policy.max_depth
    return False


def spider_share(
    transport,
    session,
    host: str,
    share: Share,
    policy: EnumerationPolicy,
    results: SpiderResults,
) -> int:
    """
    Walk one share and append a FileRecord per discovered entry to `results`.

    Args:
        transport: Tree service (open_tree / list_directory / close_tree)
        session: Authenticated session the tree is opened on
        host: Target the records are attributed to
        share: Share to walk
        policy: Run-wide enumeration policy
        results: Per-host accumulator

    Returns:
        Number of records added for this share
    """
    try:
        tree = transport.open_tree(session, share.name)
    except ProtocolError as e:
        warn(f"{host}: " + SMB_ERRORS["tree_connect"].format(share=share.name, status=e.status or e))
        return 0

    added = 0
    try:
        if not policy.show_files:
            access = PermissionFlags.from_access_mask(tree.maximal_access).describe()
            status(f"[Spidering] {host}\\{share.name} ({access})")

        queue: Deque[PendingPath] = deque(_seed(transport, tree, share, policy))
        while queue:
            pending = queue.popleft()
            if _discard(pending, policy):
                debug(f"{host}: not descending into {share.name}{pending.relative_path}")
                continue

            listing = list_tree(transport, tree, pending.relative_path)
            if not listing.ok:
                message = SMB_ERRORS["list"].format(
                    share=share.name,
                    path=pending.relative_path.lstrip("\\"),
                    status=listing.error.reason,
                )
                verror(f"{host}: {message}")
                continue
            if not listing.entries or not read_permissions(listing).can_read:
                continue

            directory_records = []
            for entry in listing.entries:
                if entry.is_directory:
                    queue.append(pending.child(entry.name))
                record = FileRecord(
                    host=host,
                    share_name=share.name,
                    path=pending.relative_path + "\\",
                    name=entry.name,
                    type="DIR" if entry.is_directory else "FILE",
                    created=entry.created,
                    accessed=entry.accessed,
                    written=entry.written,
                    changed=entry.changed,
                    size=None if entry.is_directory else entry.size,
                )
                results.add(record)
                directory_records.append(record)

            added += len(directory_records)
            if policy.show_files:
                header = directory_header(host, share.name, pending.relative_path)
                print_table(format_directory_table(header, directory_records))
    finally:
        transport.close_tree(tree)

    if not policy.show_files:
        good(f"{host}: Spidering {share.name} complete ({added} entries)")
    return added


def spider_shares(
    transport,
    session,
    host: str,
    shares: List[Share],
    policy: EnumerationPolicy,
    results: SpiderResults,
) -> int:
    """Spider every eligible share of a host in listing order; returns the record count."""
    total = 0
    for share in shares:
        if not should_spider(share, policy):
            status(f"{host}: {skip_reason(share, policy)}")
            continue
        total += spider_share(transport, session, host, share, policy, results)
    return total
