# Share classification logic.
#
# Decides, from the share type and name alone, whether a share is worth
# spidering. Everything here is pure: no I/O and no logging.

from enum import Enum

from .config_model import EnumerationPolicy
from .models.share import Share, ShareType


class ShareClass(str, Enum):
    """Enumeration outcome for a share type."""

    ENUMERABLE = "ENUMERABLE"
    SKIPPABLE = "SKIPPABLE"
    UNKNOWN = "UNKNOWN"


_SHARE_CLASSES = {
    ShareType.DISK: ShareClass.ENUMERABLE,
    ShareType.TEMPORARY: ShareClass.ENUMERABLE,
    ShareType.PRINTER: ShareClass.SKIPPABLE,
    ShareType.IPC: ShareClass.SKIPPABLE,
    ShareType.DEVICE: ShareClass.SKIPPABLE,
    ShareType.SPECIAL: ShareClass.SKIPPABLE,
    ShareType.UNKNOWN: ShareClass.UNKNOWN,
}

# Administrative shares that are never spidered
SKIPPABLE_SHARES = frozenset({"ADMIN$", "IPC$"})

# Drive shares exposed by default on Windows hosts
DEFAULT_SHARES = frozenset(f"{chr(letter)}$" for letter in range(ord("C"), ord("Z") + 1))

# Windows 7+ share holding the user profiles
USERS_SHARE = "Users"

# Profile roots on a drive share (modern first, then XP-era)
USERS_DIR = "\\Users"
DOCUMENTS_DIR = "\\Documents and Settings"
PROFILE_ROOTS = (USERS_DIR, DOCUMENTS_DIR)


def classify(share_type: ShareType) -> ShareClass:
    """Map a share type to ENUMERABLE, SKIPPABLE or UNKNOWN."""
    if not isinstance(share_type, ShareType):
        return ShareClass.UNKNOWN
    return _SHARE_CLASSES.get(share_type, ShareClass.UNKNOWN)


def is_enumerable(share: Share) -> bool:
    return classify(share.type) is ShareClass.ENUMERABLE


def is_default_share(share_name: str) -> bool:
    """True for the C$..Z$ drive shares."""
    return share_name.strip().upper() in DEFAULT_SHARES


def is_excluded(share_name: str, policy: EnumerationPolicy) -> bool:
    """
    True for shares that are never spidered regardless of their type.

    ADMIN$ and IPC$ are always excluded; the Users share is excluded
    unless profile spidering is enabled.
    """
    name = share_name.strip()
    if name.upper() in SKIPPABLE_SHARES:
        return True
    return name.lower() == USERS_SHARE.lower() and not policy.spider_profiles_only


def should_spider(share: Share, policy: EnumerationPolicy) -> bool:
    """A share is seeded only if its type is enumerable and it is not excluded."""
    return is_enumerable(share) and not is_excluded(share.name, policy)


def skip_reason(share: Share, policy: EnumerationPolicy) -> str:
    """Diagnostic explaining why should_spider() rejected a share."""
    share_class = classify(share.type)
    if share_class is ShareClass.UNKNOWN:
        return f"Skipping share {share.name} as it is of an unhandled type ({share.type.value})"
    if share_class is ShareClass.SKIPPABLE:
        return f"Skipping share {share.name} as it is of type {share.type.value}"
    return f"Skipping {share.name}"
