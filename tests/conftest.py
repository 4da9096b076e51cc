"""
Pytest configuration and shared fixtures for sharespider tests.

The fake transport serves a directory tree from a dict keyed by
(share_name, relative_path), so engine tests never touch the network.
"""

from datetime import datetime, timezone

import pytest

from sharespider.config_model import EnumerationPolicy, LogFormat
from sharespider.models.entry import FILE_READ_EA, FILE_WRITE_EA, DirectoryEntry
from sharespider.models.report import OSInfo
from sharespider.models.share import Share, ShareType
from sharespider.smb.exceptions import ProtocolError
from sharespider.smb.tree import TreeHandle
from sharespider.utils.logging import set_verbosity

FIXED_TIME = datetime(2023, 1, 15, 10, 30, tzinfo=timezone.utc)

READ_WRITE = FILE_READ_EA | FILE_WRITE_EA


def make_entry(name, is_dir=False, size=0):
    """Build a DirectoryEntry with fixed timestamps."""
    return DirectoryEntry(
        name=name,
        created=FIXED_TIME,
        accessed=FIXED_TIME,
        written=FIXED_TIME,
        changed=None,
        is_directory=is_dir,
        size=None if is_dir else size,
    )


def dir_entry(name):
    return make_entry(name, is_dir=True)


def file_entry(name, size=0):
    return make_entry(name, size=size)


@pytest.fixture(autouse=True)
def reset_verbosity(monkeypatch):
    """Start every test with quiet output and no debug env flag."""
    monkeypatch.delenv("SHARESPIDER_DEBUG", raising=False)
    set_verbosity(False, False)
    yield
    set_verbosity(False, False)


@pytest.fixture
def policy():
    """Spidering enabled, profiles-only, default depth."""
    return EnumerationPolicy(spider_shares=True, log_format=LogFormat.ONELINE)


@pytest.fixture
def disk_share():
    return Share("data", ShareType.DISK, "Team data")


@pytest.fixture
def make_transport(mocker):
    """
    Factory for a MagicMock transport backed by an in-memory tree.

    Args (of the returned factory):
        tree: {(share_name, path): [DirectoryEntry, ...]}; missing paths
              raise STATUS_OBJECT_NAME_NOT_FOUND
        access: access mask reported for every opened tree
        list_errors: {(share_name, path): status} raised as ProtocolError
        open_errors: share names whose tree connect is refused
        shares: share list returned by list_shares
    """

    def _make(tree=None, access=READ_WRITE, list_errors=None, open_errors=(), shares=None):
        tree = tree or {}
        list_errors = list_errors or {}
        transport = mocker.MagicMock()

        def open_tree(session, share_name):
            if share_name in open_errors:
                raise ProtocolError(f"Tree connect to {share_name} failed", "STATUS_ACCESS_DENIED")
            return TreeHandle(session=session, share_name=share_name, tree_id=1, maximal_access=access)

        def list_directory(handle, path):
            key = (handle.share_name, path)
            if key in list_errors:
                raise ProtocolError(f"Listing {path} failed", list_errors[key])
            if key not in tree:
                raise ProtocolError(f"Listing {path} failed", "STATUS_OBJECT_NAME_NOT_FOUND")
            return [dir_entry("."), dir_entry("..")] + list(tree[key])

        transport.open_tree.side_effect = open_tree
        transport.list_directory.side_effect = list_directory
        transport.list_shares.return_value = list(shares or [])
        transport.identify_os.return_value = OSInfo()
        return transport

    return _make


@pytest.fixture
def sink(mocker):
    """MagicMock persistence sink whose store() returns a fixed path."""
    mock_sink = mocker.MagicMock()
    mock_sink.store.return_value = "/loot/host_smb.enumshares.txt"
    return mock_sink
