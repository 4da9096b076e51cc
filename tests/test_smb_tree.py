"""
Test suite for the tree lister and permission reader.
"""

from unittest.mock import MagicMock

import pytest

from conftest import READ_WRITE, dir_entry, file_entry
from sharespider.models.entry import FILE_READ_EA, PermissionFlags
from sharespider.smb.exceptions import ProtocolError, SMBConnectionTimeout
from sharespider.smb.tree import Listing, ListError, TreeHandle, list_tree, read_permissions


@pytest.fixture
def tree():
    return TreeHandle(session=MagicMock(), share_name="data", tree_id=1, maximal_access=READ_WRITE)


class TestListTree:
    """Tests for list_tree"""

    def test_filters_dot_entries_and_keeps_order(self, tree):
        transport = MagicMock()
        transport.list_directory.return_value = [
            dir_entry("."),
            dir_entry(".."),
            file_entry("notes.txt"),
            dir_entry("logs"),
        ]

        listing = list_tree(transport, tree, "")

        assert listing.ok
        assert [e.name for e in listing.entries] == ["notes.txt", "logs"]
        assert listing.access_mask == READ_WRITE
        transport.list_directory.assert_called_once_with(tree, "")

    def test_protocol_error_becomes_list_error(self, tree):
        transport = MagicMock()
        transport.list_directory.side_effect = ProtocolError("Listing failed", "STATUS_ACCESS_DENIED")

        listing = list_tree(transport, tree, "\\secret")

        assert not listing.ok
        assert listing.entries == []
        assert listing.error == ListError(path="\\secret", reason="STATUS_ACCESS_DENIED")

    def test_reason_falls_back_to_message(self, tree):
        transport = MagicMock()
        transport.list_directory.side_effect = ProtocolError("garbled response")

        listing = list_tree(transport, tree, "")

        assert listing.error.reason == "garbled response"

    def test_connection_errors_propagate(self, tree):
        transport = MagicMock()
        transport.list_directory.side_effect = SMBConnectionTimeout("10.0.0.5:445 - Connection timed out")

        with pytest.raises(SMBConnectionTimeout):
            list_tree(transport, tree, "")


class TestReadPermissions:
    """Tests for read_permissions"""

    def test_read_write(self):
        assert read_permissions(Listing(path="", access_mask=READ_WRITE)) == PermissionFlags(True, True)

    def test_read_only(self):
        assert read_permissions(Listing(path="", access_mask=FILE_READ_EA)) == PermissionFlags(True, False)

    def test_nothing(self):
        assert read_permissions(Listing(path="")) == PermissionFlags(False, False)
