# SMB connection helpers.
#
# Thin adapter around Impacket's SMBConnection exposing exactly the calls
# the enumeration engine needs: connect on a given port and dialect set,
# authenticate, list shares, open/list/close trees and fingerprint the
# host. Impacket and socket exceptions are translated into the
# sharespider error taxonomy here so the engine never sees raw impacket
# errors.

import errno
import socket
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from impacket.dcerpc.v5.rpcrt import DCERPCException
from impacket.krb5.kerberosv5 import KerberosError
from impacket.nmb import NetBIOSError, NetBIOSTimeout
from impacket.nt_errors import ERROR_MESSAGES
from impacket.smb import SMB_DIALECT
from impacket.smb3structs import (
    FILE_DIRECTORY_FILE,
    FILE_OPEN,
    FILE_READ_EA,
    FILE_SHARE_DELETE,
    FILE_SHARE_READ,
    FILE_SHARE_WRITE,
    FILE_WRITE_EA,
)
from impacket.smbconnection import SessionError, SMBConnection

from ..auth import AuthContext
from ..models.entry import DirectoryEntry
from ..models.report import OSInfo
from ..models.share import Share, ShareType
from ..utils.helpers import is_ipv4
from ..utils.logging import debug
from .exceptions import (
    AuthenticationError,
    ProtocolError,
    SMBConnectionError,
    SMBConnectionTimeout,
    TransientResourceError,
)
from .tree import TreeHandle

SMB1_PORT = 139
SMB2_3_PORT = 445

# Candidate (port, dialects) pairs in the order they are attempted
CANDIDATE_PORTS = (
    (SMB1_PORT, (1,)),
    (SMB2_3_PORT, (1, 2, 3)),
)


def status_name(err: SessionError) -> str:
    # Map an impacket SessionError to its NT status name (STATUS_ACCESS_DENIED, ...).
    code = err.getErrorCode()
    entry = ERROR_MESSAGES.get(code)
    if entry:
        return entry[0]
    return f"0x{code:08x}" if isinstance(code, int) else str(code)


def _connection_error(err: Exception, host: str, port: int) -> SMBConnectionError:
    # Classify a socket/NetBIOS level failure.
    if isinstance(err, (NetBIOSTimeout, socket.timeout, TimeoutError)):
        return SMBConnectionTimeout(f"{host}:{port} - Connection timed out")
    if isinstance(err, OSError) and err.errno == errno.ENOPROTOOPT:
        return TransientResourceError(f"{host}:{port} - {err}")
    if isinstance(err, ConnectionResetError):
        return SMBConnectionError(f"{host}:{port} - Connection reset by peer")
    return SMBConnectionError(f"{host}:{port} - {err}")


def _peer(session: SMBConnection):
    # (host, port) of an open session, for error messages.
    return session.getRemoteHost(), getattr(session, "_sess_port", "?")


def _to_datetime(epoch: float) -> Optional[datetime]:
    # FILETIME 0 converts to a negative epoch; treat it as "not set".
    if epoch is None or epoch <= 0:
        return None
    try:
        return datetime.fromtimestamp(epoch, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _strip_nul(value) -> str:
    if value is None:
        return ""
    return str(value).rstrip("\x00").strip()


class SMBTransport:
    """
    Impacket-backed implementation of the session, share, tree and
    fingerprint services used by the enumeration engine.

    Sessions are plain SMBConnection objects; trees are TreeHandle objects.
    """

    def __init__(self, timeout: int = 10):
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def connect(self, host: str, port: int, dialects: Sequence[int]) -> SMBConnection:
        """
        Open a transport to `host:port` and negotiate a dialect.

        A dialect set of (1,) forces SMB1; anything wider lets impacket
        negotiate the best dialect the server offers.

        Raises:
            SMBConnectionError: (or a subclass) on any transport failure
        """
        preferred = SMB_DIALECT if tuple(dialects) == (1,) else None
        # NetBIOS session service needs a name; *SMBSERVER is accepted by Windows
        remote_name = "*SMBSERVER" if port == SMB1_PORT and is_ipv4(host) else host

        debug(f"{host}: connecting on {port} (dialects {list(dialects)})")
        try:
            return SMBConnection(
                remoteName=remote_name,
                remoteHost=host,
                sess_port=port,
                timeout=self.timeout,
                preferredDialect=preferred,
            )
        except SessionError as e:
            raise SMBConnectionError(f"{host}:{port} - Negotiation failed ({status_name(e)})") from e
        except (NetBIOSError, OSError) as e:
            raise _connection_error(e, host, port) from e

    def authenticate(self, session: SMBConnection, auth: AuthContext) -> None:
        """
        Authenticate an existing SMBConnection.

        Raises:
            AuthenticationError: when the credentials are rejected
            SMBConnectionError: when the transport drops during login
        """
        lmhash, nthash = auth.ntlm_hashes()
        try:
            if auth.use_kerberos:
                session.kerberosLogin(
                    user=auth.username,
                    password=auth.password or "",
                    domain=auth.domain,
                    lmhash=lmhash,
                    nthash=nthash,
                    aesKey=auth.aes_key or "",
                    kdcHost=auth.dc_ip,
                )
            elif lmhash or nthash:
                # When presenting hashes to SMB, the cleartext password is empty
                session.login(auth.username, "", auth.domain, lmhash=lmhash, nthash=nthash)
            else:
                session.login(auth.username, auth.password or "", auth.domain)
        except SessionError as e:
            raise AuthenticationError(f"Login failed: {status_name(e)}") from e
        except KerberosError as e:
            raise AuthenticationError(f"Kerberos login failed: {e}") from e
        except (NetBIOSError, OSError) as e:
            raise _connection_error(e, *_peer(session)) from e

    def disconnect(self, session: Optional[SMBConnection]) -> None:
        """Release the session; never raises."""
        if session is None:
            return
        try:
            session.close()
        except Exception as e:  # noqa: BLE001 - teardown of a possibly dead socket
            debug(f"Error while closing SMB session: {e}")

    # ------------------------------------------------------------------
    # Share directory service
    # ------------------------------------------------------------------

    def list_shares(self, session: SMBConnection) -> List[Share]:
        """
        Enumerate shares via SRVSVC NetrShareEnum.

        Raises:
            ProtocolError: on a non-success status or a malformed answer
        """
        try:
            raw_shares = session.listShares()
        except SessionError as e:
            raise ProtocolError(f"Share enumeration failed: {status_name(e)}", status_name(e)) from e
        except DCERPCException as e:
            raise ProtocolError(f"Invalid response to share enumeration: {e}", str(e)) from e
        except (NetBIOSError, OSError) as e:
            raise _connection_error(e, *_peer(session)) from e

        shares = []
        for raw in raw_shares:
            shares.append(
                Share(
                    name=_strip_nul(raw["shi1_netname"]),
                    type=ShareType.from_stype(int(raw["shi1_type"])),
                    comment=_strip_nul(raw["shi1_remark"]),
                )
            )
        return shares

    # ------------------------------------------------------------------
    # Tree service
    # ------------------------------------------------------------------

    def open_tree(self, session: SMBConnection, share_name: str) -> TreeHandle:
        """
        Connect to a share and probe the caller's access on its root.

        Raises:
            ProtocolError: when the tree connect is refused
        """
        try:
            tree_id = session.connectTree(share_name)
        except SessionError as e:
            raise ProtocolError(f"Tree connect to {share_name} failed: {status_name(e)}", status_name(e)) from e
        except (NetBIOSError, OSError) as e:
            raise _connection_error(e, *_peer(session)) from e

        mask = 0
        for access in (FILE_READ_EA, FILE_WRITE_EA):
            if self._probe_access(session, tree_id, access):
                mask |= access
        return TreeHandle(session=session, share_name=share_name, tree_id=tree_id, maximal_access=mask)

    def _probe_access(self, session: SMBConnection, tree_id: int, access: int) -> bool:
        # Open the share root with a single access right; success means granted.
        root = "\\" if session.getDialect() == SMB_DIALECT else ""
        try:
            file_id = session.openFile(
                tree_id,
                root,
                desiredAccess=access,
                shareMode=FILE_SHARE_READ | FILE_SHARE_WRITE | FILE_SHARE_DELETE,
                creationOption=FILE_DIRECTORY_FILE,
                creationDisposition=FILE_OPEN,
                fileAttributes=0,
            )
        except SessionError as e:
            debug(f"Access probe 0x{access:x} denied: {status_name(e)}")
            return False
        try:
            session.closeFile(tree_id, file_id)
        except SessionError as e:
            debug(f"Closing access probe handle failed: {status_name(e)}")
        return True

    def close_tree(self, tree: Optional[TreeHandle]) -> None:
        """Disconnect a tree; never raises."""
        if tree is None:
            return
        try:
            tree.session.disconnectTree(tree.tree_id)
        except Exception as e:  # noqa: BLE001 - best-effort release
            debug(f"Error while disconnecting tree {tree.share_name}: {e}")

    def list_directory(self, tree: TreeHandle, path: str) -> List[DirectoryEntry]:
        """
        List one directory of a connected tree.

        `path` is relative to the share root ("" for the root, "\\Users\\bob"
        for a subdirectory). Entries are returned in server order, including
        the '.' and '..' pseudo-entries.

        Raises:
            ProtocolError: on a non-success status
            SMBConnectionError: when the transport fails mid-call
        """
        pattern = path.strip("\\")
        pattern = pattern + "\\*" if pattern else "*"
        try:
            raw_entries = tree.session.listPath(tree.share_name, pattern)
        except SessionError as e:
            raise ProtocolError(f"Listing {tree.share_name}\\{pattern} failed: {status_name(e)}", status_name(e)) from e
        except (NetBIOSError, OSError) as e:
            raise _connection_error(e, *_peer(tree.session)) from e

        entries = []
        for f in raw_entries:
            is_dir = bool(f.is_directory())
            entries.append(
                DirectoryEntry(
                    name=f.get_longname(),
                    created=_to_datetime(f.get_ctime_epoch()),
                    accessed=_to_datetime(f.get_atime_epoch()),
                    written=_to_datetime(f.get_mtime_epoch()),
                    # impacket's SharedFile does not carry ChangeTime
                    changed=None,
                    is_directory=is_dir,
                    size=None if is_dir else f.get_filesize(),
                )
            )
        return entries

    # ------------------------------------------------------------------
    # Fingerprint service
    # ------------------------------------------------------------------

    def identify_os(self, session: SMBConnection) -> OSInfo:
        """Best-effort OS fingerprint from the negotiate/session setup data."""
        try:
            return OSInfo(
                os=_strip_nul(session.getServerOS()),
                domain=_strip_nul(session.getServerDomain()),
                name=_strip_nul(session.getServerName()),
            )
        except Exception as e:  # noqa: BLE001 - fingerprinting is optional
            debug(f"OS fingerprint unavailable: {e}")
            return OSInfo()
