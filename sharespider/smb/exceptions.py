# SMB enumeration exceptions.
#
# The transport adapter translates impacket and socket errors into this
# hierarchy so that callers can decide, per call site, whether a failure
# ends the port attempt, the share, or just one directory.

# =============================================================================
# Exceptions
# =============================================================================


class ShareEnumError(Exception):
    """Base exception for share enumeration"""

    pass


class SMBConnectionError(ShareEnumError):
    """Could not establish or keep the transport (reset, refused, bad negotiation)"""

    pass


class SMBConnectionTimeout(SMBConnectionError):
    """A connect or protocol call timed out"""

    pass


class TransientResourceError(SMBConnectionError):
    """Protocol option exhaustion on the local socket (ENOPROTOOPT), worth one retry"""

    pass


class AuthenticationError(ShareEnumError):
    """Login was rejected by the remote host"""

    pass


class ProtocolError(ShareEnumError):
    """The remote host answered with a non-success status or a malformed packet"""

    def __init__(self, message: str, status: str = ""):
        super().__init__(message)
        self.status = status


# =============================================================================
# Error Messages
# =============================================================================

SMB_ERRORS = {
    "share_enum": "Error when trying to enumerate shares - {status}",
    "tree_connect": "Error when trying to connect to share {share} - {status}",
    "list": "Error when trying to list tree contents in {share}\\{path} - {status}",
    "retry": "Wait {delay} seconds before retrying...",
}
