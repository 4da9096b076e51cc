# Credentials handed to the SMB transport.
#
# AuthContext is built once by the CLI from arguments and TOML defaults
# and shared read-only by every host worker.

from .context import AuthContext

__all__ = ["AuthContext"]
