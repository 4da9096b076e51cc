# Logging utilities - delegates to rich console.
#
# Engine modules import from here so that verbosity gating lives in one
# place; the rich console module does the actual printing.

import os

from .console import (
    debug as _debug,
)
from .console import (
    error as _error,
)
from .console import (
    good as _good,
)
from .console import (
    info as _info,
)
from .console import (
    set_verbosity as _set_verbosity,
)
from .console import (
    status as _status,
)
from .console import (
    warn as _warn,
)

_VERBOSE = False
_DEBUG = False


def set_verbosity(verbose: bool, debug_flag: bool):
    """Set verbosity levels for the facade and the console."""
    global _VERBOSE, _DEBUG
    _VERBOSE = verbose
    _DEBUG = debug_flag
    _set_verbosity(verbose, debug_flag)

    if debug_flag:
        os.environ["SHARESPIDER_DEBUG"] = "1"


def status(msg: str):
    """Always print status message."""
    _status(msg)


def good(msg: str, verbose_only: bool = False):
    """Print success message.

    Args:
        msg: Message to print
        verbose_only: If True, only print in verbose mode
    """
    _good(msg, verbose_only=verbose_only)


def warn(msg: str, verbose_only: bool = False):
    """Print warning message.

    Args:
        msg: Message to print
        verbose_only: If True, only print in verbose mode
    """
    _warn(msg, verbose_only=verbose_only)


def error(msg: str):
    """Print error message."""
    _error(msg)


def info(msg: str, verbose_only: bool = False):
    """Print info message.

    Args:
        msg: Message to print
        verbose_only: If True, only print in verbose mode
    """
    _info(msg, verbose_only=verbose_only)


def verror(msg: str):
    """Print an error message only in verbose mode."""
    if _VERBOSE or _DEBUG:
        _error(msg)


def debug(msg: str, exc_info: bool = False):
    """Debug logging - only prints if DEBUG flag is enabled."""
    if _DEBUG or os.getenv("SHARESPIDER_DEBUG"):
        _debug(msg, exc_info=exc_info)
