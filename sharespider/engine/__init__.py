# Engine package for share enumeration.
#
# This package provides per-host processing (online), the share walker
# (spider) and the multi-host runner (async_runner).

from .async_runner import AsyncConfig, AsyncRunner, TargetResult, aggregate_results
from .online import RETRY_DELAY, process_target, with_transient_retry
from .spider import resolve_profile_dirs, spider_share, spider_shares

__all__ = [
    "process_target",
    "with_transient_retry",
    "RETRY_DELAY",
    "spider_share",
    "spider_shares",
    "resolve_profile_dirs",
    "AsyncConfig",
    "AsyncRunner",
    "TargetResult",
    "aggregate_results",
]
