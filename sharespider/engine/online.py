# Online processing for live target hosts via SMB.
#
# process_target() drives one host through the candidate ports: connect,
# authenticate, list shares, fingerprint, report and optionally spider.
# The first port that returns a non-empty share list ends the loop. The
# session of every attempt is released on all exit paths, including
# KeyboardInterrupt, which is never swallowed here.

import time
from typing import Callable, Optional, TypeVar

from ..auth import AuthContext
from ..config_model import EnumerationPolicy
from ..models.report import HostReport
from ..output.loot import SpiderResults
from ..smb.connection import CANDIDATE_PORTS
from ..smb.exceptions import (
    SMB_ERRORS,
    AuthenticationError,
    ProtocolError,
    SMBConnectionError,
    TransientResourceError,
)
from ..utils.logging import debug, error, good, info, status, warn
from .spider import spider_shares

T = TypeVar("T")

# Seconds to wait before retrying a connect that failed with ENOPROTOOPT
RETRY_DELAY = 5


def with_transient_retry(
    fn: Callable[[], T],
    *,
    delay: float = RETRY_DELAY,
    retries: int = 1,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call `fn`, retrying after `delay` seconds when it raises TransientResourceError.

    After `retries` retries the last TransientResourceError propagates; it
    is an SMBConnectionError, so callers treat it as a failed port.
    """
    attempt = 0
    while True:
        try:
            return fn()
        except TransientResourceError as e:
            if attempt >= retries:
                raise
            attempt += 1
            warn(f"{e}")
            warn(SMB_ERRORS["retry"].format(delay=delay))
            sleep(delay)


def process_target(
    target: str,
    *,
    transport,
    auth: AuthContext,
    policy: EnumerationPolicy,
    sink,
    sleep: Optional[Callable[[float], None]] = None,
) -> HostReport:
    """
    Enumerate the shares of `target` and spider them if the policy asks for it.

    Args:
        target: Target IP or hostname
        transport: Session/share/tree/fingerprint service (SMBTransport)
        auth: Credentials handed to the transport
        policy: Run-wide enumeration policy
        sink: Persistence sink (store / report_shares / report_service)
        sleep: Override for the retry delay (tests)

    Returns:
        HostReport describing what was found and why processing stopped
    """
    report = HostReport(target=target)
    status(f"[Enumerating] {target}")

    for port, dialects in CANDIDATE_PORTS:
        session = None
        found = False
        try:
            session = with_transient_retry(
                lambda: transport.connect(target, port, dialects),
                sleep=sleep or time.sleep,
            )
            transport.authenticate(session, auth)

            shares = transport.list_shares(session)

            os_info = transport.identify_os(session)
            described = os_info.describe()
            if described:
                report.os_info = described
                info(f"{target}:{port} - {described}")
                sink.report_service(target, port, os_info)

            if not shares:
                status(f"{target}:{port} - No shares available")
                continue

            found = True
            report.port = port
            report.shares = shares

            good(f"{target}:{port} - Found {len(shares)} share(s)")
            for share in shares:
                status(f"    {share.describe()}")
            sink.report_shares(target, port, shares)

            if policy.spider_shares:
                # Fresh accumulator per attempt so a dropped port never leaks partial records
                results = SpiderResults(target)
                spider_shares(transport, session, target, shares, policy, results)
                report.records = list(results.records)
                report.loot_path = results.flush(sink, policy.log_format)

        except SMBConnectionError as e:
            warn(f"{e}")
            report.error = str(e)
        except AuthenticationError as e:
            error(f"{target}:{port} - {e}")
            report.error = str(e)
        except ProtocolError as e:
            error(f"{target}:{port} - " + SMB_ERRORS["share_enum"].format(status=e.status or e))
            report.error = str(e)
        except Exception as e:  # noqa: BLE001 - unexpected failures end this host only
            error(f"{target}:{port} - Unexpected error: {e}")
            debug(f"{target}: traceback follows", exc_info=True)
            report.error = str(e)
            report.fatal = True
            break
        finally:
            transport.disconnect(session)

        # A port that listed shares ends the walk even if spidering broke off
        if found:
            break

    if not report.shares and not report.fatal:
        debug(f"{target}: no port returned any share")
    return report
