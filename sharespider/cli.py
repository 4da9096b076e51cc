import sys
from typing import List

from .auth import AuthContext
from .config import build_parser, validate_args
from .config_model import EnumerationPolicy
from .engine import process_target
from .engine.async_runner import AsyncConfig, AsyncRunner, aggregate_results
from .output.writer import LootStore
from .smb.connection import SMBTransport
from .utils.console import print_banner, print_summary_table
from .utils.helpers import normalize_targets
from .utils.logging import debug, error, info, set_verbosity, warn


def collect_targets(args) -> List[str]:
    """Gather targets from -t (comma-separated) and --targets-file."""
    targets: List[str] = []
    if args.target:
        targets.extend(t.strip() for t in args.target.split(",") if t.strip())
    if args.targets_file:
        with open(args.targets_file, encoding="utf-8") as f:
            targets.extend(line.strip() for line in f if line.strip())
    return normalize_targets(targets, args.domain or "")


def build_auth(args) -> AuthContext:
    return AuthContext(
        username=args.username or "",
        password=args.password,
        domain=args.domain or "",
        hashes=args.hashes,
        aes_key=getattr(args, "aes_key", None),
        kerberos=args.kerberos,
        dc_ip=args.dc_ip,
        timeout=args.timeout,
    )


def run(args) -> int:
    """Run the scan described by parsed arguments; returns the number of failed hosts."""
    targets = collect_targets(args)
    if not targets:
        error("No targets to scan")
        return 1

    auth = build_auth(args)
    policy = EnumerationPolicy.from_args(args)
    debug(f"Policy: {policy}")
    debug(f"Auth: {auth!r}")
    if auth.is_anonymous:
        info("No credentials supplied - using a null session")

    runner = AsyncRunner(
        AsyncConfig(
            workers=args.threads,
            rate_limit=args.rate_limit,
            loot_dir=args.loot_dir,
        )
    )
    results = runner.run(
        targets,
        process_target,
        transport=SMBTransport(timeout=args.timeout),
        auth=auth,
        policy=policy,
        sink=LootStore(args.loot_dir),
    )

    if not args.no_summary:
        print_summary_table(aggregate_results(results))

    return sum(1 for r in results if not r.success)


def main():
    print_banner()
    ap = build_parser()
    args = ap.parse_args()

    # Set verbosity early
    set_verbosity(args.verbose, args.debug)

    validate_args(args)

    try:
        run(args)
    except KeyboardInterrupt:
        warn("Interrupted by user - queued hosts skipped, unfinished hosts stored nothing")
        sys.exit(130)

