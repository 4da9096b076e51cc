# Parallel processing for multi-target scanning.
#
# ThreadPoolExecutor-based fan-out over hosts. Uses threading (not asyncio)
# because impacket SMB calls are blocking I/O.
#
# Thread-safety considerations:
# - Each host gets its own session, queue and SpiderResults
# - LootStore serializes file writes with a lock
# - Rich console output goes through the console lock

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from ..models.report import HostReport
from ..utils.console import console, info, print_scan_complete, warn


@dataclass
class AsyncConfig:
    """Configuration for parallel processing."""

    workers: int = 1
    """Number of concurrent worker threads (1 = sequential)."""

    rate_limit: Optional[float] = None
    """Maximum targets per second. None = unlimited."""

    show_progress: bool = True
    """Show progress bar during processing."""

    loot_dir: Optional[str] = None
    """Loot directory shown in the completion summary."""


@dataclass
class TargetResult:
    """Result from processing a single target."""

    target: str
    """Target IP or hostname."""

    success: bool
    """Whether at least one share was listed without a fatal error."""

    report: Optional[HostReport] = None
    """Full per-host report, if processing returned one."""

    error: Optional[str] = None
    """Error message if processing failed."""

    elapsed_ms: float = 0.0
    """Processing time in milliseconds."""

    files: int = field(default=0)
    """Number of spidered records."""


class AsyncRunner:
    """
    Parallel share scanner using ThreadPoolExecutor.

    Usage:
        runner = AsyncRunner(config=AsyncConfig(workers=20))
        results = runner.run(targets, process_target, transport=..., auth=..., policy=..., sink=...)

    The process_fn should have the signature:
        def process_fn(target: str, **kwargs) -> HostReport
    """

    def __init__(self, config: Optional[AsyncConfig] = None):
        self.config = config or AsyncConfig()
        self._rate_semaphore: Optional[threading.Semaphore] = None
        self._rate_thread: Optional[threading.Thread] = None
        self._stop_rate_limiter = threading.Event()

        # Statistics
        self._succeeded = 0
        self._failed = 0
        self._lock = threading.Lock()

    def _start_rate_limiter(self) -> None:
        """Start background thread that releases rate limiter tokens."""
        if self.config.rate_limit is None or self.config.rate_limit <= 0:
            return

        # Semaphore starts empty; background thread adds tokens at rate_limit/sec
        self._rate_semaphore = threading.Semaphore(0)
        self._stop_rate_limiter.clear()

        def token_generator():
            interval = 1.0 / self.config.rate_limit
            while not self._stop_rate_limiter.is_set():
                self._rate_semaphore.release()
                time.sleep(interval)

        self._rate_thread = threading.Thread(target=token_generator, daemon=True)
        self._rate_thread.start()

    def _stop_rate_limiter_thread(self) -> None:
        if self._rate_thread:
            self._stop_rate_limiter.set()
            self._rate_thread.join(timeout=1.0)
            self._rate_thread = None
            self._rate_semaphore = None

    def _acquire_rate_token(self) -> None:
        if self._rate_semaphore:
            self._rate_semaphore.acquire()

    def _new_progress(self) -> Progress:
        return Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]Scanning[/]"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TextColumn("│"),
            TimeRemainingColumn(),
            TextColumn("[dim]{task.fields[status]}[/]"),
            console=console,
            transient=False,
            disable=not self.config.show_progress,
        )

    def _process_single(self, target: str, process_fn: Callable, kwargs: Dict[str, Any]) -> TargetResult:
        """
        Process a single target with rate limiting and error handling.

        KeyboardInterrupt is not caught so an interrupted run stops.
        """
        self._acquire_rate_token()

        start_time = time.perf_counter()
        result = TargetResult(target=target, success=False)
        try:
            report: HostReport = process_fn(target=target, **kwargs)
            result.report = report
            result.success = report.success
            result.files = len(report.records)
            if not report.success:
                result.error = report.error or "No shares found"
        except Exception as e:  # noqa: BLE001 - one host must not stop the run
            result.error = str(e)
            warn(f"{target}: Processing failed: {e}")

        result.elapsed_ms = (time.perf_counter() - start_time) * 1000

        with self._lock:
            if result.success:
                self._succeeded += 1
            else:
                self._failed += 1
        return result

    @staticmethod
    def _status_text(result: TargetResult) -> str:
        if result.success:
            return f"[green][+][/] {result.target} ({result.files} files)"
        error_short = (result.error or "Error")[:30]
        return f"[red][-][/] {result.target}: {error_short}"

    def run(self, targets: List[str], process_fn: Callable, **kwargs) -> List[TargetResult]:
        """
        Process multiple targets in parallel.

        Args:
            targets: List of target IPs or hostnames
            process_fn: Function processing one target, returning a HostReport
            **kwargs: Additional arguments passed to process_fn

        Returns:
            List of TargetResult objects (completion order; input order when sequential)
        """
        if not targets:
            return []

        self._succeeded = 0
        self._failed = 0
        start_time = time.perf_counter()

        if self.config.workers <= 1:
            results = self._run_sequential(targets, process_fn, kwargs)
        else:
            results = self._run_parallel(targets, process_fn, kwargs)

        total_time = time.perf_counter() - start_time
        avg_time = (total_time / len(targets)) * 1000
        print_scan_complete(self._succeeded, self._failed, total_time, avg_time, self.config.loot_dir)
        return results

    def _run_parallel(self, targets: List[str], process_fn: Callable, kwargs: Dict[str, Any]) -> List[TargetResult]:
        results: List[TargetResult] = []

        info(f"Starting parallel scan: {len(targets)} targets, {self.config.workers} workers")
        if self.config.rate_limit:
            info(f"Rate limit: {self.config.rate_limit} targets/second")

        self._start_rate_limiter()
        progress = self._new_progress()
        try:
            with progress:
                task_id = progress.add_task("Scanning", total=len(targets), status="")
                executor = ThreadPoolExecutor(max_workers=self.config.workers)
                try:
                    futures = {
                        executor.submit(self._process_single, target, process_fn, kwargs): target
                        for target in targets
                    }
                    for future in as_completed(futures):
                        result = future.result()
                        results.append(result)
                        progress.update(task_id, advance=1, status=self._status_text(result))
                except KeyboardInterrupt:
                    # Queued hosts are dropped; hosts already running finish on their own
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise
                executor.shutdown(wait=True)
        finally:
            self._stop_rate_limiter_thread()
        return results

    def _run_sequential(self, targets: List[str], process_fn: Callable, kwargs: Dict[str, Any]) -> List[TargetResult]:
        """Run targets one after the other (--threads 1 mode), still with a progress bar."""
        results: List[TargetResult] = []
        info(f"Sequential scan: {len(targets)} targets")

        self._start_rate_limiter()
        progress = self._new_progress()
        try:
            with progress:
                task_id = progress.add_task("Scanning", total=len(targets), status="")
                for target in targets:
                    result = self._process_single(target, process_fn, kwargs)
                    results.append(result)
                    progress.update(task_id, advance=1, status=self._status_text(result))
        finally:
            self._stop_rate_limiter_thread()
        return results


def aggregate_results(results: List[TargetResult]) -> Dict[str, dict]:
    """
    Build the per-host statistics consumed by print_summary_table.

    Args:
        results: List of TargetResult objects

    Returns:
        Dict of {host: {port, shares, files, loot, failure_reason}}
    """
    stats: Dict[str, dict] = {}
    for result in results:
        report = result.report
        stats[result.target] = {
            "port": report.port if report else None,
            "shares": len(report.shares) if report else 0,
            "files": result.files,
            "loot": report.loot_path if report else None,
            "failure_reason": None if result.success else (result.error or "Unknown failure"),
        }
    return stats
