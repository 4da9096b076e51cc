# Rich-based console for thread-safe, colored terminal output.
#
# This module provides a centralized console for all sharespider output,
# with proper handling for multi-threaded host scanning.
#
# Features:
# - Thread-safe output (no interleaving)
# - Colored status messages
# - Rich tables for spidered directories and the run summary

import threading
from typing import Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

# Global console instance - thread-safe by default
console = Console(highlight=False)

# Lock for complex multi-line output
_output_lock = threading.RLock()


# =============================================================================
# Banner
# =============================================================================

SHARESPIDER_TEAL = "#14B8A6"

BANNER_ART = f"""
[bold {SHARESPIDER_TEAL}] SSS  H   H  AAA  RRRR  EEEEE  SSS  PPPP  III DDDD  EEEEE RRRR [/]
[bold {SHARESPIDER_TEAL}]S     H   H A   A R   R E     S     P   P  I  D   D E     R   R[/]
[bold {SHARESPIDER_TEAL}] SSS  HHHHH AAAAA RRRR  EEEE   SSS  PPPP   I  D   D EEEE  RRRR [/]
[bold {SHARESPIDER_TEAL}]    S H   H A   A R  R  E         S P      I  D   D E     R  R [/]
[bold {SHARESPIDER_TEAL}]SSSS  H   H A   A R   R EEEEE SSSS  P     III DDDD  EEEEE R   R[/]

                   [dim]SMB share enumeration and spidering[/]
"""


def print_banner():
    """Print the colored sharespider banner."""
    console.print(BANNER_ART)


# =============================================================================
# Status Messages (thread-safe)
# =============================================================================

def status(msg: str):
    """Print a status message (always visible). Thread-safe."""
    with _output_lock:
        console.print(escape(msg))


def good(msg: str, verbose_only: bool = False):
    """Print a success message in green. Thread-safe."""
    if verbose_only and not _is_verbose():
        return
    with _output_lock:
        console.print(f"[green][+][/] {escape(msg)}")


def warn(msg: str, verbose_only: bool = False):
    """Print a warning message in yellow. Thread-safe.

    Args:
        msg: Message to print
        verbose_only: If True, only print in verbose mode
    """
    if verbose_only and not _is_verbose():
        return
    with _output_lock:
        console.print(f"[yellow][!][/] {escape(msg)}")


def error(msg: str):
    """Print an error message in red. Thread-safe."""
    with _output_lock:
        console.print(f"[red][-][/] {escape(msg)}")


def info(msg: str, verbose_only: bool = False):
    """Print an info message in blue. Thread-safe."""
    if verbose_only and not _is_verbose():
        return
    with _output_lock:
        console.print(f"[blue][*][/] {escape(msg)}")


def debug(msg: str, exc_info: bool = False):
    """Print a debug message in dim text. Thread-safe."""
    if not _is_debug():
        return
    with _output_lock:
        console.print(f"[dim][DEBUG][/] {escape(msg)}")
        if exc_info:
            console.print_exception()


def print_table(table: Table):
    """Print a prepared rich table without interleaving other threads."""
    with _output_lock:
        console.print(table)


# =============================================================================
# Verbosity Control
# =============================================================================

_VERBOSE = False
_DEBUG = False


def set_verbosity(verbose: bool, debug: bool):
    """Set verbosity levels."""
    global _VERBOSE, _DEBUG
    _VERBOSE = verbose
    _DEBUG = debug


def _is_verbose() -> bool:
    return _VERBOSE or _DEBUG


def _is_debug() -> bool:
    return _DEBUG


# =============================================================================
# Run Summary
# =============================================================================

def print_summary_table(host_stats: Dict[str, dict]):
    """
    Print a rich summary table with per-host share and file counts.

    Args:
        host_stats: Dict of {host: {port, shares, files, loot, failure_reason}}
    """
    if not host_stats:
        return

    success_hosts = {h: s for h, s in host_stats.items() if not s.get("failure_reason")}
    failed_hosts = {h: s for h, s in host_stats.items() if s.get("failure_reason")}

    if success_hosts:
        table = Table(
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
            box=None,
        )
        table.add_column("Host", style="white", no_wrap=True)
        table.add_column("Port", justify="center")
        table.add_column("Shares", justify="center", style="green")
        table.add_column("Files", justify="center", style="yellow")
        table.add_column("Loot", style="dim")

        total_shares = 0
        total_files = 0
        for host in sorted(success_hosts):
            stats = success_hosts[host]
            total_shares += stats["shares"]
            total_files += stats["files"]
            table.add_row(
                escape(host),
                str(stats.get("port") or "-"),
                str(stats["shares"]),
                str(stats["files"]),
                escape(stats.get("loot") or ""),
            )

        if len(success_hosts) > 1:
            table.add_section()
            table.add_row("[bold]TOTAL[/]", "", f"[bold]{total_shares}[/]", f"[bold]{total_files}[/]", "")

        console.print()
        console.print(Panel(table, title="[bold]SHARE SUMMARY[/]", border_style="cyan"))

    if failed_hosts:
        fail_table = Table(
            show_header=True,
            header_style="bold red",
            border_style="dim red",
            box=None,
        )
        fail_table.add_column("Host", style="white", no_wrap=True)
        fail_table.add_column("Reason", style="dim")

        for host in sorted(failed_hosts):
            reason = failed_hosts[host]["failure_reason"]
            if len(reason) > 60:
                reason = reason[:57] + "..."
            fail_table.add_row(escape(host), escape(reason))

        console.print()
        console.print(
            Panel(
                fail_table,
                title=f"[bold red]FAILED HOSTS ({len(failed_hosts)})[/]",
                border_style="red",
            )
        )

    console.print()


def print_scan_complete(
    succeeded: int,
    failed: int,
    total_time: float,
    avg_time_ms: float,
    loot_dir: Optional[str] = None,
):
    """Print scan completion summary."""
    console.print()

    content_lines = [
        f"  [green][+][/] Succeeded: [bold]{succeeded}[/]",
        f"  [red][-][/] Failed: [bold]{failed}[/]",
        f"  [dim]Total time: {total_time:.2f}s[/]",
        f"  [dim]Avg per target: {avg_time_ms:.0f}ms[/]",
    ]
    if loot_dir:
        content_lines.append(f"  [dim]Loot directory: {escape(loot_dir)}[/]")

    console.print(
        Panel(
            "\n".join(content_lines),
            title="[bold]SCAN COMPLETE[/]",
            border_style="green" if failed == 0 else "yellow",
        )
    )
