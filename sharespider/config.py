import argparse
import os
import sys
from typing import Any, Dict

from rich.console import Console
from rich.table import Table
from rich_argparse import RichHelpFormatter

try:
    import tomllib
except ImportError:
    # Fallback for Python < 3.11
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

from .config_model import LogFormat
from .utils.helpers import is_ipv4

DEFAULT_LOOT_DIR = "sharespider_loot"


class TableRichHelpFormatter(RichHelpFormatter):
    """
    Custom help formatter that displays argument groups with Rich styling.
    Uses uppercase group names and custom color scheme.
    """

    styles = {
        **RichHelpFormatter.styles,
        "argparse.groups": "bold cyan",
        "argparse.args": "green",
        "argparse.metavar": "yellow",
        "argparse.help": "white",
    }

    group_name_formatter = str.upper


class TableHelpAction(argparse.Action):
    """
    Custom help action that displays arguments in Rich tables.
    """

    def __init__(self, option_strings, dest=argparse.SUPPRESS, default=argparse.SUPPRESS, help=None):
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            default=default,
            nargs=0,
            help=help,
        )

    def __call__(self, parser, namespace, values, option_string=None):
        console = Console()

        if parser.description:
            console.print(f"\n[bold white]{parser.description}[/]\n")
        console.print(f"[dim]Usage:[/] [bold]{parser.prog}[/] [OPTIONS]\n")

        for group in parser._action_groups:
            actions = [a for a in group._group_actions if not isinstance(a, (argparse._HelpAction, TableHelpAction))]
            if not actions:
                continue

            console.print(f"[bold cyan]{group.title.upper()}[/]")
            if group.description:
                console.print(f"[dim]{group.description}[/]")

            table = Table(
                border_style="dim",
                show_header=True,
                header_style="bold white",
                padding=(0, 1),
                expand=False,
            )
            table.add_column("Option", style="green", no_wrap=True)
            table.add_column("Description", style="white")

            for action in actions:
                opts = ", ".join(action.option_strings) if action.option_strings else action.dest
                if action.metavar:
                    opts += f" [yellow]{action.metavar}[/]"
                elif action.type and action.type is not bool:
                    opts += f" [yellow]{action.dest.upper()}[/]"

                help_text = action.help or ""
                if action.default not in (None, True, False, argparse.SUPPRESS):
                    if "default:" not in help_text.lower():
                        help_text += f" [dim](default: {action.default})[/]"

                table.add_row(opts, help_text)

            console.print(table)
            console.print()

        parser.exit()


class OnceOnly(argparse.Action):
    """
    Custom argparse Action to prevent arguments from being specified multiple times.
    Stops a flag (e.g. -d) from silently overriding an earlier value.
    """

    def __call__(self, parser, namespace, values, option_string=None):
        if getattr(namespace, self.dest, None) is not None:
            raise argparse.ArgumentError(self, f"Argument {option_string} can only be specified once.")
        setattr(namespace, self.dest, values)


def log_format_arg(value: str) -> LogFormat:
    """argparse type for --log-spider."""
    try:
        return LogFormat.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


# (section, key) -> argparse destination
_CONFIG_KEYS = {
    ("authentication", "username"): "username",
    ("authentication", "password"): "password",
    ("authentication", "domain"): "domain",
    ("authentication", "hashes"): "hashes",
    ("authentication", "kerberos"): "kerberos",
    ("authentication", "aes_key"): "aes_key",
    ("target", "dc_ip"): "dc_ip",
    ("target", "target"): "target",
    ("target", "targets_file"): "targets_file",
    ("target", "timeout"): "timeout",
    ("target", "threads"): "threads",
    ("target", "rate_limit"): "rate_limit",
    ("spider", "shares"): "spider",
    ("spider", "show_files"): "show_files",
    ("spider", "profiles_only"): "profiles_only",
    ("spider", "max_depth"): "max_depth",
    ("spider", "log_format"): "log_spider",
    ("output", "loot_dir"): "loot_dir",
    ("output", "no_summary"): "no_summary",
    ("output", "verbose"): "verbose",
    ("output", "debug"): "debug",
}


def config_paths():
    return [
        "sharespider.toml",
        os.path.join("config", "sharespider.toml"),
        os.path.expanduser("~/.config/sharespider/sharespider.toml"),
    ]


def load_config() -> Dict[str, Any]:
    """
    Load argparse defaults from the first TOML file found.

    Priority:
    1. ./sharespider.toml
    2. ./config/sharespider.toml
    3. ~/.config/sharespider/sharespider.toml
    """
    if not tomllib:
        return {}

    config_data = {}
    loaded_path = None
    for path in config_paths():
        if os.path.exists(path):
            try:
                with open(path, "rb") as f:
                    config_data = tomllib.load(f)
                loaded_path = path
                break
            except Exception as e:
                print(f"[!] Error loading config file {path}: {e}")

    if not config_data:
        return {}

    if loaded_path == "sharespider.toml":
        print("[!] WARNING: Using sharespider.toml from current directory")
        print("[!] It may hold credentials - consider moving it to config/sharespider.toml")

    defaults = {}
    for (section, key), dest in _CONFIG_KEYS.items():
        values = config_data.get(section, {})
        if key in values:
            defaults[dest] = values[key]

    if "log_spider" in defaults:
        try:
            defaults["log_spider"] = LogFormat.parse(defaults["log_spider"])
        except ValueError as e:
            print(f"[!] Ignoring spider.log_format from {loaded_path}: {e}")
            del defaults["log_spider"]

    return defaults


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="sharespider",
        description="Enumerate SMB shares and spider their contents.",
        formatter_class=TableRichHelpFormatter,
        add_help=False,
    )
    ap.add_argument("-h", "--help", action=TableHelpAction, help="Show this help message")

    # Authentication options
    auth = ap.add_argument_group("Authentication options")
    auth.add_argument("-u", "--username", action=OnceOnly, help="Username (omit for a null session)")
    auth.add_argument("-p", "--password", action=OnceOnly, help="Password (omit with -k if using Kerberos/ccache)")
    auth.add_argument("-d", "--domain", action=OnceOnly, help="Domain (also appended to short target names)")
    auth.add_argument("--hashes", help="NTLM hashes in LM:NT format (or NT-only 32-hex) to use instead of password")
    auth.add_argument("-k", "--kerberos", action="store_true", help="Use Kerberos authentication (supports ccache)")
    auth.add_argument(
        "--aes-key",
        dest="aes_key",
        help="AES key for Kerberos authentication (AES-128: 32 hex chars, AES-256: 64 hex chars). Implies -k.",
    )

    # Target selection
    target = ap.add_argument_group("Target options")
    target.add_argument(
        "-t", "--target", action=OnceOnly, help="Target(s) - host, CIDR or comma-separated list (e.g., 10.0.0.5,10.0.1.0/24)"
    )
    target.add_argument("--targets-file", help="File with targets, one per line")
    target.add_argument("--dc-ip", help="Domain controller / KDC IP for Kerberos")
    target.add_argument("--timeout", type=int, default=10, help="Connection timeout in seconds (default: 10)")
    target.add_argument(
        "--threads",
        type=int,
        default=1,
        help="Number of parallel worker threads for scanning multiple targets (default: 1 = sequential)",
    )
    target.add_argument(
        "--rate-limit",
        type=float,
        default=None,
        help="Maximum targets per second (default: unlimited)",
    )

    # Spider options
    spider = ap.add_argument_group(
        "Spider options",
        description="Walk enumerable shares and collect file metadata.",
    )
    spider.add_argument("--spider", action="store_true", help="Spider shares recursively")
    spider.add_argument("--show-files", action="store_true", help="Print a table for every spidered directory")
    spider.add_argument(
        "--no-profiles-only",
        dest="profiles_only",
        action="store_false",
        help="Spider whole drive shares (C$..Z$) instead of only the user profile directories",
    )
    spider.add_argument(
        "--max-depth",
        type=int,
        default=999,
        help="Maximum depth below a user profile directory on drive shares (default: 999)",
    )
    spider.add_argument(
        "--log-spider",
        type=log_format_arg,
        default=LogFormat.ONELINE,
        metavar="{0,1,2,3}",
        help="Loot format for spider results: 0/none, 1/csv, 2/table, 3/oneline (default: 3)",
    )

    # Output options
    out = ap.add_argument_group("Output options")
    out.add_argument("--loot-dir", default=DEFAULT_LOOT_DIR, help="Directory for loot files and notes")
    out.add_argument("--no-summary", action="store_true", help="Disable summary table at the end of the run")

    # Misc
    misc = ap.add_argument_group("Misc")
    misc.add_argument("--verbose", action="store_true", help="Enable verbose output")
    misc.add_argument("--debug", action="store_true", help="Enable debug output (print full stack traces)")

    # Load defaults from config file
    defaults = load_config()
    if defaults:
        ap.set_defaults(**defaults)

    return ap


def validate_args(args):
    if not (args.target or args.targets_file):
        print("[!] Either --target or --targets-file is required")
        sys.exit(1)

    if args.targets_file and not os.path.isfile(args.targets_file):
        print(f"[!] Targets file does not exist: {args.targets_file}")
        sys.exit(1)

    # A username without any secret is almost always a mistake
    has_secret = args.password or args.hashes or getattr(args, "aes_key", None) or args.kerberos
    if args.username and not has_secret:
        print("[!] ERROR: Authentication required when a username is given")
        print("[!] You must specify one of:")
        print("[!]   -p PASSWORD     (password authentication)")
        print("[!]   --hashes HASH   (NTLM hash authentication)")
        print("[!]   --aes-key KEY   (Kerberos with AES key)")
        print("[!]   -k              (Kerberos authentication with ccache)")
        if "KRB5CCNAME" in os.environ:
            print("[!] Detected KRB5CCNAME environment variable - did you forget the -k flag?")
        sys.exit(1)

    if (args.kerberos or getattr(args, "aes_key", None)) and not args.username:
        print("[!] Kerberos authentication requires -u/--username")
        sys.exit(1)

    if args.max_depth < 0:
        print("[!] --max-depth must be zero or greater")
        sys.exit(1)

    if args.threads < 1:
        print("[!] --threads must be at least 1")
        sys.exit(1)

    if args.timeout <= 0:
        print("[!] --timeout must be greater than zero")
        sys.exit(1)

    if args.show_files and not args.spider:
        print("[!] --show-files has no effect without --spider")

    # Kerberos needs names to build SPNs
    if args.kerberos and args.target:
        for t in args.target.split(","):
            if is_ipv4(t.strip()):
                print(
                    "[!] Targets verification failed. Please supply hostnames or FQDNs or switch to NTLM auth "
                    "(Kerberos doesn't like IP addresses)"
                )
                sys.exit(1)
