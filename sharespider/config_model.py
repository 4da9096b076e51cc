"""Configuration model for sharespider enumeration policy."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union


class LogFormat(IntEnum):
    """How spidered results are handed to the loot store."""

    NONE = 0
    CSV = 1
    TABLE = 2
    ONELINE = 3

    @classmethod
    def parse(cls, value: Union[int, str, "LogFormat"]) -> "LogFormat":
        """
        Accept the numeric form (0-3, as int or string) or a format name.

        Raises:
            ValueError: for anything outside the four known formats
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid log format: {value!r}")
        if isinstance(value, int):
            return cls(value)

        text = str(value).strip().lower()
        if text.isdigit():
            return cls(int(text))
        aliases = {
            "none": cls.NONE,
            "disabled": cls.NONE,
            "csv": cls.CSV,
            "table": cls.TABLE,
            "txt": cls.TABLE,
            "oneline": cls.ONELINE,
            "one-liner": cls.ONELINE,
            "one_liner": cls.ONELINE,
        }
        if text not in aliases:
            raise ValueError(f"Invalid log format: {value!r} (use 0-3, none, csv, table or oneline)")
        return aliases[text]


@dataclass(frozen=True)
class EnumerationPolicy:
    """
    Read-only spidering policy for a whole run.

    Merges settings from:
    1. Command-line arguments (highest priority)
    2. sharespider.toml [spider] section (if present)
    3. Defaults
    """

    spider_shares: bool = False
    show_files: bool = False
    spider_profiles_only: bool = True
    max_depth: int = 999
    log_format: LogFormat = field(default=LogFormat.ONELINE)

    @classmethod
    def from_args(cls, args):
        """
        Create an EnumerationPolicy from parsed CLI arguments.

        Args:
            args: argparse.Namespace from CLI

        Returns:
            EnumerationPolicy instance
        """
        return cls(
            spider_shares=bool(args.spider),
            show_files=bool(args.show_files),
            spider_profiles_only=bool(args.profiles_only),
            max_depth=int(args.max_depth),
            log_format=LogFormat.parse(args.log_spider),
        )
