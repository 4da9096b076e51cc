# Interactive display of spidered directories.
#
# Builds the per-directory rich tables shown with --show-files. Long names
# are shortened here only; FileRecords always keep the full name.

from typing import List

from rich import box
from rich.markup import escape
from rich.table import Table

from ..models.entry import FileRecord
from . import COLORS

DISPLAY_NAME_LIMIT = 35


def truncate_name(name: str, limit: int = DISPLAY_NAME_LIMIT) -> str:
    """Cut names longer than `limit` characters and append an ellipsis."""
    if len(name) > limit:
        return f"{name[:limit]}..."
    return name


def directory_header(host: str, share_name: str, path: str) -> str:
    """UNC-style header for a listed directory."""
    return f"\\\\{host}\\{share_name}{path}"


def format_directory_table(header: str, records: List[FileRecord]) -> Table:
    """
    Format the records of one listed directory as a Rich table.

    Args:
        header: Table title (see directory_header)
        records: Records emitted for that directory, in listing order

    Returns:
        Rich Table object
    """
    table = Table(
        title=escape(header),
        title_justify="left",
        box=box.SIMPLE,
        header_style=COLORS["header"],
        border_style=COLORS["border"],
        expand=False,
    )
    for column in ("Type", "Name", "Created", "Accessed", "Written", "Changed", "Size"):
        table.add_column(column, no_wrap=True)

    for record in records:
        row = record.to_row()
        style = COLORS["dir"] if record.is_directory else COLORS["file"]
        table.add_row(
            row[1],
            f"[{style}]{escape(truncate_name(record.name))}[/]",
            row[5],
            row[6],
            row[7],
            row[8],
            row[9],
        )
    return table
