# Spider result accumulation and hand-off.
#
# SpiderResults collects the FileRecords of one host in discovery order and
# renders them as CSV, a plain-text table or one path per line. The chosen
# representation is handed to the persistence sink once, after the host's
# spidering completed, and only when something was found.

import csv
from io import StringIO
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from ..config_model import LogFormat
from ..models.entry import FileRecord
from ..utils.logging import good

LOOT_KIND = "smb.enumshares"

COLUMNS = ["IP Address", "Type", "Share", "Path", "Name", "Created", "Accessed", "Written", "Changed", "Size"]


class SpiderResults:
    """Append-only FileRecord sequence for a single host."""

    def __init__(self, host: str):
        self.host = host
        self.records: List[FileRecord] = []
        self._flushed = False

    def add(self, record: FileRecord) -> None:
        self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)

    def to_csv(self) -> str:
        buffer = StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(COLUMNS)
        for record in self.records:
            writer.writerow(record.to_row())
        return buffer.getvalue()

    def to_table(self) -> str:
        """Plain-text table (no ANSI codes) of every record."""
        table = Table(
            title=f"Spidered results for {self.host}.",
            title_justify="left",
            box=box.SIMPLE_HEAD,
            expand=False,
        )
        for column in COLUMNS:
            table.add_column(column, no_wrap=True)
        for record in self.records:
            table.add_row(*record.to_row())

        buffer = StringIO()
        file_console = Console(file=buffer, width=1000, color_system=None, force_terminal=False, markup=False)
        file_console.print(table)
        return "\n".join(line.rstrip() for line in buffer.getvalue().splitlines()) + "\n"

    def to_oneline(self) -> str:
        return "".join(f"{record.unc_path}\n" for record in self.records)

    def render(self, log_format: LogFormat) -> Optional[tuple]:
        """(mime_type, payload) for a log format, or None for LogFormat.NONE."""
        if log_format is LogFormat.CSV:
            return "text/csv", self.to_csv()
        if log_format is LogFormat.TABLE:
            return "text/plain", self.to_table()
        if log_format is LogFormat.ONELINE:
            return "text/plain", self.to_oneline()
        return None

    def flush(self, sink, log_format: LogFormat) -> Optional[str]:
        """
        Hand the results to the persistence sink.

        Happens at most once per instance and only if at least one record
        was collected; LogFormat.NONE never stores anything.

        Returns:
            Location reported by the sink, or None when nothing was stored
        """
        if self._flushed or not self.records:
            return None
        self._flushed = True

        rendered = self.render(LogFormat.parse(log_format))
        if rendered is None:
            return None
        mime_type, payload = rendered
        location = sink.store(LOOT_KIND, mime_type, self.host, payload)
        good(f"{self.host}: info saved in: {location}")
        return location
