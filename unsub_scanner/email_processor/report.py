"""
Rendering and persisting the unsubscribe listing.

The output file always holds one of three things: the scanning
placeholder, the finished report, or the failure marker.
"""

from pathlib import Path
from typing import Mapping, Union

from .unsubscribe.constants import FAILURE_PLACEHOLDER, SCANNING_PLACEHOLDER, UNKNOWN_DATE
from .unsubscribe.exceptions import WriteError
from .unsubscribe.logging import ScanLogger
from .unsubscribe.types import AggregateEntry


class ReportWriter:
    """Render the aggregate and write it to the output file."""

    def __init__(self, output_path: Union[str, Path]):
        self.output_path = Path(output_path)
        self.logger = ScanLogger("report_writer")

    @staticmethod
    def format_line(sender: str, entry: AggregateEntry) -> str:
        """Format one record as [YYYY-MM-DD/sender]: target."""
        if entry.observed_at is not None:
            date_str = entry.observed_at.strftime('%Y-%m-%d')
        else:
            date_str = UNKNOWN_DATE
        return f"[{date_str}/{sender}]: {entry.target}"

    def render(self, aggregate: Mapping[str, AggregateEntry]) -> str:
        """
        Render the report, newest first.

        Entries without a date come last. sorted() is stable, so entries
        with equal timestamps keep the aggregate's insertion order.
        """
        entries = sorted(aggregate.items(), key=lambda item: item[1].timestamp, reverse=True)
        lines = [self.format_line(sender, entry) for sender, entry in entries]
        return '\n'.join(lines) + '\n'

    def _write(self, content: str):
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output_path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(content)
        except OSError as e:
            raise WriteError(f"Failed to write output file: {e}", path=self.output_path) from e

    def write_placeholder(self):
        """Mark the file as in progress before scanning starts."""
        self._write(SCANNING_PLACEHOLDER + '\n')

    def write_report(self, aggregate: Mapping[str, AggregateEntry]):
        """Overwrite the file with the finished report."""
        self._write(self.render(aggregate))
        if not self.output_path.exists():
            raise WriteError("Output file missing after write", path=self.output_path)
        self.logger.info("Report written", {
            'path': str(self.output_path),
            'records': len(aggregate)
        })

    def write_failure(self, error: BaseException):
        """Overwrite the file with the failure marker and the error message."""
        message = getattr(error, 'message', None) or str(error) or type(error).__name__
        self._write(f"{FAILURE_PLACEHOLDER}\n\nError: {message}\n")
