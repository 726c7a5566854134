"""
Batch scanner: retrieve, process and aggregate unsubscribe targets.

This module drives a whole run. Messages are read from the IMAP stream
one at a time and collected into fixed-size batches. Each batch is
processed concurrently, and the scanner waits for the whole batch before
merging its results and reading on, so only one batch is ever in flight
and the aggregate is only touched from the scanner's own thread.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from enum import Enum
from typing import Callable, Iterator, List, Optional

from ..config import ScanOptions, since_months_ago
from .aggregator import Aggregate, merge_results
from .imap_client import IMAPConnection
from .report import ReportWriter
from .unsubscribe.logging import ScanLogger
from .unsubscribe.processors import MessageProcessor
from .unsubscribe.types import RawMessage, RunSummary

ProgressCallback = Callable[[int, int], None]


class ScanState(Enum):
    """Lifecycle of a scan run."""

    PENDING = 'pending'
    CONNECTING = 'connecting'
    SCANNING = 'scanning'
    DRAINING = 'draining'
    WRITING = 'writing'
    DONE = 'done'
    FAILED = 'failed'


class UnsubscribeScanner:
    """
    Scan one mailbox and write the sender to unsubscribe target listing.

    Collaborators are injectable so tests can replace the IMAP connection,
    the per-message processor and the report writer.
    """

    def __init__(
        self,
        options: ScanOptions,
        connection_factory: Optional[Callable[[ScanOptions], IMAPConnection]] = None,
        processor: Optional[MessageProcessor] = None,
        report_writer: Optional[ReportWriter] = None,
        progress_callback: Optional[ProgressCallback] = None,
        today: Optional[date] = None
    ):
        self.options = options
        self.connection_factory = connection_factory or IMAPConnection.from_options
        self.processor = processor or MessageProcessor()
        self.report_writer = report_writer or ReportWriter(options.output_path)
        self.progress_callback = progress_callback
        self.today = today
        self.state = ScanState.PENDING

        self.logger = ScanLogger("scanner")
        self.logger.add_context('mailbox', options.mailbox)
        self.logger.add_context('username', options.username)

    @property
    def output_path(self):
        return self.report_writer.output_path

    def run(self) -> RunSummary:
        """
        Run the scan end to end.

        Returns:
            RunSummary with message count, distinct sender count and output path

        Raises:
            ConnectError: If the connection or login fails. The output file
                keeps the scanning placeholder.
            StreamError: If retrieval fails mid-scan
            WriteError: If the output file cannot be written
        """
        try:
            self.report_writer.write_placeholder()
            self.state = ScanState.CONNECTING
            imap = self.connection_factory(self.options)
            imap.connect(self.options.username, self.options.password)
        except Exception:
            self.state = ScanState.FAILED
            raise

        with imap:
            try:
                with self.logger.time_operation("scan"):
                    aggregate, message_count = self._scan(imap)
                    self.state = ScanState.WRITING
                    self.report_writer.write_report(aggregate)
            except Exception as e:
                self.state = ScanState.FAILED
                self._write_failure(e)
                raise

        self.state = ScanState.DONE
        return RunSummary(
            message_count=message_count,
            distinct_sender_count=len(aggregate),
            output_path=self.output_path
        )

    def _scan(self, imap: IMAPConnection):
        self.state = ScanState.SCANNING
        cutoff = since_months_ago(self.options.months, self.today)
        total, messages = imap.list_since(self.options.mailbox, cutoff)

        aggregate: Aggregate = {}
        if total == 0:
            self.state = ScanState.DRAINING
            return aggregate, 0

        workers = min(self.options.batch_size, total)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='unsub-scan') as executor:
            processed = 0
            for batch in self._batches(messages):
                processed = self._process_batch(executor, batch, aggregate, processed, total)
        return aggregate, processed

    def _batches(self, messages: Iterator[RawMessage]) -> Iterator[List[RawMessage]]:
        """Group the stream into full batches, then the partial remainder."""
        batch: List[RawMessage] = []
        for message in messages:
            batch.append(message)
            if len(batch) >= self.options.batch_size:
                yield batch
                batch = []
        self.state = ScanState.DRAINING
        if batch:
            yield batch

    def _process_batch(
        self,
        executor: ThreadPoolExecutor,
        batch: List[RawMessage],
        aggregate: Aggregate,
        processed: int,
        total: int
    ) -> int:
        # map() yields results in submission order once every task is done
        results = list(executor.map(self.processor.process, batch))
        merge_results(aggregate, results)

        processed += len(batch)
        # The count query can undercount if messages arrive mid-scan
        total = max(total, processed)
        self.logger.info("Batch processed", {
            'processed': processed,
            'total': total,
            'senders': len(aggregate)
        })
        if self.progress_callback:
            self.progress_callback(processed, total)
        return processed

    def _write_failure(self, error: Exception):
        try:
            self.report_writer.write_failure(error)
        except Exception as write_error:
            self.logger.error("Could not write failure marker", {'error': str(write_error)})
        self.logger.log_exception(error)
