"""
IMAP email connection and message retrieval.
"""

import imaplib
import re
from datetime import datetime
from typing import Iterator, List, Optional, Tuple

from ..config import ScanOptions
from .unsubscribe.exceptions import ConnectError, StreamError
from .unsubscribe.logging import ScanLogger
from .unsubscribe.types import RawMessage

# IMAP dates use English month names regardless of locale
_IMAP_MONTHS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

_UID_PATTERN = re.compile(rb'UID (\d+)')
_SEQ_PATTERN = re.compile(rb'^(\d+) ')

# UIDs requested per UID FETCH command
FETCH_CHUNK_SIZE = 40


def imap_date(value: datetime) -> str:
    """Format a date for IMAP SEARCH, e.g. 01-Jan-2025."""
    return f"{value.day:02d}-{_IMAP_MONTHS[value.month - 1]}-{value.year:04d}"


class IMAPConnection:
    """Manages IMAP connection to email servers."""

    def __init__(self, server: str, port: int = 993, use_ssl: bool = True, timeout: Optional[float] = 30):
        self.server = server
        self.port = port
        self.use_ssl = use_ssl
        self.timeout = timeout
        self.connection = None
        self.logger = ScanLogger("imap_client")
        self.logger.add_context('server', server)

    @classmethod
    def from_options(cls, options: ScanOptions) -> 'IMAPConnection':
        return cls(options.host, options.port, options.use_ssl, options.timeout)

    def connect(self, username: str, password: str):
        """
        Connect to the IMAP server and authenticate.

        Raises:
            ConnectError: auth_failed is True when the server rejected the
                credentials, False for network and host problems
        """
        try:
            if self.use_ssl:
                self.connection = imaplib.IMAP4_SSL(self.server, self.port, timeout=self.timeout)
            else:
                self.connection = imaplib.IMAP4(self.server, self.port, timeout=self.timeout)
        except (imaplib.IMAP4.error, OSError) as e:
            self.connection = None
            raise ConnectError(
                f"Failed to connect to IMAP server: {e}",
                auth_failed=False,
                context={'server': self.server, 'port': self.port}
            ) from e

        try:
            self.connection.login(username, password)
        except imaplib.IMAP4.abort as e:
            # Subclass of IMAP4.error: the connection dropped, not a rejection
            self._abandon()
            raise ConnectError(
                f"Connection lost during login: {e}",
                auth_failed=False,
                context={'server': self.server, 'port': self.port}
            ) from e
        except imaplib.IMAP4.error as e:
            self._abandon()
            raise ConnectError(
                f"Authentication failed: {e}",
                auth_failed=True,
                context={'server': self.server, 'username': username}
            ) from e
        except OSError as e:
            self._abandon()
            raise ConnectError(
                f"Connection lost during login: {e}",
                auth_failed=False,
                context={'server': self.server, 'port': self.port}
            ) from e

        self.logger.info("Connected", {'port': self.port})

    def _abandon(self):
        """Drop a connection that never finished logging in."""
        if self.connection is not None:
            try:
                self.connection.shutdown()
            except OSError as e:
                self.logger.debug("Shutdown after failed login raised", {'error': str(e)})
            self.connection = None

    def disconnect(self):
        """Close the IMAP connection. Safe to call more than once."""
        if self.connection is None:
            return
        connection, self.connection = self.connection, None
        try:
            connection.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            self.logger.warning("Logout failed", {'error': str(e)})

    def list_since(self, mailbox: str, since: datetime) -> Tuple[int, Iterator[RawMessage]]:
        """
        Select a mailbox and list the messages received since a date.

        The count is known up front; the messages themselves are fetched
        lazily as the returned iterator is consumed.

        Raises:
            StreamError: If the mailbox cannot be selected or searched.
                The iterator raises StreamError for fetch failures.
        """
        if self.connection is None:
            raise StreamError("Not connected", mailbox=mailbox)

        try:
            status, _ = self.connection.select(self._quote(mailbox), readonly=True)
            if status != 'OK':
                raise StreamError(f"Failed to select mailbox {mailbox}", mailbox=mailbox)

            status, data = self.connection.uid('SEARCH', None, 'SINCE', imap_date(since))
            if status != 'OK':
                raise StreamError(f"Search failed in {mailbox}", mailbox=mailbox)
        except (imaplib.IMAP4.error, OSError) as e:
            raise StreamError(f"Mailbox query failed: {e}", mailbox=mailbox) from e

        uids = [int(uid) for uid in (data[0] or b'').split()] if data else []
        self.logger.info("Search complete", {
            'mailbox': mailbox,
            'since': imap_date(since),
            'total': len(uids)
        })
        return len(uids), self._fetch_messages(mailbox, uids)

    def _fetch_messages(self, mailbox: str, uids: List[int]) -> Iterator[RawMessage]:
        total = len(uids)
        for start in range(0, total, FETCH_CHUNK_SIZE):
            chunk = uids[start:start + FETCH_CHUNK_SIZE]
            uid_set = ','.join(str(uid) for uid in chunk)
            try:
                status, data = self.connection.uid('FETCH', uid_set, '(RFC822)')
            except (imaplib.IMAP4.error, OSError, AttributeError) as e:
                raise StreamError(f"Fetch failed: {e}", mailbox=mailbox, uid=chunk[0]) from e
            if status != 'OK':
                raise StreamError(f"Fetch returned {status}", mailbox=mailbox, uid=chunk[0])

            data = data or []
            for index, item in enumerate(data):
                if not isinstance(item, tuple) or len(item) < 2:
                    continue
                envelope, source = item[0], item[1]
                uid_match = _UID_PATTERN.search(envelope)
                if uid_match is None:
                    # Some servers send UID after the literal, e.g. b' UID 12)'
                    trailer = data[index + 1] if index + 1 < len(data) else None
                    if isinstance(trailer, bytes):
                        uid_match = _UID_PATTERN.search(trailer)
                seq_match = _SEQ_PATTERN.match(envelope)
                yield RawMessage(
                    uid=int(uid_match.group(1)) if uid_match else 0,
                    seq=int(seq_match.group(1)) if seq_match else 0,
                    source=source,
                    total=total
                )

    @staticmethod
    def _quote(mailbox: str) -> str:
        """Quote mailbox names containing spaces, e.g. "[Gmail]/All Mail"."""
        if mailbox.startswith('"') or ' ' not in mailbox:
            return mailbox
        return '"' + mailbox.replace('\\', '\\\\').replace('"', '\\"') + '"'

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
