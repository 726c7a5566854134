"""
Tests for IMAPConnection with a mocked imaplib.
"""

import imaplib
import socket
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from unsub_scanner.config import ScanOptions
from unsub_scanner.email_processor.imap_client import IMAPConnection, imap_date
from unsub_scanner.email_processor.unsubscribe.exceptions import ConnectError, StreamError


def fetch_response(*messages):
    """Build the data list imaplib returns for UID FETCH (RFC822)."""
    data = []
    for seq, uid, source in messages:
        envelope = f'{seq} (UID {uid} RFC822 {{{len(source)}}}'.encode()
        data.append((envelope, source))
        data.append(b')')
    return ('OK', data)


class TestConnect:
    """Test connect() and disconnect()."""

    @patch('unsub_scanner.email_processor.imap_client.imaplib.IMAP4_SSL')
    def test_connect_success(self, mock_ssl):
        conn = IMAPConnection('imap.example.com', 993, timeout=15)
        conn.connect('me@example.com', 'pw')

        mock_ssl.assert_called_once_with('imap.example.com', 993, timeout=15)
        mock_ssl.return_value.login.assert_called_once_with('me@example.com', 'pw')
        assert conn.connection is mock_ssl.return_value

    @patch('unsub_scanner.email_processor.imap_client.imaplib.IMAP4')
    def test_plain_connection_when_ssl_disabled(self, mock_plain):
        conn = IMAPConnection('imap.example.com', 143, use_ssl=False)
        conn.connect('me@example.com', 'pw')
        mock_plain.assert_called_once_with('imap.example.com', 143, timeout=30)

    @patch('unsub_scanner.email_processor.imap_client.imaplib.IMAP4_SSL')
    def test_login_rejected_is_auth_failure(self, mock_ssl):
        mock_ssl.return_value.login.side_effect = imaplib.IMAP4.error('[AUTHENTICATIONFAILED] Invalid credentials')
        conn = IMAPConnection('imap.example.com')

        with pytest.raises(ConnectError) as exc_info:
            conn.connect('me@example.com', 'wrong')

        assert exc_info.value.auth_failed is True
        assert conn.connection is None
        mock_ssl.return_value.shutdown.assert_called_once()

    @patch('unsub_scanner.email_processor.imap_client.imaplib.IMAP4_SSL')
    def test_connection_dropped_during_login_is_not_auth_failure(self, mock_ssl):
        mock_ssl.return_value.login.side_effect = imaplib.IMAP4.abort('socket error: EOF')
        conn = IMAPConnection('imap.example.com')

        with pytest.raises(ConnectError) as exc_info:
            conn.connect('me@example.com', 'pw')

        assert exc_info.value.auth_failed is False
        assert conn.connection is None

    @pytest.mark.parametrize('error', [
        ConnectionRefusedError('refused'),
        socket.timeout('timed out'),
        socket.gaierror('Name or service not known'),
    ])
    @patch('unsub_scanner.email_processor.imap_client.imaplib.IMAP4_SSL')
    def test_network_failure_is_not_auth_failure(self, mock_ssl, error):
        mock_ssl.side_effect = error
        conn = IMAPConnection('imap.example.com')

        with pytest.raises(ConnectError) as exc_info:
            conn.connect('me@example.com', 'pw')

        assert exc_info.value.auth_failed is False
        assert conn.connection is None

    def test_disconnect_is_idempotent(self):
        conn = IMAPConnection('imap.example.com')
        imap = MagicMock()
        conn.connection = imap

        conn.disconnect()
        conn.disconnect()

        imap.logout.assert_called_once()
        assert conn.connection is None

    def test_disconnect_tolerates_logout_error(self):
        conn = IMAPConnection('imap.example.com')
        conn.connection = MagicMock()
        conn.connection.logout.side_effect = OSError('broken pipe')

        conn.disconnect()

        assert conn.connection is None

    def test_context_manager_disconnects(self):
        imap = MagicMock()
        with IMAPConnection('imap.example.com') as conn:
            conn.connection = imap
        imap.logout.assert_called_once()

    def test_from_options(self):
        options = ScanOptions(host='imap.x.example', username='me@x.example', password='pw',
                              port=1993, timeout=5)
        conn = IMAPConnection.from_options(options)
        assert (conn.server, conn.port, conn.use_ssl, conn.timeout) == ('imap.x.example', 1993, True, 5)


class TestListSince:
    """Test list_since() and the lazy message stream."""

    def setup_method(self):
        self.conn = IMAPConnection('imap.example.com')
        self.imap = MagicMock()
        self.conn.connection = self.imap
        self.imap.select.return_value = ('OK', [b'3'])

    def test_lists_and_streams_messages(self):
        def uid(command, *args):
            if command == 'SEARCH':
                return ('OK', [b'101 102 105'])
            return fetch_response((1, 101, b'raw-1'), (2, 102, b'raw-2'), (3, 105, b'raw-3'))
        self.imap.uid.side_effect = uid

        total, messages = self.conn.list_since('INBOX', datetime(2025, 7, 19))

        assert total == 3
        self.imap.select.assert_called_once_with('INBOX', readonly=True)
        self.imap.uid.assert_called_once_with('SEARCH', None, 'SINCE', '19-Jul-2025')

        result = list(messages)
        assert [(m.uid, m.seq, m.source, m.total) for m in result] == [
            (101, 1, b'raw-1', 3), (102, 2, b'raw-2', 3), (105, 3, b'raw-3', 3)
        ]
        self.imap.uid.assert_called_with('FETCH', '101,102,105', '(RFC822)')

    def test_uid_after_literal(self):
        def uid(command, *args):
            if command == 'SEARCH':
                return ('OK', [b'7 9'])
            return ('OK', [
                (b'1 (RFC822 {5}', b'raw-7'), b' UID 7)',
                (b'2 (RFC822 {5}', b'raw-9'), b' UID 9)',
            ])
        self.imap.uid.side_effect = uid

        _, messages = self.conn.list_since('INBOX', datetime(2025, 1, 1))

        assert [(m.uid, m.seq, m.source) for m in messages] == [(7, 1, b'raw-7'), (9, 2, b'raw-9')]

    def test_fetches_in_chunks(self):
        uids = list(range(1, 86))
        fetched = []

        def uid(command, *args):
            if command == 'SEARCH':
                return ('OK', [' '.join(str(u) for u in uids).encode()])
            chunk = [int(u) for u in args[0].split(',')]
            fetched.append(len(chunk))
            return fetch_response(*[(u, u, b'x') for u in chunk])
        self.imap.uid.side_effect = uid

        total, messages = self.conn.list_since('INBOX', datetime(2025, 1, 1))

        assert total == 85
        assert len(list(messages)) == 85
        assert fetched == [40, 40, 5]

    def test_empty_mailbox(self):
        self.imap.uid.return_value = ('OK', [b''])

        total, messages = self.conn.list_since('INBOX', datetime(2025, 1, 1))

        assert total == 0
        assert list(messages) == []

    def test_mailbox_with_spaces_is_quoted(self):
        self.imap.uid.return_value = ('OK', [b''])
        self.conn.list_since('[Gmail]/All Mail', datetime(2025, 1, 1))
        self.imap.select.assert_called_once_with('"[Gmail]/All Mail"', readonly=True)

    def test_select_failure(self):
        self.imap.select.return_value = ('NO', [b'Mailbox does not exist'])
        with pytest.raises(StreamError, match='Failed to select mailbox Promotions'):
            self.conn.list_since('Promotions', datetime(2025, 1, 1))

    def test_search_error(self):
        self.imap.uid.side_effect = imaplib.IMAP4.abort('socket error')
        with pytest.raises(StreamError):
            self.conn.list_since('INBOX', datetime(2025, 1, 1))

    def test_fetch_error_raised_from_stream(self):
        def uid(command, *args):
            if command == 'SEARCH':
                return ('OK', [b'1 2'])
            raise OSError('connection reset')
        self.imap.uid.side_effect = uid

        total, messages = self.conn.list_since('INBOX', datetime(2025, 1, 1))

        assert total == 2
        with pytest.raises(StreamError) as exc_info:
            list(messages)
        assert exc_info.value.uid == 1

    def test_not_connected(self):
        self.conn.connection = None
        with pytest.raises(StreamError):
            self.conn.list_since('INBOX', datetime(2025, 1, 1))


def test_imap_date_is_locale_independent():
    assert imap_date(datetime(2025, 3, 5)) == '05-Mar-2025'
    assert imap_date(datetime(2024, 12, 31, 23, 59)) == '31-Dec-2024'
