"""
Tests for configuration helpers.
"""

import os
from datetime import date, datetime

import pytest

from unsub_scanner.config import Config, ScanOptions, imap_host_for_email, since_months_ago
from unsub_scanner.config.settings import load_config_from_env_file


class TestImapHostForEmail:

    @pytest.mark.parametrize('address,expected', [
        ('someone@gmail.com', 'imap.gmail.com'),
        ('someone@GoogleMail.com', 'imap.gmail.com'),
        ('someone@hotmail.com', 'outlook.office365.com'),
        ('someone@me.com', 'imap.mail.me.com'),
        ('  someone@comcast.net ', 'imap.comcast.net'),
        ('someone@example.org', 'imap.example.org'),
    ])
    def test_host_lookup(self, address, expected):
        assert imap_host_for_email(address) == expected

    @pytest.mark.parametrize('address', ['', 'no-at-sign', 'trailing@', None])
    def test_no_domain(self, address):
        assert imap_host_for_email(address) is None


class TestSinceMonthsAgo:

    def test_default_window(self):
        assert since_months_ago(3, date(2025, 10, 19)) == datetime(2025, 7, 19, 0, 0, 0)

    def test_crosses_year_boundary(self):
        assert since_months_ago(3, date(2025, 2, 10)) == datetime(2024, 11, 10)

    def test_clamps_day_to_month_length(self):
        assert since_months_ago(3, date(2025, 5, 31)) == datetime(2025, 2, 28)
        assert since_months_ago(3, date(2024, 5, 31)) == datetime(2024, 2, 29)

    def test_zero_months_is_today_midnight(self):
        assert since_months_ago(0, date(2025, 10, 19)) == datetime(2025, 10, 19)

    def test_defaults_to_today(self):
        result = since_months_ago(0)
        assert result.date() == date.today()
        assert (result.hour, result.minute, result.second) == (0, 0, 0)


class TestScanOptions:

    def test_defaults(self):
        options = ScanOptions(host='imap.x.example', username='me@x.example', password='pw')
        assert options.port == Config.IMAP_PORT
        assert options.mailbox == Config.DEFAULT_MAILBOX
        assert options.months == Config.SCAN_MONTHS
        assert options.batch_size == Config.BATCH_SIZE

    def test_relative_output_resolved_against_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        options = ScanOptions(host='h', username='u', password='p', output_file='output/unsubs.txt')
        assert options.output_path == tmp_path / 'output' / 'unsubs.txt'

    def test_absolute_output_kept(self, tmp_path):
        target = tmp_path / 'list.txt'
        options = ScanOptions(host='h', username='u', password='p', output_file=str(target))
        assert options.output_path == target


class TestDefaults:

    def test_documented_defaults(self):
        # Class attributes are read from the environment at import
        overrides = ('IMAP_PORT', 'DEFAULT_MAILBOX', 'OUTPUT_FILE', 'SCAN_MONTHS', 'BATCH_SIZE')
        if any(os.getenv(name) for name in overrides):
            pytest.skip("defaults overridden by environment")
        assert Config.IMAP_PORT == 993
        assert Config.DEFAULT_MAILBOX == 'INBOX'
        assert Config.OUTPUT_FILE == 'output/unsubs.txt'
        assert Config.SCAN_MONTHS == 3
        assert Config.BATCH_SIZE == 40


def test_load_config_from_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / '.env'
    env_file.write_text('UNSUB_SCANNER_TEST_VALUE=from-dotenv\n')
    monkeypatch.delenv('UNSUB_SCANNER_TEST_VALUE', raising=False)

    load_config_from_env_file(str(env_file))

    assert os.environ['UNSUB_SCANNER_TEST_VALUE'] == 'from-dotenv'
    monkeypatch.delenv('UNSUB_SCANNER_TEST_VALUE')


def test_missing_env_file_is_ignored(tmp_path):
    load_config_from_env_file(str(tmp_path / 'missing.env'))
