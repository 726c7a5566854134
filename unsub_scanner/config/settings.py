"""
Configuration settings for the unsubscribe scanner.
"""

import calendar
import os
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Optional


# Domains whose IMAP host does not follow the imap.<domain> convention
KNOWN_IMAP_HOSTS: Dict[str, str] = {
    'gmail.com': 'imap.gmail.com',
    'googlemail.com': 'imap.gmail.com',
    'outlook.com': 'outlook.office365.com',
    'hotmail.com': 'outlook.office365.com',
    'live.com': 'outlook.office365.com',
    'yahoo.com': 'imap.mail.yahoo.com',
    'icloud.com': 'imap.mail.me.com',
    'me.com': 'imap.mail.me.com',
    'mac.com': 'imap.mail.me.com',
    'aol.com': 'imap.aol.com',
}


class Config:
    """Configuration settings."""

    # IMAP connection settings
    IMAP_PORT = int(os.getenv('IMAP_PORT', '993'))
    IMAP_TIMEOUT = int(os.getenv('IMAP_TIMEOUT', '30'))
    DEFAULT_MAILBOX = os.getenv('DEFAULT_MAILBOX', 'INBOX')

    # Scan settings
    SCAN_MONTHS = int(os.getenv('SCAN_MONTHS', '3'))
    BATCH_SIZE = int(os.getenv('BATCH_SIZE', '40'))

    # Output settings
    OUTPUT_FILE = os.getenv('OUTPUT_FILE', 'output/unsubs.txt')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')

    @classmethod
    def get_output_path(cls, output_file: Optional[str] = None) -> Path:
        """Resolve the output file against the current working directory."""
        path = Path(output_file or cls.OUTPUT_FILE)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path


@dataclass(frozen=True)
class ScanOptions:
    """Resolved settings for a single scan run."""

    host: str
    username: str
    password: str
    port: int = Config.IMAP_PORT
    mailbox: str = Config.DEFAULT_MAILBOX
    output_file: str = Config.OUTPUT_FILE
    months: int = Config.SCAN_MONTHS
    batch_size: int = Config.BATCH_SIZE
    timeout: int = Config.IMAP_TIMEOUT
    use_ssl: bool = True

    def __post_init__(self):
        if not self.host:
            raise ValueError("IMAP host is required")
        if not self.username:
            raise ValueError("Username is required")
        if self.batch_size < 1:
            raise ValueError(f"Batch size must be at least 1, got {self.batch_size}")
        if self.months < 0:
            raise ValueError(f"Months must not be negative, got {self.months}")

    @property
    def output_path(self) -> Path:
        return Config.get_output_path(self.output_file)


def imap_host_for_email(email_address: str) -> Optional[str]:
    """
    Guess the IMAP host for an email address.

    Args:
        email_address: Address such as user@gmail.com

    Returns:
        Known host for the domain, imap.<domain> otherwise,
        or None if the address has no domain part
    """
    address = (email_address or '').strip()
    if '@' not in address:
        return None
    domain = address.split('@', 1)[1].lower()
    if not domain:
        return None
    return KNOWN_IMAP_HOSTS.get(domain, f'imap.{domain}')


def since_months_ago(months: int, today: Optional[date] = None) -> datetime:
    """
    Start of the scan window: N calendar months before today, at midnight.

    The day is clamped to the length of the target month, so 31 May
    minus 3 months is 28 (or 29) February.
    """
    today = today or date.today()
    month_index = today.year * 12 + (today.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(today.day, calendar.monthrange(year, month)[1])
    return datetime(year, month, day)


def load_config_from_env_file(env_file: str = '.env'):
    """Load configuration from environment file."""
    env_path = Path(env_file)
    if env_path.exists():
        from dotenv import load_dotenv
        load_dotenv(env_path)
