"""
Configuration module.
"""

from .settings import (
    Config, ScanOptions, KNOWN_IMAP_HOSTS,
    imap_host_for_email, since_months_ago, load_config_from_env_file
)

__all__ = [
    'Config', 'ScanOptions', 'KNOWN_IMAP_HOSTS',
    'imap_host_for_email', 'since_months_ago', 'load_config_from_env_file'
]
