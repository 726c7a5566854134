"""
Email processing modules.
"""

from .scanner import UnsubscribeScanner, ScanState
from .imap_client import IMAPConnection
from .aggregator import merge_results
from .report import ReportWriter

__all__ = ['UnsubscribeScanner', 'ScanState', 'IMAPConnection', 'merge_results', 'ReportWriter']
