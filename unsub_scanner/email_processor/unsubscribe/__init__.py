"""
Unsubscribe extraction and processing module.

This module provides the per-message half of the scan pipeline:
- Target extraction from the List-Unsubscribe header and HTML body
- Message processing that turns raw messages into candidate results
- Shared types, constants, exceptions and structured logging
"""

from .extractors import UnsubscribeLinkExtractor
from .processors import MessageProcessor
from .exceptions import ScanError, ConnectError, DecodeError, StreamError, WriteError
from .types import (
    RawMessage, ParsedMessage, HeaderMap, CandidateResult,
    AggregateEntry, RunSummary
)

__all__ = [
    'UnsubscribeLinkExtractor',
    'MessageProcessor',
    'ScanError',
    'ConnectError',
    'DecodeError',
    'StreamError',
    'WriteError',
    'RawMessage',
    'ParsedMessage',
    'HeaderMap',
    'CandidateResult',
    'AggregateEntry',
    'RunSummary'
]
