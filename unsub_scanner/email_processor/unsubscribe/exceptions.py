"""
Custom exceptions for the scan pipeline with enhanced error context.

This module provides structured exception classes that carry context
information for better debugging and for user-facing error messages.
Only ConnectError, StreamError and WriteError end a run; DecodeError is
contained per message.
"""

from pathlib import Path
from typing import Dict, Any, Optional, Union


class ScanError(Exception):
    """Base class for scan pipeline failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        base_message = super().__str__()
        if self.context is not None and self.context:
            context_info = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base_message} (context: {context_info})"
        return base_message


class ConnectError(ScanError):
    """Raised when the IMAP connection or login fails."""

    def __init__(self, message: str, auth_failed: bool = False,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.auth_failed = auth_failed


class DecodeError(ScanError):
    """Raised when a raw message cannot be decoded."""

    def __init__(self, message: str, uid: Optional[int] = None):
        super().__init__(message, {'uid': uid} if uid is not None else None)
        self.uid = uid


class StreamError(ScanError):
    """Raised when message retrieval fails after the scan has started."""

    def __init__(self, message: str, mailbox: Optional[str] = None,
                 uid: Optional[int] = None):
        context = {}
        if mailbox:
            context['mailbox'] = mailbox
        if uid is not None:
            context['uid'] = uid
        super().__init__(message, context)
        self.mailbox = mailbox
        self.uid = uid


class WriteError(ScanError):
    """Raised when the report file cannot be written."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message, {'path': str(path)} if path else None)
        self.path = path
