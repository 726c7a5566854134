"""
Shared fixtures for scanner tests.
"""

from email.message import EmailMessage
from typing import Optional

import pytest

from unsub_scanner.email_processor.unsubscribe.types import RawMessage


def build_message(
    sender: Optional[str] = 'news@shop.example',
    date: Optional[str] = 'Mon, 01 Sep 2025 10:00:00 +0000',
    list_unsubscribe: Optional[str] = None,
    html: Optional[str] = None,
    text: Optional[str] = 'Hello there',
    subject: str = 'Weekly news'
) -> bytes:
    """Build raw RFC 822 bytes for a test message."""
    msg = EmailMessage()
    if sender:
        msg['From'] = f"Shop <{sender}>"
    msg['To'] = 'me@example.com'
    msg['Subject'] = subject
    if date:
        msg['Date'] = date
    if list_unsubscribe:
        msg['List-Unsubscribe'] = list_unsubscribe
    if text is not None:
        msg.set_content(text)
    if html is not None:
        if text is not None:
            msg.add_alternative(html, subtype='html')
        else:
            msg.set_content(html, subtype='html')
    return msg.as_bytes()


def raw_message(uid: int, source: bytes, total: int = 0) -> RawMessage:
    return RawMessage(uid=uid, seq=uid, source=source, total=total)


@pytest.fixture
def message_factory():
    """Factory for raw message bytes."""
    return build_message
