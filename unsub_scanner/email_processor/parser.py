"""
Raw RFC 822 message decoding.
"""

import re
from datetime import datetime, timezone
from email import message_from_bytes, policy
from email.message import Message
from email.utils import getaddresses, parsedate_to_datetime
from typing import List, Optional, Tuple, Union

from .unsubscribe.exceptions import DecodeError
from .unsubscribe.types import HeaderMap, ParsedMessage

_FOLD_PATTERN = re.compile(r'\r?\n(?=[ \t])')

# Raised by the stdlib address and date parsers on malformed values
_HEADER_PARSE_ERRORS = (TypeError, ValueError, IndexError, AttributeError, OverflowError)


def decode(raw: Union[bytes, bytearray, str], uid: Optional[int] = None) -> ParsedMessage:
    """
    Decode a raw message into headers, sender, date and bodies.

    Args:
        raw: Message source as fetched from the server
        uid: Message UID, carried into any DecodeError

    Raises:
        DecodeError: If the source is not a message we can read
    """
    if isinstance(raw, str):
        raw = raw.encode('utf-8', errors='surrogateescape')
    if not isinstance(raw, (bytes, bytearray)):
        raise DecodeError(f"Expected message bytes, got {type(raw).__name__}", uid=uid)

    try:
        email_msg = message_from_bytes(bytes(raw), policy=policy.default)
        headers = HeaderMap(_raw_headers(email_msg))
        sender = _parse_sender(headers.get_all('from'))
        date_sent = _parse_date(headers.get('date'))
        html, text = _extract_bodies(email_msg)
    except DecodeError:
        raise
    except Exception as e:
        raise DecodeError(f"{type(e).__name__}: {e}", uid=uid) from e

    return ParsedMessage(
        headers=headers,
        sender=sender,
        date=date_sent,
        html=html,
        text=text,
    )


def _raw_headers(email_msg: Message) -> List[Tuple[str, str]]:
    """
    Header names and unfolded values, without structured parsing.

    Values are left as sent so a malformed header the message does not
    need (Message-ID, To) cannot fail the whole decode.
    """
    headers = []
    for name, value in email_msg.raw_items():
        value = _FOLD_PATTERN.sub('', str(value))
        # Undecodable 8-bit bytes arrive as surrogates
        value = value.encode('utf-8', errors='surrogateescape').decode('utf-8', errors='replace')
        headers.append((name, value.strip()))
    return headers


def _parse_sender(from_values: List[str]) -> Optional[str]:
    """First address of the From header, as written."""
    try:
        addresses = getaddresses(from_values)
    except _HEADER_PARSE_ERRORS:
        return None
    for _, address in addresses:
        local, _, domain = (address or '').strip().rpartition('@')
        if local and domain:
            return f"{local}@{domain}"
    return None


def _parse_date(date_header) -> Optional[datetime]:
    """Parse the Date header into a naive UTC datetime."""
    if not date_header:
        return None
    try:
        date_sent = parsedate_to_datetime(str(date_header))
    except _HEADER_PARSE_ERRORS:
        return None
    if date_sent is None:
        return None
    # Convert to UTC if timezone aware
    if date_sent.tzinfo is not None:
        date_sent = date_sent.astimezone(timezone.utc).replace(tzinfo=None)
    return date_sent


def _decode_part(part: Message) -> str:
    payload = part.get_payload(decode=True)
    if payload is None:
        return ''
    charset = part.get_content_charset() or 'utf-8'
    try:
        return payload.decode(charset, errors='replace')
    except LookupError:
        # Unknown charset name
        return payload.decode('utf-8', errors='replace')


def _extract_bodies(email_msg: Message) -> Tuple[Optional[str], Optional[str]]:
    """First text/html and first text/plain part that are not attachments."""
    html = None
    text = None

    for part in email_msg.walk():
        if part.is_multipart():
            continue
        if part.get_content_disposition() == 'attachment':
            continue
        content_type = part.get_content_type()
        if content_type == 'text/html' and html is None:
            html = _decode_part(part) or None
        elif content_type == 'text/plain' and text is None:
            text = _decode_part(part) or None

    return html, text
