"""
Unsubscribe target extraction from email headers and HTML body content.

A message yields at most one target, chosen in this order:
- List-Unsubscribe header (RFC 2369), first http(s) entry
- List-Unsubscribe header, first mailto entry
- First HTML anchor mentioning "unsubscribe" whose href is http(s) or mailto
"""

from typing import Any, List, Mapping, Optional
from bs4 import BeautifulSoup

from .constants import (
    LIST_UNSUBSCRIBE_HEADER, MAILTO_PREFIX, UNSUBSCRIBE_KEYWORD,
    VALID_TARGET_PREFIXES, WEB_PREFIXES
)
from .types import HeaderMap


def _header_text(raw: Any) -> str:
    """Flatten a header value (string, header object or list) to text."""
    if raw is None:
        return ''
    if isinstance(raw, (list, tuple)):
        return ', '.join(_header_text(item) for item in raw if item is not None)
    return str(raw)


def is_valid_target(href: Optional[str]) -> bool:
    """Check if href uses a scheme we can report (http, https, mailto)."""
    if not href or not isinstance(href, str):
        return False
    return href.strip().lower().startswith(VALID_TARGET_PREFIXES)


class UnsubscribeLinkExtractor:
    """Extract a single unsubscribe target from a parsed message."""

    def parse_header_segments(self, header_value: str) -> List[str]:
        """
        Split a List-Unsubscribe value into its entries.

        Each comma-separated segment contributes the text between its first
        '<' and the following '>', or the whole trimmed segment when it is
        not bracketed.

        Example:
            "<mailto:a@x.com>, <https://x.com/u>"
            becomes ["mailto:a@x.com", "https://x.com/u"]
        """
        segments = []
        for part in header_value.split(','):
            content = part.strip()
            start = content.find('<')
            if start != -1:
                end = content.find('>', start + 1)
                if end != -1:
                    content = content[start + 1:end]
            content = content.strip()
            if content:
                segments.append(content)
        return segments

    def extract_from_headers(self, headers: Mapping[str, Any]) -> Optional[str]:
        """Pick the preferred entry of the List-Unsubscribe header, if any."""
        header_value = _header_text(HeaderMap.wrap(headers).get(LIST_UNSUBSCRIBE_HEADER)).strip()
        if not header_value:
            return None

        first_mailto = None
        for segment in self.parse_header_segments(header_value):
            lower = segment.lower()
            if lower.startswith(WEB_PREFIXES):
                return segment
            if first_mailto is None and lower.startswith(MAILTO_PREFIX):
                first_mailto = segment
        return first_mailto

    def extract_from_html(self, html_content: Optional[str]) -> Optional[str]:
        """Find the first unsubscribe anchor with a usable href."""
        if not html_content or not isinstance(html_content, str):
            return None

        try:
            soup = BeautifulSoup(html_content, 'html.parser')
            anchors = soup.find_all('a')
        except Exception:
            return None

        for anchor in anchors:
            href = anchor.get('href')
            if isinstance(href, list):
                href = ' '.join(href)
            text = anchor.get_text().strip().lower()
            href_lower = (href or '').lower()
            if UNSUBSCRIBE_KEYWORD not in text and UNSUBSCRIBE_KEYWORD not in href_lower:
                continue
            if is_valid_target(href):
                return href.strip()

        return None

    def extract(self, headers: Mapping[str, Any], html_content: Optional[str]) -> Optional[str]:
        """Unsubscribe target for a message: header first, HTML body as fallback."""
        from_header = self.extract_from_headers(headers)
        if from_header:
            return from_header
        return self.extract_from_html(html_content)
