"""
Constants shared across unsubscribe extraction and reporting.
"""

from typing import Tuple

# RFC 2369 header, stored lower-case for the case-insensitive lookup
LIST_UNSUBSCRIBE_HEADER = 'list-unsubscribe'

HTTP_PREFIX = 'http://'
HTTPS_PREFIX = 'https://'
MAILTO_PREFIX = 'mailto:'

WEB_PREFIXES: Tuple[str, ...] = (HTTPS_PREFIX, HTTP_PREFIX)
VALID_TARGET_PREFIXES: Tuple[str, ...] = (HTTPS_PREFIX, HTTP_PREFIX, MAILTO_PREFIX)

# Substring looked for in anchor text and href during HTML fallback
UNSUBSCRIBE_KEYWORD = 'unsubscribe'

# Sender used when the From header has no usable address
UNKNOWN_SENDER = '(unknown)'

# Date field used in the report for messages without a Date header
UNKNOWN_DATE = 'unknown'

# Output file contents outside of a finished report
SCANNING_PLACEHOLDER = '(Scanning… results will appear here.)'
FAILURE_PLACEHOLDER = '(Scan failed)'
