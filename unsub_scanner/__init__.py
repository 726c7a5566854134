"""
Unsubscribe Scanner: collect unsubscribe links from a mailbox.
"""

__version__ = '1.0.0'
