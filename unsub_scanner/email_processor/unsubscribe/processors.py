"""
Per-message processing: decode a raw message and extract its target.

MessageProcessor.process() is called concurrently from the scanner's
worker threads. It only reads its inputs and never raises for a message
that fails to decode, so one malformed message cannot abort a scan.
"""

from typing import Callable, Optional

from ..parser import decode
from .constants import UNKNOWN_SENDER
from .exceptions import DecodeError
from .extractors import UnsubscribeLinkExtractor
from .logging import ScanLogger
from .types import CandidateResult, ParsedMessage, RawMessage


class MessageProcessor:
    """Turn one raw message into zero or one CandidateResult."""

    def __init__(
        self,
        extractor: Optional[UnsubscribeLinkExtractor] = None,
        decoder: Optional[Callable[..., ParsedMessage]] = None
    ):
        self.extractor = extractor or UnsubscribeLinkExtractor()
        self.decoder = decoder or decode
        self.logger = ScanLogger("message_processor")

    def process(self, message: RawMessage) -> Optional[CandidateResult]:
        """
        Process a single message.

        Args:
            message: Raw message from the retrieval stream

        Returns:
            CandidateResult when the message names an unsubscribe target,
            None when it does not or when it cannot be decoded
        """
        try:
            parsed = self.decoder(message.source, uid=message.uid)
        except DecodeError as e:
            self.logger.warning("Message could not be decoded", {
                'uid': message.uid,
                'reason': e.message
            })
            return None

        target = self.extractor.extract(parsed.headers, parsed.html)
        if not target:
            return None

        return CandidateResult(
            sender=parsed.sender or UNKNOWN_SENDER,
            target=target,
            observed_at=parsed.date
        )
