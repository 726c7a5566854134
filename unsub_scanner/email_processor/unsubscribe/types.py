"""
Type-safe dataclasses for the scan pipeline.

This module provides structured, immutable dataclasses for the values
passed between retrieval, processing, aggregation and reporting.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

# Comparison timestamp for messages without a usable Date header
LOWEST_TIMESTAMP = datetime.min


def comparison_timestamp(observed_at: Optional[datetime]) -> datetime:
    """Timestamp used to rank observations; missing dates rank lowest."""
    return observed_at if observed_at is not None else LOWEST_TIMESTAMP


class HeaderMap(Mapping[str, Any]):
    """
    Read-only header mapping with case-insensitive names.

    Names are lower-cased on the way in and on lookup. A header that occurs
    more than once maps to its first value; get_all() returns every value.
    """

    def __init__(self, items: Iterable[Tuple[str, Any]] = ()):
        self._values: Dict[str, List[Any]] = {}
        for name, value in items:
            self._values.setdefault(name.lower(), []).append(value)

    @classmethod
    def wrap(cls, headers: Optional[Mapping[str, Any]]) -> 'HeaderMap':
        if isinstance(headers, HeaderMap):
            return headers
        return cls((headers or {}).items())

    def __getitem__(self, name: str) -> Any:
        return self._values[name.lower()][0]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get_all(self, name: str) -> List[Any]:
        return list(self._values.get(name.lower(), []))


@dataclass(frozen=True)
class ParsedMessage:
    """Decoded view of one message."""

    headers: HeaderMap = field(default_factory=HeaderMap)
    sender: Optional[str] = None
    date: Optional[datetime] = None
    html: Optional[str] = None
    text: Optional[str] = None


@dataclass(frozen=True)
class RawMessage:
    """Undecoded message as delivered by the retrieval service."""

    uid: int
    seq: int
    source: bytes
    total: int = 0


@dataclass(frozen=True)
class CandidateResult:
    """Unsubscribe target found in a single message."""

    sender: str
    target: str
    observed_at: Optional[datetime] = None

    @property
    def timestamp(self) -> datetime:
        return comparison_timestamp(self.observed_at)


@dataclass(frozen=True)
class AggregateEntry:
    """Best known unsubscribe target for one sender."""

    target: str
    observed_at: Optional[datetime] = None

    @property
    def timestamp(self) -> datetime:
        return comparison_timestamp(self.observed_at)


@dataclass(frozen=True)
class RunSummary:
    """Outcome of a completed scan."""

    message_count: int
    distinct_sender_count: int
    output_path: Path

    @property
    def link_count(self) -> int:
        """One link is reported per distinct sender."""
        return self.distinct_sender_count
