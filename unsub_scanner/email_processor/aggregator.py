"""
Most-recent-wins aggregation of per-message results by sender.
"""

from typing import Dict, Iterable, Optional

from .unsubscribe.types import AggregateEntry, CandidateResult

Aggregate = Dict[str, AggregateEntry]


def merge_results(aggregate: Aggregate, results: Iterable[Optional[CandidateResult]]) -> Aggregate:
    """
    Fold a batch of results into the aggregate, in list order.

    A sender's entry is replaced only by a strictly newer result, so among
    results with equal timestamps the first one merged is kept. Results
    without a date rank below every dated one.

    The aggregate is updated in place and also returned.
    """
    for result in results:
        if result is None or not result.target:
            continue
        existing = aggregate.get(result.sender)
        if existing is None or result.timestamp > existing.timestamp:
            aggregate[result.sender] = AggregateEntry(
                target=result.target,
                observed_at=result.observed_at
            )
    return aggregate
