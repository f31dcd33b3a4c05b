"""
Overlap Grouper - Partitions a day's events into overlap clusters

A cluster is a maximal set of events connected by pairwise time overlap.
Events in a chain (A overlaps B, B overlaps C, A and C disjoint) share one
cluster because they still have to share column space.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence

from ..models import CalendarEvent


@dataclass(frozen=True)
class Span:
    """
    A half-open [start, end) range identified by ``key``.

    Timed events use datetimes, the all-day lane uses visible day indices.
    """

    key: str
    start: Any
    end: Any

    @property
    def length(self):
        return self.end - self.start

    def overlaps(self, other: "Span") -> bool:
        return self.start < other.end and other.start < self.end


def event_span(event: CalendarEvent) -> Span:
    return Span(key=event.id, start=event.start, end=event.end)


def sort_spans(spans: Iterable[Span]) -> List[Span]:
    """
    Canonical packing order: start, then longer first, then key.

    Greedy packing depends on this order, so exact ties are broken by key
    instead of by input position.
    """
    return sorted(spans, key=lambda s: (s.start, -s.length, s.key))


def group_spans(spans: Iterable[Span]) -> List[List[Span]]:
    """
    Group spans into overlap clusters.

    Args:
        spans: Spans in any order

    Returns:
        Clusters in canonical order, each cluster's members in canonical order
    """
    clusters: List[List[Span]] = []

    for span in sort_spans(spans):
        for cluster in clusters:
            if any(span.overlaps(member) for member in cluster):
                cluster.append(span)
                break
        else:
            clusters.append([span])

    return clusters


class OverlapGrouper:
    """Groups one day's events into clusters that must share column space."""

    def group(self, day_events: Sequence[CalendarEvent]) -> List[List[CalendarEvent]]:
        """
        Partition events into overlap clusters.

        Args:
            day_events: Events already filtered to one day

        Returns:
            List of clusters; each cluster lists its events in packing order
        """
        by_id = {event.id: event for event in day_events}
        return [
            [by_id[span.key] for span in cluster]
            for cluster in group_spans(event_span(event) for event in day_events)
        ]
