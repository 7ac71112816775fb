"""
Track assignment for timeline intervals.

Greedy interval partitioning: intervals sorted by (start, id) go to the first
track with no half-open overlap. Taking intervals by start order yields the
minimum track count (the largest set of simultaneously active intervals), and
the id tiebreak makes the result independent of input order.
"""

from typing import Iterable

from worldline.models import Interval, TimelineEvent, TrackLayout


class _Track:
    __slots__ = ("max_end", "members")

    def __init__(self):
        self.max_end = float("-inf")
        self.members: list[Interval] = []

    def accepts(self, interval: Interval) -> bool:
        # Members all start at or before the candidate, so anything that
        # ended by its start cannot overlap.
        if self.max_end <= interval.start:
            return True
        if interval.stop > interval.start:
            return False
        # A zero-width candidate only conflicts with a member strictly around it.
        return not any(interval.overlaps(member) for member in self.members)

    def add(self, interval: Interval) -> None:
        self.members.append(interval)
        self.max_end = max(self.max_end, interval.stop)


def _as_intervals(items: Iterable[Interval | TimelineEvent]) -> list[Interval]:
    return [item.interval() if isinstance(item, TimelineEvent) else item for item in items]


def layout_tracks(items: Iterable[Interval | TimelineEvent]) -> TrackLayout:
    """Assign tracks and report which ids landed on each one."""
    ordered = sorted(_as_intervals(items), key=lambda iv: (iv.start, iv.id))
    tracks: list[_Track] = []
    assignments: dict[str, int] = {}

    for interval in ordered:
        for index, track in enumerate(tracks):
            if track.accepts(interval):
                break
        else:
            index = len(tracks)
            tracks.append(_Track())
        tracks[index].add(interval)
        assignments[interval.id] = index

    return TrackLayout(
        assignments=assignments,
        tracks=[[member.id for member in track.members] for track in tracks],
    )


def assign_tracks(items: Iterable[Interval | TimelineEvent]) -> dict[str, int]:
    """Map each interval id to a 0-based track index."""
    return layout_tracks(items).assignments
