from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from logging_config import get_logger
from models import DAY_LENGTH, END_OF_DAY, ORDER_BY_START, START_OF_DAY, Event, MeetingRequest, TimeRange

logger = get_logger(__name__)

# The optional-attendee search is exponential in the number of optional attendees
MAX_OPTIONAL_ATTENDEES_HINT = 16

# ===== Busy and Free Time =====

def busy_times(events: Iterable[Event], attendees: Iterable[str]) -> List[TimeRange]:
    """Return the time range of every event attended by at least one of the given attendees."""
    targets = set(attendees)
    return [event.when for event in events if not event.attendees.isdisjoint(targets)]

def remove_nested(times: List[TimeRange]) -> List[TimeRange]:
    """Drop ranges contained in the previously kept range of a list sorted by start."""
    kept = []
    for time_range in times:
        if kept and kept[-1].contains(time_range):
            continue
        kept.append(time_range)
    return kept

def free_times(busy: Iterable[TimeRange], min_duration: int) -> List[TimeRange]:
    """Return the gaps between busy ranges that last at least min_duration minutes."""
    busy = remove_nested(sorted(busy, key=ORDER_BY_START))
    available = []
    if not busy:
        _add_if_possible(available, START_OF_DAY, END_OF_DAY, min_duration, inclusive=True)
        return available
    _add_if_possible(available, START_OF_DAY, busy[0].start, min_duration, inclusive=False)
    for previous, current in zip(busy, busy[1:]):
        _add_if_possible(available, previous.end, current.start, min_duration, inclusive=False)
    _add_if_possible(available, busy[-1].end, END_OF_DAY, min_duration, inclusive=True)
    return available

def _add_if_possible(times, start, end, min_duration, inclusive):
    # Resolve the end first so the inclusive END_OF_DAY bound counts its last minute
    resolved_end = end + 1 if inclusive else end
    if start >= resolved_end or resolved_end - start < min_duration:
        return
    times.append(TimeRange.from_start_end(start, end, inclusive))

# ===== Optional Attendee Search =====

class OptionalAttendeeOptimizer:
    """
    Find the largest group of optional attendees that can join the mandatory ones.

    Each candidate group is a bitmask over the request's optional attendees, bit i
    standing for the i-th listed attendee. Candidates are tried largest first and,
    within one size, in the order that keeps earlier-listed attendees, so the first
    candidate with a free slot is the answer. Free slots are memoised per bitmask.
    """

    def __init__(self, events: Iterable[Event], request: MeetingRequest):
        self.events = list(events)
        self.request = request
        self.optional = request.optional_attendees
        self._memo: Dict[int, List[TimeRange]] = {}
        if len(self.optional) > MAX_OPTIONAL_ATTENDEES_HINT:
            logger.warning(f"Searching {2 ** len(self.optional)} groups of {len(self.optional)} optional attendees; this may be slow")

    def attendees_for(self, mask: int) -> Tuple[str, ...]:
        return tuple(name for i, name in enumerate(self.optional) if mask >> i & 1)

    def slots_for(self, mask: int) -> List[TimeRange]:
        if mask not in self._memo:
            targets = list(self.request.attendees) + list(self.attendees_for(mask))
            self._memo[mask] = free_times(busy_times(self.events, targets), self.request.duration)
        return self._memo[mask]

    def candidates(self) -> Iterator[int]:
        """Yield candidate masks from most to least preferred; on equal size the earlier-listed attendee wins."""
        count = len(self.optional)
        # Without mandatory attendees an empty group is not a meeting
        smallest = 0 if self.request.attendees else 1
        for size in range(count, smallest - 1, -1):
            for kept in combinations(range(count), size):
                yield sum(1 << i for i in kept)

    def best_mask(self) -> Optional[int]:
        tried = 0
        for mask in self.candidates():
            tried += 1
            if self.slots_for(mask):
                logger.debug(f"Selected optional attendees {list(self.attendees_for(mask))} after {tried} candidate(s)")
                return mask
        logger.debug(f"No feasible group among {tried} candidate(s)")
        return None

    def solve(self) -> Tuple[Tuple[str, ...], List[TimeRange]]:
        mask = self.best_mask()
        if mask is None:
            return (), []
        return self.attendees_for(mask), list(self.slots_for(mask))

# ===== Entry Point =====

@dataclass
class QueryResult:
    slots: List[TimeRange] = field(default_factory=list)
    optional_attendees: Tuple[str, ...] = ()  # optional attendees free in every slot

class MeetingQuery:
    def resolve(self, events: Iterable[Event], request: MeetingRequest) -> QueryResult:
        """Find meeting slots and report which optional attendees they satisfy."""
        if request.duration <= 0 or request.duration > DAY_LENGTH:
            logger.debug(f"Duration {request.duration} cannot fit in a day")
            return QueryResult()
        if not request.optional_attendees:
            busy = busy_times(events, request.attendees)
            return QueryResult(free_times(busy, request.duration))
        attendees, slots = OptionalAttendeeOptimizer(events, request).solve()
        return QueryResult(slots, attendees)

    def query(self, events: Iterable[Event], request: MeetingRequest) -> List[TimeRange]:
        return self.resolve(events, request).slots
