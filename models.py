from dataclasses import dataclass, field
from operator import attrgetter
from typing import FrozenSet, Iterable, Tuple

START_OF_DAY = 0
END_OF_DAY = 24 * 60 - 1  # last minute of the day, used as an inclusive bound
DAY_LENGTH = 24 * 60

@dataclass
class Member:
    name: str
    calendar_id: str

@dataclass(frozen=True)
class TimeRange:
    """Half-open range of minutes [start, end) within a single day."""
    start: int
    end: int

    def __post_init__(self):
        if not 0 <= self.start <= self.end <= DAY_LENGTH:
            raise ValueError(f"Invalid time range [{self.start}, {self.end}): must satisfy 0 <= start <= end <= {DAY_LENGTH}")

    @property
    def duration(self) -> int:
        return self.end - self.start

    def contains(self, other: 'TimeRange') -> bool:
        """Check if a whole range lies inside this range."""
        return other.start >= self.start and other.end <= self.end

    def overlaps(self, other: 'TimeRange') -> bool:
        """Check if two ranges share at least one minute."""
        return (self.start <= other.start < self.end) or (other.start <= self.start < other.end)

    @classmethod
    def from_start_duration(cls, start: int, duration: int) -> 'TimeRange':
        return cls(start, start + duration)

    @classmethod
    def from_start_end(cls, start: int, end: int, inclusive: bool) -> 'TimeRange':
        # An inclusive END_OF_DAY resolves to the real day boundary.
        return cls(start, end + 1 if inclusive else end)

    def __str__(self):
        return f"{format_clock(self.start)}-{format_clock(self.end)}"

WHOLE_DAY = TimeRange(START_OF_DAY, DAY_LENGTH)

ORDER_BY_START = attrgetter('start')

def format_clock(minutes: int) -> str:
    """Format minutes since midnight as HH:MM."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"

def _unique(names: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(names))

@dataclass(frozen=True)
class Event:
    name: str
    when: TimeRange
    attendees: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, 'attendees', frozenset(self.attendees))

@dataclass(frozen=True)
class MeetingRequest:
    duration: int  # in minutes
    attendees: Tuple[str, ...] = ()
    optional_attendees: Tuple[str, ...] = ()  # order sets inclusion priority

    def __post_init__(self):
        object.__setattr__(self, 'attendees', _unique(self.attendees))
        # Mandatory attendees are never also optional
        optional = [name for name in self.optional_attendees if name not in self.attendees]
        object.__setattr__(self, 'optional_attendees', _unique(optional))
