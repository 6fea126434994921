"""Data models for event search and calendar sync."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass
class Event:
    """Performance found for an artist."""
    band: str
    title: str
    venue: str
    city: str
    start_date: Optional[str]
    description: Optional[str] = None


@dataclass
class EventSearch:
    """Events matching a town, plus the total the source reported."""
    total_found: int
    events: List[Event]


@dataclass
class CalendarTarget:
    """Destination calendar, resolved by name."""
    name: str
    calendar_id: Optional[str] = None


class FailurePolicy(Enum):
    """What to do after an event fails to be created."""
    ABORT = 'abort'
    CONTINUE = 'continue'


@dataclass
class EventCreationResult:
    """Outcome of one attempt to create a calendar event."""
    event: Event
    created: bool
    start_date: Optional[str] = None
    start_time: Optional[str] = None
    error: Optional[str] = None

    def describe(self) -> str:
        when = self.start_date or self.event.start_date or 'unknown date'
        return f"{self.event.venue} on {when}"


@dataclass
class SyncResult:
    """Result of sync operation."""
    events_found: int
    events_added: int = 0
    outcomes: List[EventCreationResult] = field(default_factory=list)
    aborted: bool = False

    @property
    def failures(self) -> List[EventCreationResult]:
        return [outcome for outcome in self.outcomes if not outcome.created]

    @property
    def errors(self) -> List[str]:
        return [
            f"{outcome.describe()}: {outcome.error}" for outcome in self.failures
        ]


@dataclass
class Document:
    """Google document listed for backup."""
    title: str
    link: str


@dataclass
class BackupResult:
    folder: str
    uploaded: List[str] = field(default_factory=list)


@dataclass
class StepStatusResult:
    steps: int
    benchmark: int
    goal_met: bool
    message: str
