"""Calendar synchronizer that adds found events to a Google calendar."""
import logging
from datetime import datetime
from typing import Sequence, Tuple

from gateway.errors import GatewayCredentialError, GatewayError
from gateway.google import CreateEventRequest, GoogleCalendarClient
from processor.errors import CalendarNotFoundError, EventDateError
from processor.models import (
    CalendarTarget,
    Event,
    EventCreationResult,
    FailurePolicy,
    SyncResult,
)

logger = logging.getLogger(__name__)


class CalendarSynchronizer:
    """Creates calendar entries for events, one remote call per event."""

    START_DATE_FORMATS = [
        '%a, %d %b %Y %H:%M:%S',   # Last.fm
        '%Y-%m-%dT%H:%M:%S',       # ISO 8601
        '%Y-%m-%d %H:%M:%S',
        '%Y-%m-%dT%H:%M',
        '%Y-%m-%d',
    ]

    def __init__(self, calendar: GoogleCalendarClient):
        """
        Initialize the synchronizer.

        Args:
            calendar: Client for calendar lookup and event creation
        """
        self.calendar = calendar

    def resolve_calendar(self, name: str) -> CalendarTarget:
        """
        Look up the destination calendar by display name.

        Args:
            name: Calendar display name

        Returns:
            CalendarTarget with its identifier resolved

        Raises:
            CalendarNotFoundError: If no calendar has that name
        """
        try:
            calendar_id = self.calendar.search_calendar_by_name(name)
        except GatewayError as e:
            logger.error(f"Failed to locate calendar '{name}': {e}")
            raise

        if not calendar_id:
            logger.error(f"Calendar '{name}' not found")
            raise CalendarNotFoundError(name)

        logger.info(f"Successfully located calendar '{name}'")
        return CalendarTarget(name=name, calendar_id=calendar_id)

    def sync_events(
        self,
        target: CalendarTarget,
        events: Sequence[Event],
        policy: FailurePolicy = FailurePolicy.ABORT
    ) -> SyncResult:
        """
        Create a calendar entry for each event, in order.

        Entries are not de-duplicated: syncing the same events twice creates
        them twice.

        Args:
            target: Resolved destination calendar
            events: Events to add
            policy: ABORT stops at the first failed event; CONTINUE carries on

        Returns:
            SyncResult with one outcome per attempted event

        Raises:
            CalendarNotFoundError: If the target has no resolved identifier
            GatewayCredentialError: If credentials are rejected mid-run
        """
        if not target.calendar_id:
            raise CalendarNotFoundError(target.name)

        result = SyncResult(events_found=len(events))

        for event in events:
            outcome = self._create_event(target, event)
            result.outcomes.append(outcome)

            if outcome.created:
                result.events_added += 1
                continue

            if policy is FailurePolicy.ABORT:
                remaining = len(events) - len(result.outcomes)
                logger.error(
                    f"Aborting sync after failure at {outcome.describe()}; "
                    f"{remaining} events not attempted"
                )
                result.aborted = True
                break

        logger.info(
            f"Successfully added {result.events_added} of {len(events)} "
            f"events to {target.name}"
        )
        return result

    def _create_event(self, target: CalendarTarget, event: Event) -> EventCreationResult:
        """
        Format and create a single event.

        Args:
            target: Resolved destination calendar
            event: Event to add

        Returns:
            EventCreationResult describing the attempt
        """
        try:
            start_date, start_time = self.split_start_date(event.start_date)
        except EventDateError as e:
            logger.warning(f"Failed to save event at {event.venue}: {e}")
            return EventCreationResult(event=event, created=False, error=str(e))

        # No duration in the source data, so the event ends when it starts
        request = CreateEventRequest(
            calendar_id=target.calendar_id,
            title=event.title,
            location=event.venue,
            description=event.description or '',
            start_date=start_date,
            start_time=start_time,
            end_date=start_date,
            end_time=start_time
        )

        try:
            self.calendar.create_event(request)
        except GatewayCredentialError:
            raise
        except GatewayError as e:
            logger.error(
                f"Failed to save event at {event.venue} on {start_date} "
                f"to {target.name}: {e}"
            )
            return EventCreationResult(
                event=event,
                created=False,
                start_date=start_date,
                start_time=start_time,
                error=str(e)
            )

        logger.info(f"Successfully added {event.venue} date to {target.name}")
        return EventCreationResult(
            event=event,
            created=True,
            start_date=start_date,
            start_time=start_time
        )

    def split_start_date(self, raw: str) -> Tuple[str, str]:
        """
        Split a raw start timestamp into calendar date and time of day.

        Args:
            raw: Start timestamp as provided by the source

        Returns:
            Tuple of (YYYY-MM-DD, HH:MM:SS)

        Raises:
            EventDateError: If no known format matches
        """
        if not raw or not raw.strip():
            raise EventDateError("missing start date")

        for fmt in self.START_DATE_FORMATS:
            try:
                parsed = datetime.strptime(raw.strip(), fmt)
            except ValueError:
                continue
            return parsed.strftime('%Y-%m-%d'), parsed.strftime('%H:%M:%S')

        raise EventDateError(f"unrecognized start date {raw!r}")
