"""Unit tests for CalendarSynchronizer."""
from unittest.mock import Mock

import pytest

from gateway.errors import GatewayCredentialError, GatewayHTTPError, GatewayTransportError
from gateway.google import CreateEventRequest
from processor.calendar_sync import CalendarSynchronizer
from processor.errors import CalendarNotFoundError, EventDateError
from processor.models import CalendarTarget, Event, FailurePolicy


def make_event(venue, start_date="2012-08-15T20:00:00", description=None):
    return Event(
        band="Spoon",
        title=f"Spoon at {venue}",
        venue=venue,
        city="Austin",
        start_date=start_date,
        description=description
    )


@pytest.fixture
def calendar():
    """Create a mock Google Calendar client."""
    client = Mock()
    client.search_calendar_by_name.return_value = "cal-123"
    client.create_event.return_value = {'Response': '{}'}
    return client


@pytest.fixture
def synchronizer(calendar):
    return CalendarSynchronizer(calendar)


@pytest.fixture
def target():
    return CalendarTarget(name="MyConcerts", calendar_id="cal-123")


@pytest.fixture
def three_events():
    return [
        make_event("Stubb's", "2012-08-15T20:00:00"),
        make_event("Emo's", "2012-08-16T21:00:00"),
        make_event("Mohawk", "2012-08-17T19:30:00"),
    ]


class TestResolveCalendar:
    """Test cases for calendar lookup."""

    def test_resolve_calendar_success(self, synchronizer, calendar):
        target = synchronizer.resolve_calendar("MyConcerts")

        assert target == CalendarTarget(name="MyConcerts", calendar_id="cal-123")
        calendar.search_calendar_by_name.assert_called_once_with("MyConcerts")

    def test_resolve_calendar_not_found(self, synchronizer, calendar):
        """Test that a missing calendar fails distinctly."""
        calendar.search_calendar_by_name.return_value = None

        with pytest.raises(CalendarNotFoundError) as exc_info:
            synchronizer.resolve_calendar("Nope")

        assert exc_info.value.calendar_name == "Nope"
        calendar.create_event.assert_not_called()

    def test_resolve_calendar_remote_failure_propagates(self, synchronizer, calendar):
        calendar.search_calendar_by_name.side_effect = GatewayTransportError("timed out")

        with pytest.raises(GatewayTransportError):
            synchronizer.resolve_calendar("MyConcerts")


class TestSyncEvents:
    """Test cases for event creation."""

    def test_sync_events_empty_makes_no_calls(self, synchronizer, calendar, target):
        """Test that syncing no events issues no remote call."""
        result = synchronizer.sync_events(target, [])

        assert result.events_found == 0
        assert result.events_added == 0
        assert result.outcomes == []
        calendar.create_event.assert_not_called()
        calendar.search_calendar_by_name.assert_not_called()

    def test_sync_events_all_succeed(self, synchronizer, calendar, target, three_events):
        result = synchronizer.sync_events(target, three_events)

        assert result.events_found == 3
        assert result.events_added == 3
        assert result.aborted is False
        assert result.failures == []
        assert result.errors == []

    def test_sync_events_preserves_order(self, synchronizer, calendar, target, three_events):
        synchronizer.sync_events(target, three_events)

        locations = [call.args[0].location for call in calendar.create_event.call_args_list]
        assert locations == ["Stubb's", "Emo's", "Mohawk"]

    def test_sync_events_same_start_and_end(self, synchronizer, calendar, target):
        """Test that the start timestamp is split and reused as the end."""
        synchronizer.sync_events(target, [make_event("Stubb's", "2012-08-15T20:00:00")])

        calendar.create_event.assert_called_once_with(CreateEventRequest(
            calendar_id="cal-123",
            title="Spoon at Stubb's",
            location="Stubb's",
            description="",
            start_date="2012-08-15",
            start_time="20:00:00",
            end_date="2012-08-15",
            end_time="20:00:00"
        ))

    def test_sync_events_passes_description(self, synchronizer, calendar, target):
        synchronizer.sync_events(target, [make_event("Stubb's", description="All ages")])

        request = calendar.create_event.call_args.args[0]
        assert request.description == "All ages"

    def test_sync_events_lastfm_date_format(self, synchronizer, calendar, target):
        result = synchronizer.sync_events(
            target, [make_event("Stubb's", "Wed, 15 Aug 2012 20:00:00")]
        )

        request = calendar.create_event.call_args.args[0]
        assert (request.start_date, request.start_time) == ("2012-08-15", "20:00:00")
        assert result.outcomes[0].start_date == "2012-08-15"

    def test_sync_events_abort_on_first_failure(self, synchronizer, calendar, target, three_events):
        """Test that the second failure stops the loop before the third event."""
        calendar.create_event.side_effect = [
            {'Response': '{}'},
            GatewayHTTPError("HTTP 500", status_code=500),
            {'Response': '{}'},
        ]

        result = synchronizer.sync_events(target, three_events)

        assert result.events_added == 1
        assert result.aborted is True
        assert calendar.create_event.call_count == 2
        assert len(result.failures) == 1

        failure = result.failures[0]
        assert failure.event.venue == "Emo's"
        assert failure.start_date == "2012-08-16"
        assert "Emo's" in result.errors[0]
        assert "2012-08-16" in result.errors[0]

    def test_sync_events_continue_on_failure(self, synchronizer, calendar, target, three_events):
        calendar.create_event.side_effect = [
            {'Response': '{}'},
            GatewayHTTPError("HTTP 500", status_code=500),
            {'Response': '{}'},
        ]

        result = synchronizer.sync_events(target, three_events, policy=FailurePolicy.CONTINUE)

        assert result.events_added == 2
        assert result.aborted is False
        assert calendar.create_event.call_count == 3
        assert [outcome.created for outcome in result.outcomes] == [True, False, True]

    def test_sync_events_unparseable_date_is_per_event_failure(self, synchronizer, calendar, target):
        events = [make_event("Stubb's", "sometime soon"), make_event("Emo's")]

        result = synchronizer.sync_events(target, events, policy=FailurePolicy.CONTINUE)

        assert result.events_added == 1
        assert "sometime soon" in result.failures[0].error
        assert calendar.create_event.call_count == 1

    def test_sync_events_unparseable_date_aborts_by_default(self, synchronizer, calendar, target):
        events = [make_event("Stubb's", None), make_event("Emo's")]

        result = synchronizer.sync_events(target, events)

        assert result.events_added == 0
        assert result.aborted is True
        calendar.create_event.assert_not_called()

    def test_sync_events_credential_error_propagates(self, synchronizer, calendar, target, three_events):
        calendar.create_event.side_effect = GatewayCredentialError("token expired")

        with pytest.raises(GatewayCredentialError):
            synchronizer.sync_events(target, three_events, policy=FailurePolicy.CONTINUE)

    def test_sync_events_requires_resolved_calendar(self, synchronizer, calendar, three_events):
        with pytest.raises(CalendarNotFoundError):
            synchronizer.sync_events(CalendarTarget(name="MyConcerts"), three_events)

        calendar.create_event.assert_not_called()

    def test_sync_events_is_not_idempotent(self, synchronizer, calendar, target, three_events):
        """Test that syncing the same events twice creates them twice."""
        first = synchronizer.sync_events(target, three_events)
        second = synchronizer.sync_events(target, three_events)

        assert first.events_added == 3
        assert second.events_added == 3
        assert calendar.create_event.call_count == 6

    @pytest.mark.parametrize('failing_call', [None, 0, 1, 2])
    def test_sync_events_added_within_bounds(self, synchronizer, calendar, target, three_events, failing_call):
        effects = [{'Response': '{}'}] * 3
        if failing_call is not None:
            effects[failing_call] = GatewayHTTPError("HTTP 502", status_code=502)
        calendar.create_event.side_effect = effects

        result = synchronizer.sync_events(target, three_events)

        assert 0 <= result.events_added <= len(three_events)


class TestSplitStartDate:
    """Test cases for start timestamp formatting."""

    @pytest.mark.parametrize('raw, expected', [
        ("2012-08-15T20:00:00", ("2012-08-15", "20:00:00")),
        ("Wed, 15 Aug 2012 20:00:00", ("2012-08-15", "20:00:00")),
        ("2012-08-15 20:00:00", ("2012-08-15", "20:00:00")),
        ("2012-08-15T20:00", ("2012-08-15", "20:00:00")),
        ("2012-08-15", ("2012-08-15", "00:00:00")),
    ])
    def test_split_start_date_formats(self, synchronizer, raw, expected):
        assert synchronizer.split_start_date(raw) == expected

    @pytest.mark.parametrize('raw', [None, "", "   ", "next Tuesday", "2012-13-45"])
    def test_split_start_date_invalid(self, synchronizer, raw):
        with pytest.raises(EventDateError):
            synchronizer.split_start_date(raw)
