"""Exceptions raised by the pipeline stages."""


class CalendarNotFoundError(Exception):
    """No calendar with the requested name exists."""

    def __init__(self, calendar_name: str):
        super().__init__(f"Calendar '{calendar_name}' not found")
        self.calendar_name = calendar_name


class EventDateError(ValueError):
    """An event start timestamp could not be parsed."""
