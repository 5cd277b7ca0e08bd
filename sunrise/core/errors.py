"""Error kinds - Pure data structures.

Every failure the alarm pipeline can produce is one of these exceptions.
None of them are fatal to the process; the scheduler surfaces them to the
caller as part of an AlarmResult, the resolver raises them directly.
"""


class SunriseAlarmError(Exception):
    """Base class for all recoverable sunrise alarm errors."""

    kind = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__ or self.kind)
        self.message = str(self.args[0])


class NoLocationSelected(SunriseAlarmError):
    """Please select a location first."""

    kind = "no_location_selected"


class InvalidLocationError(SunriseAlarmError):
    """Location coordinates are out of range."""

    kind = "invalid_location"


class InvalidRequestError(SunriseAlarmError):
    """Could not build a valid request to the sunrise source."""

    kind = "invalid_request"


class TransportError(SunriseAlarmError):
    """Network failure talking to the sunrise source."""

    kind = "transport"


class DecodeError(SunriseAlarmError):
    """Sunrise source returned a malformed response."""

    kind = "decode"


class EmptyResponseError(DecodeError):
    """No data received from the sunrise source."""

    kind = "empty_response"


class DateParseError(SunriseAlarmError):
    """Could not parse sunrise time."""

    kind = "date_parse"


class CalendarComposeError(SunriseAlarmError):
    """Could not create local sunrise date."""

    kind = "calendar_compose"


class DispatchError(SunriseAlarmError):
    """Failed to schedule alarm."""

    kind = "dispatch"


class Busy(SunriseAlarmError):
    """Another alarm operation is already in progress."""

    kind = "busy"
