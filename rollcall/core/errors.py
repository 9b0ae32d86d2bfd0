"""Error hierarchy for the session lifecycle engine.

Route handlers translate the user-facing errors into HTTP responses:

- InvalidRecurrence, InvalidSessionPayload  -> 400
- SessionLocked                             -> 409

MalformedTemporalField never leaves the core: the classifier catches it and
falls back to a documented default. RosterIntegrityViolation signals a bug in
the caller and is not mapped to any user-facing status.
"""


class RollcallError(Exception):
    """Base exception for all engine errors."""

    pass


class InvalidRecurrence(RollcallError, ValueError):
    """A recurrence descriptor cannot be expanded.

    Examples: Weekly with no days, Random with no dates, end date before start
    date, start time not before end time.
    """

    pass


class InvalidSessionPayload(RollcallError, ValueError):
    """Shared session fields are inconsistent with the session type.

    Examples: a Physical session without a location, a Remote session carrying
    a PHYSICAL attendee.
    """

    pass


class MalformedTemporalField(RollcallError, ValueError):
    """A stored HH:MM time string could not be parsed."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"Malformed {field}: {value!r}")
        self.field = field
        self.value = value


class SessionLocked(RollcallError):
    """The session has already ended and can no longer be edited."""

    pass


class RosterIntegrityViolation(RollcallError, RuntimeError):
    """A user ended up in both Hybrid attendee sets."""

    pass
