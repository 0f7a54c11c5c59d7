"""Exception hierarchy for the fantasy cricket engine."""


class FantasyCricketError(Exception):
    """Base class for all engine errors."""


class ValidationError(FantasyCricketError, ValueError):
    """Malformed input, e.g. a negative stat counter or bad pagination."""


class InvariantViolation(FantasyCricketError):
    """Data handed to the engine breaks a team or league invariant."""

    def __init__(self, message: str, problems: list[str] | None = None):
        super().__init__(message)
        self.problems = problems or [message]


class InvalidTeamState(InvariantViolation):
    """Captain or vice-captain does not resolve to an occupied slot at scoring time."""


class NotFound(FantasyCricketError, LookupError):
    """Referenced league, team, player or gameweek is absent."""

    def __init__(self, kind: str, key):
        super().__init__(f'{kind} not found: {key}')
        self.kind = kind
        self.key = key


class AccessDenied(FantasyCricketError):
    """Viewer may not see a private league."""


class LeagueFull(FantasyCricketError):
    """League has reached its member capacity."""


class DuplicateMembership(FantasyCricketError):
    """Team is already a member of the league."""
