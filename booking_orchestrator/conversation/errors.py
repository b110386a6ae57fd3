"""Failure taxonomy for collaborator calls made by the booking orchestrator.

Collaborator adapters raise these; the orchestrator catches them at the
stage-handler boundary and turns them into user-facing replies.
"""


class BookingError(Exception):
    """Base class for recoverable collaborator failures."""


class LookupFailure(BookingError):
    """Profile store or provider directory is unreachable."""


class InspectionFailure(BookingError):
    """The booking page could not be inspected or exposed no fields."""


class MappingFailure(BookingError):
    """The field mapper produced no usable result."""


class ActuationFailure(BookingError):
    """The booking form could not be filled or submitted."""
