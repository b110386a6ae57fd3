from booking_orchestrator.conversation.errors import (
    ActuationFailure,
    BookingError,
    InspectionFailure,
    LookupFailure,
    MappingFailure,
)
from booking_orchestrator.conversation.state_machine import (
    BookingStateMachine,
    InvalidTransitionError,
    TransitionTrigger,
)

__all__ = [
    "BookingStateMachine",
    "TransitionTrigger",
    "InvalidTransitionError",
    "BookingError",
    "LookupFailure",
    "InspectionFailure",
    "MappingFailure",
    "ActuationFailure",
]
