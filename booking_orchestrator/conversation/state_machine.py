"""
Finite state machine for deterministic booking-flow control.

Defines the five booking stages' explicit transitions with triggers.
The machine operates directly on a ConversationState, so the stage and its
visit history live with the session rather than with the machine.

Usage:
    state = ConversationState()
    sm = BookingStateMachine(state)
    sm.transition(TransitionTrigger.PROFILE_RESOLVED)
    assert state.stage == BookingStage.PROVIDER_SELECTION
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from booking_orchestrator.schemas.conversation_schema import (
    BookingStage,
    ConversationState,
    StageEntry,
)

logger = logging.getLogger(__name__)


class TransitionTrigger(str, Enum):
    """Events that cause stage transitions."""
    PROFILE_RESOLVED = "profile_resolved"
    PROVIDER_SELECTED = "provider_selected"
    NO_MISSING_FIELDS = "no_missing_fields"
    MISSING_FIELDS_FOUND = "missing_fields_found"
    INFO_COMPLETE = "info_complete"
    MODIFY_REQUESTED = "modify_requested"
    RESELECT_PROVIDER = "reselect_provider"
    BOOKING_SUCCESS = "booking_success"
    CANCELLED = "cancelled"


@dataclass
class Transition:
    """A single valid stage transition."""
    from_stage: BookingStage
    to_stage: BookingStage
    trigger: TransitionTrigger


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current stage."""


class BookingStateMachine:
    """
    Deterministic state machine controlling the booking conversation.

    Every transition must be explicitly defined. A handler asking for a
    transition the table does not contain indicates a corrupted session
    and is rejected with the list of triggers that are allowed.
    """

    TRANSITIONS: list[Transition] = [
        # --- Greeting ---
        Transition(BookingStage.GREETING, BookingStage.PROVIDER_SELECTION,
                   TransitionTrigger.PROFILE_RESOLVED),

        # --- Provider selection ---
        Transition(BookingStage.PROVIDER_SELECTION, BookingStage.FORM_ANALYSIS,
                   TransitionTrigger.PROVIDER_SELECTED),

        # --- Form analysis ---
        Transition(BookingStage.FORM_ANALYSIS, BookingStage.BOOKING,
                   TransitionTrigger.NO_MISSING_FIELDS),
        Transition(BookingStage.FORM_ANALYSIS, BookingStage.INFO_COLLECTION,
                   TransitionTrigger.MISSING_FIELDS_FOUND),
        Transition(BookingStage.FORM_ANALYSIS, BookingStage.PROVIDER_SELECTION,
                   TransitionTrigger.RESELECT_PROVIDER),

        # --- Info collection ---
        Transition(BookingStage.INFO_COLLECTION, BookingStage.BOOKING,
                   TransitionTrigger.INFO_COMPLETE),

        # --- Booking ---
        Transition(BookingStage.BOOKING, BookingStage.GREETING,
                   TransitionTrigger.BOOKING_SUCCESS),
        Transition(BookingStage.BOOKING, BookingStage.GREETING,
                   TransitionTrigger.CANCELLED),
        Transition(BookingStage.BOOKING, BookingStage.PROVIDER_SELECTION,
                   TransitionTrigger.RESELECT_PROVIDER),
        Transition(BookingStage.BOOKING, BookingStage.INFO_COLLECTION,
                   TransitionTrigger.MODIFY_REQUESTED),
    ]

    def __init__(self, state: ConversationState) -> None:
        self._state = state

    @property
    def current_stage(self) -> BookingStage:
        return self._state.stage

    def transition(self, trigger: TransitionTrigger) -> BookingStage:
        """
        Execute a stage transition on the wrapped conversation state.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new booking stage.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_stage == self._state.stage and t.trigger == trigger:
                old_stage = self._state.stage
                self._state.stage = t.to_stage
                self._state.history.append(StageEntry(
                    stage=t.to_stage,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger.value,
                ))
                logger.debug(
                    "Stage transition: %s -> %s (trigger: %s)",
                    old_stage.value, t.to_stage.value, trigger.value,
                )
                return t.to_stage

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._state.stage.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[TransitionTrigger]:
        """Return all triggers valid from the current stage."""
        return [t.trigger for t in self.TRANSITIONS if t.from_stage == self._state.stage]

    def get_stage_trace(self) -> list[str]:
        """Return ordered list of stage names visited."""
        return [entry.stage.value for entry in self._state.history]
