"""Per-session conversation state for the booking orchestrator."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from booking_orchestrator.schemas.form_schema import FieldAssignment, FormField
from booking_orchestrator.schemas.profile_schema import UserProfile
from booking_orchestrator.schemas.provider_schema import Provider


class BookingStage(str, Enum):
    """Discrete phases of the booking conversation."""
    GREETING = "greeting"
    PROVIDER_SELECTION = "provider_selection"
    FORM_ANALYSIS = "form_analysis"
    INFO_COLLECTION = "info_collection"
    BOOKING = "booking"


@dataclass
class StageEntry:
    """Recorded history entry for a stage visit."""
    stage: BookingStage
    entered_at: datetime
    trigger: Optional[str] = None


def _initial_history() -> list[StageEntry]:
    return [StageEntry(stage=BookingStage.GREETING, entered_at=datetime.now(timezone.utc))]


@dataclass
class ConversationState:
    """
    The orchestrator's sole mutable unit, owned by exactly one session.

    Created at the greeting stage, mutated in place by successive
    ``process_message`` calls, and reset on restart or after a completed
    booking. Only the orchestrator writes to it.
    """
    stage: BookingStage = BookingStage.GREETING
    user_id: Optional[str] = None
    user_profile: Optional[UserProfile] = None
    selected_provider: Optional[Provider] = None
    collected_info: dict[str, str] = field(default_factory=dict)
    # Required labels still to ask for, front of the list first.
    missing_fields: list[str] = field(default_factory=list)
    analyzed_fields: list[FormField] = field(default_factory=list)
    field_assignments: list[FieldAssignment] = field(default_factory=list)
    history: list[StageEntry] = field(default_factory=_initial_history)
    # Correlation id for logs; survives resets of the same session.
    session_id: str = field(default_factory=lambda: f"SESSION-{uuid.uuid4().hex[:8]}")

    def reset(self) -> None:
        """Return to the fresh greeting state, discarding everything collected."""
        self.stage = BookingStage.GREETING
        self.user_id = None
        self.user_profile = None
        self.selected_provider = None
        self.collected_info = {}
        self.missing_fields = []
        self.analyzed_fields = []
        self.field_assignments = []
        self.history = _initial_history()

    def clear_form_progress(self) -> None:
        """Drop everything derived from the currently selected provider's form."""
        self.collected_info = {}
        self.missing_fields = []
        self.analyzed_fields = []
        self.field_assignments = []

    def is_fresh(self) -> bool:
        """True when the state is indistinguishable from a newly created session."""
        return (
            self.stage == BookingStage.GREETING
            and self.user_id is None
            and self.user_profile is None
            and self.selected_provider is None
            and not self.collected_info
            and not self.missing_fields
            and not self.analyzed_fields
            and not self.field_assignments
        )

    def check_invariants(self) -> None:
        """Raise ValueError if the state violates the stage/data invariants."""
        provider_stages = {
            BookingStage.FORM_ANALYSIS,
            BookingStage.INFO_COLLECTION,
            BookingStage.BOOKING,
        }
        if (self.selected_provider is not None) != (self.stage in provider_stages):
            raise ValueError(
                f"selected_provider must be set exactly in stages "
                f"{sorted(s.value for s in provider_stages)}; stage is '{self.stage.value}'"
            )
        if (self.user_profile is not None) != (self.stage != BookingStage.GREETING):
            raise ValueError(
                f"user_profile must be set exactly when past greeting; "
                f"stage is '{self.stage.value}'"
            )
