"""
Contracts for the external services the booking orchestrator depends on.

The orchestrator only ever talks to these protocols; concrete adapters
(JSON files, a static catalog, Playwright, a rule-based mapper, or test
fakes) are injected at construction time.
"""

from typing import Optional, Protocol

from booking_orchestrator.schemas.form_schema import FieldAssignment, FormField, MappingResult
from booking_orchestrator.schemas.profile_schema import UserProfile
from booking_orchestrator.schemas.provider_schema import Provider


class ProfileStore(Protocol):
    async def lookup(self, user_id: str) -> Optional[UserProfile]:
        """Return the profile, or None if the id is unknown.

        Raises LookupFailure when the backing store is unreachable.
        """
        ...


class ProviderDirectory(Protocol):
    async def recommend(
        self, insurance: Optional[str] = None, location: Optional[str] = None
    ) -> list[Provider]:
        """Return ranked candidate providers, best first."""
        ...


class FormInspector(Protocol):
    async def inspect(self, url: str) -> list[FormField]:
        """Return the fields observed on the booking page (empty on failure)."""
        ...


class FieldMapper(Protocol):
    async def map(self, profile: UserProfile, fields: list[FormField]) -> MappingResult:
        """Assign profile values to fields and report unsatisfied required labels."""
        ...


class FormActuator(Protocol):
    async def submit(
        self,
        url: str,
        assignments: list[FieldAssignment],
        submit_instruction: FieldAssignment,
    ) -> bool:
        """Fill the page with the assignments, then perform the submit instruction."""
        ...
