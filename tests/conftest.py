"""Shared test fixtures and fake collaborators."""

import asyncio
from dataclasses import replace
from typing import Optional

import pytest

from booking_orchestrator.config import AppConfig, BookingConfig
from booking_orchestrator.conversation.orchestrator import BookingOrchestrator
from booking_orchestrator.conversation.state_machine import BookingStateMachine
from booking_orchestrator.schemas.conversation_schema import ConversationState
from booking_orchestrator.schemas.form_schema import FieldAssignment, FormField, MappingResult
from booking_orchestrator.schemas.profile_schema import UserProfile
from booking_orchestrator.schemas.provider_schema import Provider


def make_profile(user_id: str = "user_12345", **overrides) -> UserProfile:
    """Helper to create a UserProfile with sensible defaults."""
    data = {
        "user_id": user_id,
        "first_name": "Maria",
        "last_name": "Garcia",
        "date_of_birth": "1988-03-22",
        "phone": "(415) 555-0198",
        "email": "maria.garcia@example.com",
        "city": "San Francisco",
        "state": "CA",
        "insurance_provider": "Blue Cross Blue Shield",
        "insurance_member_id": "BCB123456789",
    }
    data.update(overrides)
    return UserProfile(**data)


def make_provider(index: int = 1, **overrides) -> Provider:
    """Helper to create a Provider; index drives id, name and phone."""
    data = {
        "provider_id": f"prov_{index:03d}",
        "name": f"Dr. Provider {index}",
        "specialty": "Family Medicine",
        "location": "San Francisco, CA",
        "address": f"{index}00 Market Street, San Francisco, CA 94105",
        "phone": f"(415) 555-01{index:02d}",
        "accepted_insurance": ["Blue Cross Blue Shield"],
        "rating": 4.5,
        "booking_url": f"https://booking.example.com/providers/{index}",
    }
    data.update(overrides)
    return Provider(**data)


FIELDS = [
    FormField(label="First Name", field_id="#first_name", required=True),
    FormField(label="Last Name", field_id="#last_name", required=True),
    FormField(label="Preferred Date", field_id="#preferred_date", required=True),
    FormField(label="Referral Code", field_id="#referral", required=True),
]


class FakeProfileStore:
    def __init__(self, profiles: Optional[dict[str, UserProfile]] = None, error: Exception = None):
        self.profiles = profiles if profiles is not None else {"user_12345": make_profile()}
        self.error = error
        self.calls: list[str] = []

    async def lookup(self, user_id: str) -> Optional[UserProfile]:
        self.calls.append(user_id)
        if self.error:
            raise self.error
        return self.profiles.get(user_id)


class FakeProviderDirectory:
    def __init__(self, providers: Optional[list[Provider]] = None, error: Exception = None):
        self.providers = providers if providers is not None else [make_provider(i) for i in (1, 2, 3)]
        self.error = error
        self.calls: list[tuple[Optional[str], Optional[str]]] = []

    async def recommend(self, insurance=None, location=None) -> list[Provider]:
        self.calls.append((insurance, location))
        if self.error:
            raise self.error
        return list(self.providers)


class FakeFormInspector:
    def __init__(self, fields: Optional[list[FormField]] = None, error: Exception = None,
                 delay: float = 0.0):
        self.fields = fields if fields is not None else list(FIELDS)
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    async def inspect(self, url: str) -> list[FormField]:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.fields)


class FakeFieldMapper:
    """Returns a fixed result; None for result falls back to a first/last-name mapping."""

    def __init__(self, result=None, missing: Optional[list[str]] = None):
        self.result = result
        self.missing = missing if missing is not None else ["Preferred Date", "Referral Code"]
        self.calls: list[tuple[UserProfile, list[FormField]]] = []

    async def map(self, profile: UserProfile, fields: list[FormField]):
        self.calls.append((profile, fields))
        if self.result is not None:
            return self.result
        return MappingResult(
            assignments=[
                FieldAssignment(field_id="#first_name", value=profile.first_name),
                FieldAssignment(field_id="#last_name", value=profile.last_name),
            ],
            missing_fields=list(self.missing),
        )


class FakeFormActuator:
    def __init__(self, outcome=True, error: Exception = None):
        self.outcome = outcome
        self.error = error
        self.calls: list[tuple[str, list[FieldAssignment], FieldAssignment]] = []

    async def submit(self, url, assignments, submit_instruction) -> bool:
        self.calls.append((url, list(assignments), submit_instruction))
        if self.error:
            raise self.error
        return self.outcome


@pytest.fixture
def conversation_state():
    return ConversationState()


@pytest.fixture
def state_machine(conversation_state):
    return BookingStateMachine(conversation_state)


@pytest.fixture
def profile_store():
    return FakeProfileStore()


@pytest.fixture
def provider_directory():
    return FakeProviderDirectory()


@pytest.fixture
def form_inspector():
    return FakeFormInspector()


@pytest.fixture
def field_mapper():
    return FakeFieldMapper()


@pytest.fixture
def form_actuator():
    return FakeFormActuator()


@pytest.fixture
def app_config():
    return replace(AppConfig(), booking=replace(BookingConfig(), collaborator_timeout_sec=1.0))


@pytest.fixture
def orchestrator(profile_store, provider_directory, form_inspector, field_mapper,
                 form_actuator, app_config):
    return BookingOrchestrator(
        profile_store=profile_store,
        provider_directory=provider_directory,
        form_inspector=form_inspector,
        field_mapper=field_mapper,
        form_actuator=form_actuator,
        config=app_config,
    )
