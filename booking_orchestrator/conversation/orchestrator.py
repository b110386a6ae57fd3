"""
Booking orchestrator: routes each user message to the handler for the
session's current stage and sequences the collaborator calls.

Flow: greeting -> provider_selection -> form_analysis -> (info_collection)
-> booking -> greeting. Every collaborator call is awaited one at a time
under a timeout; failures become replies and never escape process_message.
Only a corrupted ConversationState (InvalidTransitionError / ValueError)
propagates to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from booking_orchestrator.config import AppConfig, settings
from booking_orchestrator.conversation import intents
from booking_orchestrator.conversation.errors import (
    ActuationFailure,
    BookingError,
    InspectionFailure,
    LookupFailure,
    MappingFailure,
)
from booking_orchestrator.conversation.state_machine import (
    BookingStateMachine,
    TransitionTrigger,
)
from booking_orchestrator.logging_context import session_context
from booking_orchestrator.prompts import reply_templates as replies
from booking_orchestrator.schemas.conversation_schema import BookingStage, ConversationState
from booking_orchestrator.schemas.form_schema import (
    ActionKind,
    FieldAssignment,
    FormField,
    MappingResult,
)
from booking_orchestrator.schemas.profile_schema import UserProfile
from booking_orchestrator.schemas.provider_schema import Provider
from booking_orchestrator.tools.collaborators import (
    FieldMapper,
    FormActuator,
    FormInspector,
    ProfileStore,
    ProviderDirectory,
)
from booking_orchestrator.tools.field_mapping import action_for_field
from booking_orchestrator.tools.profiles import build_demo_profile

logger = logging.getLogger(__name__)

# Used when the mapper produced nothing to submit.
CANONICAL_SLOTS: list[tuple[str, str]] = [
    ("#first_name", "first_name"),
    ("#last_name", "last_name"),
    ("#phone", "phone"),
    ("#email", "email"),
]

Handler = Callable[[ConversationState, BookingStateMachine, str], Awaitable[str]]


class BookingOrchestrator:
    """
    Stateful controller for one booking conversation.

    Holds injected collaborator handles only; all per-session data lives
    in the ConversationState passed to each process_message call.
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        provider_directory: ProviderDirectory,
        form_inspector: FormInspector,
        field_mapper: FieldMapper,
        form_actuator: FormActuator,
        config: AppConfig = settings,
    ) -> None:
        self.profile_store = profile_store
        self.provider_directory = provider_directory
        self.form_inspector = form_inspector
        self.field_mapper = field_mapper
        self.form_actuator = form_actuator
        self.config = config
        self._handlers: dict[BookingStage, Handler] = {
            BookingStage.GREETING: self._handle_greeting,
            BookingStage.PROVIDER_SELECTION: self._handle_provider_selection,
            BookingStage.FORM_ANALYSIS: self._handle_form_analysis,
            BookingStage.INFO_COLLECTION: self._handle_info_collection,
            BookingStage.BOOKING: self._handle_booking,
        }

    async def process_message(
        self,
        state: ConversationState,
        user_message: str,
        reset_requested: bool = False,
    ) -> tuple[ConversationState, str]:
        """
        Handle one inbound user message.

        Args:
            state: The session's conversation state, mutated in place.
            user_message: Free text from the user.
            reset_requested: Discard the session and start from greeting.

        Returns:
            The (same, updated) state and the reply to show the user.

        Raises:
            ValueError: If the supplied state violates its invariants.
            InvalidTransitionError: If a handler requests an undefined transition.
        """
        with session_context(state.session_id):
            return await self._process(state, user_message or "", reset_requested)

    async def _process(
        self, state: ConversationState, text: str, reset_requested: bool
    ) -> tuple[ConversationState, str]:
        if reset_requested or intents.wants_restart(text):
            logger.info("Session reset requested at stage '%s'", state.stage.value)
            state.reset()
            return state, replies.build_restart_reply()

        state.check_invariants()
        sm = BookingStateMachine(state)
        handler = self._handlers[state.stage]
        reply = await handler(state, sm, text)
        state.check_invariants()
        return state, reply

    # ------------------------------------------------------------------ #
    # Collaborator calls
    # ------------------------------------------------------------------ #

    async def _call(
        self, awaitable: Awaitable[Any], failure: type[BookingError], what: str
    ) -> Any:
        """Await one collaborator call under the configured timeout.

        Timeouts and unexpected adapter exceptions are converted into
        ``failure`` so handlers only deal with the booking error taxonomy.
        """
        timeout = self.config.booking.collaborator_timeout_sec
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except BookingError:
            raise
        except asyncio.TimeoutError as exc:
            raise failure(f"{what} timed out after {timeout}s") from exc
        except Exception as exc:
            logger.exception("Unexpected error during %s", what)
            raise failure(f"{what} failed: {exc}") from exc

    async def _resolve_profile(self, user_id: str) -> tuple[Optional[UserProfile], bool]:
        """Look up a profile, falling back to the demo profile if the store is down.

        Returns (profile, is_demo). profile is None when the id is unknown.
        """
        try:
            profile = await self._call(
                self.profile_store.lookup(user_id), LookupFailure, "profile lookup"
            )
        except LookupFailure as exc:
            logger.warning("Profile store unavailable, using demo profile: %s", exc)
            return build_demo_profile(user_id), True
        return profile, False

    async def _recommend(self, profile: UserProfile) -> list[Provider]:
        providers = await self._call(
            self.provider_directory.recommend(profile.insurance_provider, profile.location),
            LookupFailure,
            "provider recommendation",
        )
        return list(providers or [])[: self.config.booking.max_recommendations]

    # ------------------------------------------------------------------ #
    # Greeting
    # ------------------------------------------------------------------ #

    async def _handle_greeting(
        self, state: ConversationState, sm: BookingStateMachine, text: str
    ) -> str:
        user_id = intents.extract_user_id(text, self.config.booking.user_id_pattern)
        if user_id is None:
            if intents.has_booking_intent(text):
                return replies.build_identifier_prompt()
            return replies.build_greeting_reply()

        profile, is_demo = await self._resolve_profile(user_id)
        if profile is None:
            logger.info("No profile found for %s", user_id)
            return replies.build_profile_not_found_reply(user_id)

        try:
            providers = await self._recommend(profile)
        except LookupFailure as exc:
            logger.warning("Provider recommendation failed: %s", exc)
            return replies.build_provider_lookup_failed_reply()
        if not providers:
            return replies.build_no_providers_reply(profile.insurance_provider)

        state.user_id = user_id
        state.user_profile = profile
        sm.transition(TransitionTrigger.PROFILE_RESOLVED)
        logger.info("Profile resolved for %s; %d providers shown", user_id, len(providers))
        return replies.build_provider_list_reply(profile, providers, demo_profile=is_demo)

    # ------------------------------------------------------------------ #
    # Provider selection
    # ------------------------------------------------------------------ #

    async def _handle_provider_selection(
        self, state: ConversationState, sm: BookingStateMachine, text: str
    ) -> str:
        choice = intents.extract_selection(text)
        if choice is None:
            return replies.build_selection_prompt()

        # The shown list is re-derived; ranking is a pure function of the profile.
        try:
            providers = await self._recommend(state.user_profile)
        except LookupFailure as exc:
            logger.warning("Provider recommendation failed: %s", exc)
            return replies.build_provider_lookup_failed_reply()
        if not providers:
            return replies.build_no_providers_reply(state.user_profile.insurance_provider)
        if not 1 <= choice <= len(providers):
            return replies.build_invalid_selection_reply(choice, len(providers))

        provider = providers[choice - 1]
        state.selected_provider = provider
        state.clear_form_progress()
        sm.transition(TransitionTrigger.PROVIDER_SELECTED)
        logger.info("Provider selected: %s", provider.name)

        analysis_reply = await self._analyze_form(state, sm)
        return f"{replies.build_provider_selected_reply(provider)}\n\n{analysis_reply}"

    # ------------------------------------------------------------------ #
    # Form analysis
    # ------------------------------------------------------------------ #

    async def _handle_form_analysis(
        self, state: ConversationState, sm: BookingStateMachine, text: str
    ) -> str:
        if intents.wants_different_provider(text):
            return await self._return_to_provider_selection(state, sm)
        return await self._analyze_form(state, sm)

    async def _analyze_form(self, state: ConversationState, sm: BookingStateMachine) -> str:
        """Inspect the booking page, map the profile onto it, and branch on missing fields."""
        provider = state.selected_provider
        try:
            fields = await self._call(
                self.form_inspector.inspect(provider.booking_url),
                InspectionFailure,
                "form inspection",
            )
            if not fields:
                raise InspectionFailure(f"No form fields found at {provider.booking_url}")
            result = await self._call(
                self.field_mapper.map(state.user_profile, list(fields)),
                MappingFailure,
                "field mapping",
            )
            if not isinstance(result, MappingResult):
                raise MappingFailure(f"Field mapper returned {type(result).__name__}")
        except (InspectionFailure, MappingFailure) as exc:
            logger.warning("Form analysis failed for %s: %s", provider.name, exc)
            return replies.build_analysis_failure_reply(provider)

        state.analyzed_fields = list(fields)
        state.field_assignments = list(result.assignments)
        state.collected_info = {}
        missing = list(dict.fromkeys(result.missing_fields))

        if not missing:
            state.missing_fields = []
            sm.transition(TransitionTrigger.NO_MISSING_FIELDS)
            return replies.build_ready_to_book_summary(state.user_profile, provider)

        state.missing_fields = missing
        sm.transition(TransitionTrigger.MISSING_FIELDS_FOUND)
        logger.info("Form needs %d more fields", len(missing))
        return replies.build_missing_field_prompt(missing[0], len(missing))

    # ------------------------------------------------------------------ #
    # Info collection
    # ------------------------------------------------------------------ #

    async def _handle_info_collection(
        self, state: ConversationState, sm: BookingStateMachine, text: str
    ) -> str:
        answer = text.strip()
        if state.missing_fields:
            label = state.missing_fields[0]
            if not answer:
                return replies.build_missing_field_prompt(label, len(state.missing_fields))
            state.collected_info[label] = answer
            state.missing_fields.pop(0)
        elif answer:
            state.collected_info[replies.ADDITIONAL_INFO_KEY] = answer

        if state.missing_fields:
            return replies.build_next_field_prompt(state.missing_fields[0])

        sm.transition(TransitionTrigger.INFO_COMPLETE)
        return replies.build_ready_to_book_summary(
            state.user_profile, state.selected_provider, state.collected_info
        )

    # ------------------------------------------------------------------ #
    # Booking
    # ------------------------------------------------------------------ #

    async def _handle_booking(
        self, state: ConversationState, sm: BookingStateMachine, text: str
    ) -> str:
        if intents.wants_cancel(text):
            sm.transition(TransitionTrigger.CANCELLED)
            logger.info("Booking cancelled by user")
            state.reset()
            return replies.build_cancelled_reply()

        if intents.wants_different_provider(text):
            return await self._return_to_provider_selection(state, sm)

        if intents.wants_modify(text):
            state.missing_fields = [replies.ADDITIONAL_INFO_KEY]
            sm.transition(TransitionTrigger.MODIFY_REQUESTED)
            return replies.build_modify_prompt()

        if intents.is_confirmation(text):
            return await self._submit_booking(state, sm)

        return replies.build_booking_options_reply(state.selected_provider)

    async def _submit_booking(self, state: ConversationState, sm: BookingStateMachine) -> str:
        provider = state.selected_provider
        assignments = self._build_assignments(state)
        submit_instruction = FieldAssignment(
            field_id=self.config.booking.submit_selector,
            action=ActionKind.CLICK,
        )
        try:
            submitted = await self._call(
                self.form_actuator.submit(provider.booking_url, assignments, submit_instruction),
                ActuationFailure,
                "form submission",
            )
        except ActuationFailure as exc:
            logger.warning("Booking submission failed for %s: %s", provider.name, exc)
            submitted = False

        if submitted is not True:
            return replies.build_booking_failure_reply(provider)

        logger.info("Booking submitted for %s with %s", state.user_id, provider.name)
        reply = replies.build_booking_confirmation(provider)
        sm.transition(TransitionTrigger.BOOKING_SUCCESS)
        state.reset()
        return reply

    def _build_assignments(self, state: ConversationState) -> list[FieldAssignment]:
        """Mapper assignments plus collected answers, or canonical profile slots."""
        assignments = list(state.field_assignments)
        assigned_ids = {a.field_id for a in assignments}
        fields_by_label: dict[str, FormField] = {f.label: f for f in state.analyzed_fields}

        for label, value in state.collected_info.items():
            field = fields_by_label.get(label)
            if field is None or field.field_id in assigned_ids:
                continue
            action = action_for_field(field)
            if action == ActionKind.CLICK and not intents.is_confirmation(value):
                continue
            assignments.append(FieldAssignment(field_id=field.field_id, value=value, action=action))
            assigned_ids.add(field.field_id)

        if assignments:
            return assignments

        logger.debug("No mapped assignments; falling back to canonical profile slots")
        profile = state.user_profile
        return [
            FieldAssignment(field_id=field_id, value=str(getattr(profile, attribute)))
            for field_id, attribute in CANONICAL_SLOTS
            if getattr(profile, attribute)
        ]

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    async def _return_to_provider_selection(
        self, state: ConversationState, sm: BookingStateMachine
    ) -> str:
        try:
            providers = await self._recommend(state.user_profile)
        except LookupFailure as exc:
            logger.warning("Provider recommendation failed: %s", exc)
            return replies.build_provider_lookup_failed_reply()
        if not providers:
            return replies.build_no_providers_reply(state.user_profile.insurance_provider)

        state.selected_provider = None
        state.clear_form_progress()
        sm.transition(TransitionTrigger.RESELECT_PROVIDER)
        return replies.build_provider_list_again(providers)
