"""
Session wrapper and default collaborator wiring.

A BookingSession owns one ConversationState and feeds it through a shared
BookingOrchestrator; independent sessions can run concurrently because the
orchestrator holds only stateless collaborator handles.
"""

import logging
from typing import Optional

from booking_orchestrator.config import AppConfig, settings
from booking_orchestrator.conversation.orchestrator import BookingOrchestrator
from booking_orchestrator.schemas.conversation_schema import BookingStage, ConversationState
from booking_orchestrator.tools.browser import PlaywrightFormActuator, PlaywrightFormInspector
from booking_orchestrator.tools.field_mapping import RuleBasedFieldMapper
from booking_orchestrator.tools.profiles import JsonProfileStore
from booking_orchestrator.tools.providers import StaticProviderDirectory

logger = logging.getLogger(__name__)


class BookingSession:
    """One user's booking conversation."""

    def __init__(
        self,
        orchestrator: BookingOrchestrator,
        state: Optional[ConversationState] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.state = state or ConversationState()

    @property
    def stage(self) -> BookingStage:
        return self.state.stage

    async def send(self, text: str, reset: bool = False) -> str:
        """Process one user message and return the reply."""
        self.state, reply = await self.orchestrator.process_message(
            self.state, text, reset_requested=reset
        )
        return reply


def build_default_orchestrator(config: AppConfig = settings) -> BookingOrchestrator:
    """Wire the file-backed stores and Playwright browser adapters."""
    if config.data.provider_data_path:
        directory = StaticProviderDirectory.from_json(
            config.data.provider_data_path,
            max_results=config.booking.max_recommendations,
        )
    else:
        directory = StaticProviderDirectory(max_results=config.booking.max_recommendations)

    logger.debug("Building orchestrator with profiles from %s", config.data.profile_data_path)
    return BookingOrchestrator(
        profile_store=JsonProfileStore(config.data.profile_data_path),
        provider_directory=directory,
        form_inspector=PlaywrightFormInspector(
            headless=config.browser.headless,
            timeout_ms=config.browser.navigation_timeout_ms,
        ),
        field_mapper=RuleBasedFieldMapper(),
        form_actuator=PlaywrightFormActuator(
            headless=config.browser.headless,
            timeout_ms=config.browser.navigation_timeout_ms,
        ),
        config=config,
    )
