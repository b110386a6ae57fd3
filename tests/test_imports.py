"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_conversation_schema(self):
        from booking_orchestrator.schemas.conversation_schema import (
            BookingStage, ConversationState, StageEntry,
        )
        assert BookingStage.GREETING == "greeting"
        assert ConversationState().stage == BookingStage.GREETING

    def test_import_form_schema(self):
        from booking_orchestrator.schemas.form_schema import (
            ActionKind, FieldAssignment, FormField, MappingResult,
        )
        assert ActionKind.TYPE == "type"
        assert MappingResult().missing_fields == []

    def test_import_profile_and_provider_schemas(self):
        from booking_orchestrator.schemas.profile_schema import UserProfile
        from booking_orchestrator.schemas.provider_schema import Provider
        assert UserProfile is not None
        assert Provider is not None


class TestConversationImports:
    def test_import_conversation_package(self):
        from booking_orchestrator.conversation import (
            BookingStateMachine, InvalidTransitionError,
            LookupFailure, BookingError, TransitionTrigger,
        )
        assert issubclass(LookupFailure, BookingError)
        assert TransitionTrigger.PROFILE_RESOLVED == "profile_resolved"

    def test_import_orchestrator(self):
        from booking_orchestrator.conversation.orchestrator import BookingOrchestrator
        assert callable(BookingOrchestrator)

    def test_import_intents(self):
        from booking_orchestrator.conversation.intents import (
            extract_user_id, is_confirmation,
        )
        assert callable(extract_user_id)


class TestToolImports:
    def test_import_adapters(self):
        from booking_orchestrator.tools.profiles import JsonProfileStore
        from booking_orchestrator.tools.providers import StaticProviderDirectory
        from booking_orchestrator.tools.field_mapping import RuleBasedFieldMapper
        from booking_orchestrator.tools.demo_forms import StaticFormInspector
        assert callable(JsonProfileStore)
        assert callable(StaticProviderDirectory)

    def test_import_browser(self):
        from booking_orchestrator.tools.browser import (
            PlaywrightFormActuator, PlaywrightFormInspector,
        )
        assert PlaywrightFormInspector().timeout_ms > 0


class TestPromptImports:
    def test_import_reply_templates(self):
        from booking_orchestrator.prompts.reply_templates import (
            build_greeting_reply, build_booking_confirmation,
        )
        assert "user ID" in build_greeting_reply()


class TestConfigImport:
    def test_import_config(self):
        from booking_orchestrator.config import settings
        assert settings.app_name

    def test_import_session(self):
        from booking_orchestrator.session import BookingSession, build_default_orchestrator
        assert callable(build_default_orchestrator)
