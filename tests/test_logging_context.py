"""Tests for session-scoped logging context."""

import io
import logging

import pytest

from booking_orchestrator.conversation.orchestrator import BookingOrchestrator
from booking_orchestrator.logging_context import (
    NO_SESSION_ID,
    SESSION_LOG_FORMAT,
    SessionIdFilter,
    get_session_id,
    install_session_filter,
    session_context,
)
from tests.conftest import FakeProfileStore


class SessionRecordingStore(FakeProfileStore):
    """Profile store that remembers which session id was active during lookup."""

    def __init__(self):
        super().__init__()
        self.seen_session_ids: list[str] = []

    async def lookup(self, user_id):
        self.seen_session_ids.append(get_session_id())
        return await super().lookup(user_id)


@pytest.fixture
def captured_logger():
    logger = logging.getLogger("booking_orchestrator.test_capture")
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(SESSION_LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    yield logger, handler, stream
    logger.removeHandler(handler)


class TestSessionLogging:
    def test_filter_attaches_session_id(self):
        with session_context("SESSION-test01"):
            record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
            assert SessionIdFilter().filter(record)
        assert record.session_id == "SESSION-test01"

    def test_context_restores_previous_id(self):
        with session_context("SESSION-outer"):
            with session_context("SESSION-inner"):
                assert get_session_id() == "SESSION-inner"
            assert get_session_id() == "SESSION-outer"
        assert get_session_id() == NO_SESSION_ID

    def test_formatted_line_carries_session_id(self, captured_logger):
        logger, _, stream = captured_logger
        install_session_filter(logger)
        with session_context("SESSION-abc123"):
            logger.info("Provider selected")
        assert "[SESSION-abc123]" in stream.getvalue()
        assert "Provider selected" in stream.getvalue()

    def test_install_is_idempotent(self, captured_logger):
        logger, handler, _ = captured_logger
        install_session_filter(logger)
        install_session_filter(logger)
        assert sum(isinstance(f, SessionIdFilter) for f in handler.filters) == 1

    def test_defaults_to_root_handlers(self):
        root = logging.getLogger()
        handler = logging.StreamHandler(io.StringIO())
        root.addHandler(handler)
        try:
            install_session_filter()
            assert any(isinstance(f, SessionIdFilter) for f in handler.filters)
        finally:
            root.removeHandler(handler)

    @pytest.mark.asyncio
    async def test_collaborators_see_session_id(self, conversation_state, app_config,
                                                provider_directory, form_inspector,
                                                field_mapper, form_actuator):
        store = SessionRecordingStore()
        orchestrator = BookingOrchestrator(
            profile_store=store,
            provider_directory=provider_directory,
            form_inspector=form_inspector,
            field_mapper=field_mapper,
            form_actuator=form_actuator,
            config=app_config,
        )
        await orchestrator.process_message(conversation_state, "user_12345")
        assert store.seen_session_ids == [conversation_state.session_id]
        assert get_session_id() == NO_SESSION_ID
