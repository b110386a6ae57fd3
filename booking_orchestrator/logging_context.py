"""Session correlation id for log records.

Every record emitted while a message is processed carries the session id of
the conversation it belongs to, so one user's booking can be followed
through the orchestrator and its collaborators:

    2026-01-05 10:12:03 [SESSION-3f9a1c2b7d4e] [booking_orchestrator...] INFO: Provider selected

``load_config`` installs the filter on the root handlers; the orchestrator
scopes the id with ``session_context`` around each message.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

NO_SESSION_ID = "NO_SESSION_ID"

SESSION_LOG_FORMAT = "%(asctime)s [%(session_id)s] [%(name)s] %(levelname)s: %(message)s"

_session_id: ContextVar[str] = ContextVar("session_id", default=NO_SESSION_ID)


def get_session_id() -> str:
    return _session_id.get()


@contextmanager
def session_context(session_id: str) -> Iterator[None]:
    """Bind ``session_id`` for the duration of the block, then restore the previous id."""
    token = _session_id.set(session_id)
    try:
        yield
    finally:
        _session_id.reset(token)


class SessionIdFilter(logging.Filter):
    """Injects session_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def install_session_filter(logger: Optional[logging.Logger] = None) -> None:
    """Attach a SessionIdFilter to every handler of ``logger`` (root by default).

    Handler-level filters also see records propagated from child loggers,
    which logger-level filters do not. Safe to call repeatedly.
    """
    target = logger or logging.getLogger()
    for handler in target.handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())
