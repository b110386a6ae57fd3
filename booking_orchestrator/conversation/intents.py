"""
Keyword and pattern recognizers for free-text user messages.

Each recognizer answers one narrow question about a message so the stage
handlers can route deterministically without a language model in the loop.
"""

import logging
import re
from typing import Optional

from booking_orchestrator.config import settings
from booking_orchestrator.utils import extract_first_integer

logger = logging.getLogger(__name__)

BOOKING_SIGNALS = [
    "book", "appointment", "schedule", "see a doctor", "see the doctor",
    "visit", "checkup", "check-up", "consultation", "doctor",
]

CONFIRMATION_WORDS = ["yes", "confirm", "proceed", "book", "ok", "okay"]

NEGATION_WORDS = ["no", "not", "don't", "dont", "wait"]

CANCEL_SIGNALS = ["cancel", "never mind", "nevermind", "forget it", "stop"]

RESELECT_SIGNALS = [
    "different provider", "another provider", "other provider",
    "different doctor", "another doctor", "other doctor",
    "someone else", "reselect", "pick again", "choose again",
]

MODIFY_SIGNALS = ["change", "modify", "update", "edit"]

RESTART_SIGNALS = ["start over", "restart"]

# Courtesy words allowed around a restart phrase ("let's start over please").
RESTART_FILLER = ["let's", "lets", "please", "can", "we", "i", "want", "to", "just"]

_WORD_RE = re.compile(r"[a-z']+")


def _contains_word(text: str, words: list[str]) -> bool:
    """Whole-word (or whole-phrase) match, case-insensitive."""
    lower = text.lower()
    return any(re.search(rf"(?<![\w']){re.escape(w)}(?![\w'])", lower) for w in words)


def _words(text: str) -> list[str]:
    return _WORD_RE.findall(text.lower())


def extract_user_id(text: str, pattern: Optional[str] = None) -> Optional[str]:
    """Return the first user identifier found in the text, or None.

    Identifiers match case-insensitively and are returned lowercased, the
    form the profile store keys on. If the pattern defines a capture group,
    the first group is returned; otherwise the whole match.
    """
    regex = re.compile(pattern or settings.booking.user_id_pattern, re.IGNORECASE)
    match = regex.search(text)
    if match is None:
        return None
    user_id = (match.group(1) if regex.groups else match.group(0)).lower()
    logger.debug("User identifier extracted: %s", user_id)
    return user_id


def has_booking_intent(text: str) -> bool:
    return _contains_word(text, BOOKING_SIGNALS)


def is_confirmation(text: str) -> bool:
    """True for an affirmative reply.

    A negation only counts when it directly precedes a confirmation word
    ("don't book", "wait, yes"); "yes, no problem" is still a yes.
    """
    words = _words(text)
    confirmed = False
    for i, word in enumerate(words):
        if word not in CONFIRMATION_WORDS:
            continue
        if i > 0 and words[i - 1] in NEGATION_WORDS:
            return False
        confirmed = True
    return confirmed


def wants_cancel(text: str) -> bool:
    return _contains_word(text, CANCEL_SIGNALS)


def wants_different_provider(text: str) -> bool:
    return _contains_word(text, RESELECT_SIGNALS)


def wants_modify(text: str) -> bool:
    return _contains_word(text, MODIFY_SIGNALS)


def wants_restart(text: str) -> bool:
    """True only when the whole message is a restart request.

    "start over" or "let's restart please" qualify; an answer that merely
    mentions the word ("restart my physical therapy") does not.
    """
    words = " ".join(_words(text))
    for phrase in RESTART_SIGNALS:
        pattern = rf"\b{re.escape(phrase)}\b"
        if re.search(pattern, words):
            rest = re.sub(pattern, " ", words).split()
            if all(w in RESTART_FILLER for w in rest):
                return True
    return False


def extract_selection(text: str) -> Optional[int]:
    """Return the number the user picked from a list, or None if there is none."""
    return extract_first_integer(text)
