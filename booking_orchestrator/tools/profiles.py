"""
JSON-file profile store and the canned demo profile.

In production, this would query a patient record system (EHR, a practice
management API) to identify the user. The file maps user ids to records:

    {"user_12345": {"first_name": "Maria", "last_name": "Garcia", ...}}
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from booking_orchestrator.conversation.errors import LookupFailure
from booking_orchestrator.schemas.profile_schema import UserProfile

logger = logging.getLogger(__name__)


class JsonProfileStore:
    """Profile store backed by a JSON file, loaded on first lookup."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._records: Optional[dict[str, dict[str, Any]]] = None

    def _load(self) -> dict[str, dict[str, Any]]:
        if self._records is None:
            try:
                with self.path.open(encoding="utf-8") as fh:
                    data = json.load(fh)
            except (OSError, json.JSONDecodeError) as exc:
                raise LookupFailure(f"Profile store unavailable at {self.path}: {exc}") from exc
            if not isinstance(data, dict):
                raise LookupFailure(f"Profile store at {self.path} is not a JSON object")
            self._records = data
            logger.info("Loaded %d profiles from %s", len(data), self.path)
        return self._records

    async def lookup(self, user_id: str) -> Optional[UserProfile]:
        """Look up a profile by user id. Returns None if not found."""
        record = self._load().get(user_id)
        if record is None:
            logger.debug("No profile for %s", user_id)
            return None
        try:
            return UserProfile(**{**record, "user_id": user_id})
        except ValidationError as exc:
            raise LookupFailure(f"Profile record for {user_id} is malformed") from exc


def build_demo_profile(user_id: str) -> UserProfile:
    """Synthesize a canned profile bound to the requested id.

    Used when the real store is unreachable so the conversation can continue.
    """
    logger.info("Using demo profile for %s", user_id)
    return UserProfile(
        user_id=user_id,
        first_name="Alex",
        last_name="Demo",
        date_of_birth="1985-06-15",
        gender="Prefer not to say",
        phone="(555) 010-2030",
        email="alex.demo@example.com",
        address="100 Main Street",
        city="San Francisco",
        state="CA",
        zip_code="94105",
        insurance_provider="Blue Cross Blue Shield",
        insurance_member_id="DEMO000000",
        insurance_group_number="GRP-DEMO",
        reason_for_visit="General checkup",
    )
