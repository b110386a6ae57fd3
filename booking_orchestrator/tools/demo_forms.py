"""
Mock booking-page adapters for offline runs.

In production, form fields are read from the provider's live booking page
by the Playwright inspector. These stand-ins serve one fixed intake form
for every provider and record submissions in memory instead of posting them.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import TypedDict

from booking_orchestrator.schemas.form_schema import FieldAssignment, FormField

logger = logging.getLogger(__name__)


class SubmissionRecord(TypedDict):
    """One recorded form submission."""

    submission_ref: str
    url: str
    values: dict[str, str]
    submit_selector: str
    submitted_at: str


DEMO_INTAKE_FORM: list[FormField] = [
    FormField(label="First Name", field_id="#first_name", required=True),
    FormField(label="Last Name", field_id="#last_name", required=True),
    FormField(label="Date of Birth", field_id="#dob", field_type="date", required=True),
    FormField(label="Phone Number", field_id="#phone", field_type="tel", required=True),
    FormField(label="Email Address", field_id="#email", field_type="email"),
    FormField(label="Insurance Provider", field_id="#insurance", required=True),
    FormField(label="Insurance Member ID", field_id="#member_id", required=True),
    FormField(label="Reason for Visit", field_id="#reason", field_type="textarea"),
    FormField(label="Preferred Appointment Date", field_id="#preferred_date",
              field_type="date", required=True),
    FormField(label="I agree to the office policies", field_id="#consent",
              field_type="checkbox"),
    FormField(label="csrf", field_id="[name=\"csrf_token\"]", field_type="hidden"),
]


class StaticFormInspector:
    """Returns the same intake form for every booking URL."""

    def __init__(self, fields: list[FormField] = DEMO_INTAKE_FORM) -> None:
        self.fields = list(fields)

    async def inspect(self, url: str) -> list[FormField]:
        logger.debug("Serving %d demo fields for %s", len(self.fields), url)
        return list(self.fields)


class RecordingFormActuator:
    """Accepts every submission and keeps it in memory."""

    def __init__(self) -> None:
        self.submissions: list[SubmissionRecord] = []

    async def submit(
        self,
        url: str,
        assignments: list[FieldAssignment],
        submit_instruction: FieldAssignment,
    ) -> bool:
        record: SubmissionRecord = {
            "submission_ref": f"SUB-{uuid.uuid4().hex[:6].upper()}",
            "url": url,
            "values": {a.field_id: a.value for a in assignments},
            "submit_selector": submit_instruction.field_id,
            "submitted_at": datetime.now(timezone.utc).isoformat(),
        }
        self.submissions.append(record)
        logger.info("Recorded submission %s for %s", record["submission_ref"], url)
        return True
