"""
Rule-based mapping of booking-form fields onto profile attributes.

Labels and field ids are matched against an ordered alias table, most
specific phrases first, so "Patient First Name" resolves to first_name
before the generic "name" alias gets a chance.
"""

import logging
import re
from typing import Optional

from booking_orchestrator.schemas.form_schema import (
    ActionKind,
    FieldAssignment,
    FormField,
    MappingResult,
)
from booking_orchestrator.schemas.profile_schema import UserProfile
from booking_orchestrator.utils import normalize_phone

logger = logging.getLogger(__name__)

# (alias, profile attribute), checked in order.
FIELD_ALIASES: list[tuple[str, str]] = [
    ("first name", "first_name"), ("given name", "first_name"), ("fname", "first_name"),
    ("last name", "last_name"), ("family name", "last_name"), ("surname", "last_name"),
    ("lname", "last_name"),
    ("date of birth", "date_of_birth"), ("birth date", "date_of_birth"),
    ("birthdate", "date_of_birth"), ("birthday", "date_of_birth"), ("dob", "date_of_birth"),
    ("email", "email"), ("e mail", "email"),
    ("phone", "phone"), ("telephone", "phone"), ("mobile", "phone"), ("cell", "phone"),
    ("member id", "insurance_member_id"), ("policy number", "insurance_member_id"),
    ("subscriber id", "insurance_member_id"), ("insurance id", "insurance_member_id"),
    ("group number", "insurance_group_number"), ("group id", "insurance_group_number"),
    ("insurance", "insurance_provider"), ("carrier", "insurance_provider"),
    ("zipcode", "zip_code"), ("zip", "zip_code"), ("postal", "zip_code"),
    ("city", "city"), ("town", "city"),
    ("state", "state"), ("province", "state"),
    ("address", "address"), ("street", "address"),
    ("gender", "gender"), ("sex", "gender"),
    ("allerg", "allergies"),
    ("medication", "medications"), ("prescription", "medications"),
    ("medical history", "medical_conditions"), ("condition", "medical_conditions"),
    ("reason", "reason_for_visit"), ("symptom", "reason_for_visit"),
    ("full name", "full_name"), ("patient name", "full_name"), ("name", "full_name"),
]

# Aliases that are word stems ("allerg" matches "allergies").
STEM_ALIASES = frozenset({"allerg", "medication", "prescription", "condition", "symptom"})

# Controls that never carry profile data.
SKIPPED_FIELD_TYPES = frozenset({"hidden", "submit", "button", "reset", "image", "file"})


def _normalize(text: str) -> str:
    return re.sub(r"[\s_\-#\[\]=\"'.]+", " ", text.lower()).strip()


def match_profile_attribute(field: FormField) -> Optional[str]:
    """Return the profile attribute a field asks for, or None if unrecognized."""
    haystacks = [h for h in (_normalize(field.label), _normalize(field.field_id)) if h]
    for alias, attribute in FIELD_ALIASES:
        pattern = rf"\b{re.escape(alias)}" + ("" if alias in STEM_ALIASES else r"\b")
        if any(re.search(pattern, h) for h in haystacks):
            return attribute
    return None


def profile_value(profile: UserProfile, attribute: str) -> Optional[str]:
    """Read a profile attribute as form text; None when absent or empty."""
    value = getattr(profile, attribute, None)
    if isinstance(value, list):
        value = ", ".join(str(v) for v in value if v)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def action_for_field(field: FormField) -> ActionKind:
    field_type = field.field_type.lower()
    if field_type in ("select", "select-one", "select-multiple"):
        return ActionKind.SELECT
    if field_type in ("checkbox", "radio"):
        return ActionKind.CLICK
    return ActionKind.TYPE


class RuleBasedFieldMapper:
    """Maps profile data onto form fields using the alias table."""

    async def map(self, profile: UserProfile, fields: list[FormField]) -> MappingResult:
        assignments: list[FieldAssignment] = []
        missing: list[str] = []

        for field in fields:
            if field.field_type.lower() in SKIPPED_FIELD_TYPES:
                continue

            attribute = match_profile_attribute(field)
            value = profile_value(profile, attribute) if attribute else None

            if value is None:
                if field.required and field.label not in missing:
                    missing.append(field.label)
                continue

            if field.field_type.lower() == "tel":
                value = normalize_phone(value)

            assignments.append(FieldAssignment(
                field_id=field.field_id,
                value=value,
                action=action_for_field(field),
            ))

        logger.debug(
            "Mapped %d of %d fields; missing required: %s",
            len(assignments), len(fields), missing,
        )
        return MappingResult(assignments=assignments, missing_fields=missing)
