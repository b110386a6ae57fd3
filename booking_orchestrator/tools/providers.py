"""Provider catalog and deterministic recommendation ranking."""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from booking_orchestrator.conversation.errors import LookupFailure
from booking_orchestrator.schemas.provider_schema import Provider

logger = logging.getLogger(__name__)

# Accepted-insurance entries that mean "takes any plan".
UNIVERSAL_INSURANCE_MARKERS = ("most major", "all plans")

PROVIDER_CATALOG: list[dict] = [
    {
        "provider_id": "prov_001",
        "name": "Dr. Sarah Chen",
        "specialty": "Family Medicine",
        "location": "San Francisco, CA",
        "address": "450 Sutter Street, Suite 1200, San Francisco, CA 94108",
        "phone": "(415) 555-0142",
        "accepted_insurance": ["Blue Cross Blue Shield", "Aetna", "UnitedHealthcare"],
        "services": ["Annual physicals", "Preventive care", "Chronic disease management"],
        "rating": 4.8,
        "available": True,
        "booking_url": "https://booking.example.com/providers/sarah-chen",
    },
    {
        "provider_id": "prov_002",
        "name": "Bay Area Internal Medicine Group",
        "specialty": "Internal Medicine",
        "location": "Oakland, CA",
        "address": "3100 Summit Street, Oakland, CA 94609",
        "phone": "(510) 555-0187",
        "accepted_insurance": ["Most major plans"],
        "services": ["Adult primary care", "Lab work", "Vaccinations"],
        "rating": 4.5,
        "available": True,
        "booking_url": "https://booking.example.com/providers/bay-area-internal",
    },
    {
        "provider_id": "prov_003",
        "name": "Dr. Michael Torres",
        "specialty": "Cardiology",
        "location": "San Francisco, CA",
        "address": "2100 Webster Street, San Francisco, CA 94115",
        "phone": "(415) 555-0199",
        "accepted_insurance": ["Aetna", "Cigna", "Medicare"],
        "services": ["Cardiac evaluation", "Echocardiograms", "Stress testing"],
        "rating": 4.9,
        "available": True,
        "booking_url": "https://booking.example.com/providers/michael-torres",
    },
    {
        "provider_id": "prov_004",
        "name": "Mission Community Clinic",
        "specialty": "Family Medicine",
        "location": "San Francisco, CA",
        "address": "240 Shotwell Street, San Francisco, CA 94110",
        "phone": "(415) 555-0123",
        "accepted_insurance": ["All plans accepted"],
        "services": ["Walk-in care", "Pediatrics", "Women's health"],
        "rating": 4.2,
        "available": True,
        "booking_url": "https://booking.example.com/providers/mission-community",
    },
    {
        "provider_id": "prov_005",
        "name": "Dr. Priya Patel",
        "specialty": "Dermatology",
        "location": "Palo Alto, CA",
        "address": "795 El Camino Real, Palo Alto, CA 94301",
        "phone": "(650) 555-0166",
        "accepted_insurance": ["Blue Cross Blue Shield", "Cigna"],
        "services": ["Skin exams", "Acne treatment", "Mole removal"],
        "rating": 4.7,
        "available": True,
        "booking_url": "https://booking.example.com/providers/priya-patel",
    },
    {
        "provider_id": "prov_006",
        "name": "Golden Gate Pediatrics",
        "specialty": "Pediatrics",
        "location": "San Francisco, CA",
        "address": "3838 California Street, San Francisco, CA 94118",
        "phone": "(415) 555-0175",
        "accepted_insurance": ["Blue Cross Blue Shield", "Kaiser Permanente", "Medi-Cal"],
        "services": ["Well-child visits", "Immunizations", "Sick visits"],
        "rating": 4.6,
        "available": False,
        "booking_url": "https://booking.example.com/providers/golden-gate-pediatrics",
    },
    {
        "provider_id": "prov_007",
        "name": "East Bay Orthopedics",
        "specialty": "Orthopedics",
        "location": "Berkeley, CA",
        "address": "2001 Dwight Way, Berkeley, CA 94704",
        "phone": "(510) 555-0131",
        "accepted_insurance": ["UnitedHealthcare", "Aetna", "Blue Cross Blue Shield"],
        "services": ["Sports injuries", "Joint pain", "Fracture care"],
        "rating": 4.4,
        "available": True,
        "booking_url": "https://booking.example.com/providers/east-bay-ortho",
    },
]


def accepts_insurance(provider: Provider, insurance: str) -> bool:
    """Case-insensitive substring match against the provider's accepted plans.

    Matching runs both ways, so a profile plan "Aetna PPO" is accepted by a
    provider listing "Aetna". Blank catalog entries never match.
    """
    wanted = insurance.lower().strip()
    for accepted in provider.accepted_insurance:
        normalized = accepted.lower().strip()
        if not normalized:
            continue
        if any(marker in normalized for marker in UNIVERSAL_INSURANCE_MARKERS):
            return True
        if wanted in normalized or normalized in wanted:
            return True
    return False


def matches_location(provider: Provider, location: str) -> bool:
    wanted = location.lower().strip()
    if not wanted:
        return False
    return wanted in provider.location.lower() or wanted in provider.address.lower()


def rank_providers(
    providers: list[Provider],
    insurance: Optional[str] = None,
    location: Optional[str] = None,
    limit: int = 5,
) -> list[Provider]:
    """
    Rank providers for a patient. Pure function of its inputs.

    Filters to providers accepting the insurance (when given), then orders
    location matches first and higher ratings next. Ties keep catalog order.
    """
    candidates = providers
    if insurance and insurance.strip():
        candidates = [p for p in providers if accepts_insurance(p, insurance)]
    ranked = sorted(
        candidates,
        key=lambda p: (
            0 if location and matches_location(p, location) else 1,
            -p.rating,
        ),
    )
    return ranked[:limit]


class StaticProviderDirectory:
    """Provider directory over a fixed in-memory provider list."""

    def __init__(self, providers: Optional[list[Provider]] = None, max_results: int = 5) -> None:
        if providers is None:
            providers = [Provider(**record) for record in PROVIDER_CATALOG]
        self._providers = list(providers)
        self.max_results = max_results

    @classmethod
    def from_json(cls, path: Union[str, Path], max_results: int = 5) -> "StaticProviderDirectory":
        """Load providers from a JSON array of provider records."""
        try:
            with Path(path).open(encoding="utf-8") as fh:
                records = json.load(fh)
            providers = [Provider(**record) for record in records]
        except (OSError, json.JSONDecodeError, TypeError, ValidationError) as exc:
            raise LookupFailure(f"Provider data unavailable at {path}: {exc}") from exc
        logger.info("Loaded %d providers from %s", len(providers), path)
        return cls(providers, max_results=max_results)

    @property
    def providers(self) -> list[Provider]:
        return list(self._providers)

    async def recommend(
        self, insurance: Optional[str] = None, location: Optional[str] = None
    ) -> list[Provider]:
        ranked = rank_providers(self._providers, insurance, location, self.max_results)
        logger.debug(
            "Recommended %d providers (insurance=%r, location=%r)",
            len(ranked), insurance, location,
        )
        return ranked
