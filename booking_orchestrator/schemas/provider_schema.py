"""Healthcare provider data model."""

from pydantic import BaseModel, ConfigDict, Field


class Provider(BaseModel):
    """A bookable provider from the provider directory."""

    model_config = ConfigDict(frozen=True)

    provider_id: str
    name: str
    specialty: str
    location: str
    address: str
    phone: str
    accepted_insurance: list[str] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    available: bool = True
    booking_url: str
