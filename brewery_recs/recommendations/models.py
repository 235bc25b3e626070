from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Snake_case attributes, lowerCamelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TasteProfile(_CamelModel):
    primary_flavor: str | None = None
    secondary_flavors: list[str] | None = None
    sweetness: str | None = None
    bitterness: str | None = None
    mouthfeel: str | None = None
    body: str | None = None
    acidity: float | None = None
    aftertaste: str | None = None
    aroma: list[str] | None = None


class InventoryItem(_CamelModel):
    id: int
    name: str = ""
    taste_profile: TasteProfile = Field(default_factory=TasteProfile)
    stock_quantity: int = Field(default=0, ge=0)

    # Carried through untouched; matching never reads these.
    type: str | None = None
    description: str | None = None
    abv: float | None = None
    volume: float | None = None
    package: str | None = None
    price: float | None = None
    cost: float | None = None
    reorder_point: int | None = None
    is_active: bool | None = None

    @field_validator("taste_profile", mode="before")
    @classmethod
    def profile_or_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class UserProfile(_CamelModel):
    id: int | str | None = None
    name: str | None = None
    email: str | None = None
    taste_profile: TasteProfile = Field(default_factory=TasteProfile)

    @field_validator("taste_profile", mode="before")
    @classmethod
    def profile_or_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class AuthenticatedUser(BaseModel):
    id: int | str
    email: str | None = None


class RecommendationResponse(BaseModel):
    message: str
    recommendations: list[InventoryItem]


class ErrorResponse(BaseModel):
    message: str
    error: Any = None
