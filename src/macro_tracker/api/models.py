"""Pydantic models for food record request payloads."""

from pydantic import BaseModel, Field


class CreateFoodRecordRequest(BaseModel):
    """Body of a food record creation request."""

    name: str = Field(min_length=1)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    calories: float | None = Field(default=None, ge=0)
    quantity: float | None = Field(default=None, ge=0)
    date: str | None = None


class BulkDeleteRequest(BaseModel):
    """Body of a bulk delete request."""

    keys: list[str] = Field(min_length=1, max_length=100)
