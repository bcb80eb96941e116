"""Request and response models shared by the counter store and HTTP routes."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt

# SQLite INTEGER is a signed 64-bit value
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class Counter(BaseModel):
    """A persisted counter record as returned by the store and the API."""

    id: int
    value: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(frozen=True)


class CreateCounterInput(BaseModel):
    value: StrictInt = Field(0, ge=INT64_MIN, le=INT64_MAX, description="Initial value, defaults to 0.")


class ResetCounterInput(BaseModel):
    value: StrictInt = Field(0, ge=INT64_MIN, le=INT64_MAX, description="Value to reset to, defaults to 0.")
