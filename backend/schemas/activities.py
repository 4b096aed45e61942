import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator, model_validator


ActivityCategory = Literal["chemical_treatment", "field_inspection", "fertilizer", "farm_activity"]

_NON_NEGATIVE = (
    "dose",
    "treated_area",
    "surveyed_area",
    "attacked_area",
    "fertilized_area",
)


class ActivityFields(BaseModel):
    """Category-specific fields shared by create and update payloads."""

    field_id: Optional[UUID] = None
    description: Optional[str] = None

    # chemical treatment
    chemical_id: Optional[UUID] = None
    chemical_name: Optional[str] = None
    infestation_type: Optional[str] = None
    dose: Optional[float] = None
    quarantine_period: Optional[int] = None
    treated_area: Optional[float] = None
    equipment: Optional[str] = None

    # field inspection
    start_date: Optional[datetime.date] = None
    surveyed_area: Optional[float] = None
    attacked_area: Optional[float] = None
    damage: Optional[str] = None
    damage_type: Optional[str] = None
    attack_density: Optional[str] = None
    phenological_phase: Optional[str] = None

    # fertilizer
    fertilizer_id: Optional[UUID] = None
    fertilizer_name: Optional[str] = None
    fertilized_area: Optional[float] = None
    fertilizer_type: Optional[str] = None

    # farm activity
    end_date: Optional[datetime.date] = None
    activity_type: Optional[str] = None
    material_type: Optional[str] = None
    quantity: Optional[str] = None

    @field_validator(*_NON_NEGATIVE)
    @classmethod
    def _non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return None
        if v < 0:
            raise ValueError("must be >= 0")
        return float(v)

    @field_validator("quarantine_period")
    @classmethod
    def _quarantine(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("quarantine_period must be >= 0")
        return v


class ActivityCreate(ActivityFields):
    organization_id: UUID
    category: ActivityCategory
    type: str = ""
    date: datetime.date
    user_id: str

    @field_validator("user_id")
    @classmethod
    def _user_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("user_id is required")
        return v

    @model_validator(mode="after")
    def _dates_in_order(self):
        if self.end_date and self.end_date < self.date:
            raise ValueError("end_date cannot be before date")
        return self


class ActivityUpdate(ActivityFields):
    category: Optional[ActivityCategory] = None
    type: Optional[str] = None
    date: Optional[datetime.date] = None
