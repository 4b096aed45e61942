from datetime import date
from pydantic import BaseModel, field_validator, model_validator
from typing import Optional
from uuid import UUID


class SeasonRead(BaseModel):
    id: UUID
    organization_id: UUID
    name: str
    year: str
    start_date: date
    end_date: date
    is_active: bool


class SeasonCreate(BaseModel):
    organization_id: UUID
    year: int
    is_active: bool = False

    @field_validator("year")
    @classmethod
    def _year_range(cls, v: int) -> int:
        if v < 1900 or v > 2200:
            raise ValueError("year must be a calendar year, e.g. 2024")
        return v


class SeasonUpdate(BaseModel):
    name: Optional[str] = None
    is_active: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _dates_in_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self
