import re
from datetime import date
from pydantic import BaseModel, field_validator
from typing import Optional
from uuid import UUID

BZS_NUMBER_RE = re.compile(r"^\d{5}-\d{3}$")


class FieldLocation(BaseModel):
    latitude: float
    longitude: float


class FieldRead(BaseModel):
    id: UUID
    organization_id: UUID
    season_id: Optional[UUID] = None
    name: str
    bzs_number: str
    populated_place: str
    land_area: str
    locality: str
    area: float
    sowing_date: Optional[date] = None
    crop_type: Optional[str] = None
    location: Optional[FieldLocation] = None


class FieldCreate(BaseModel):
    organization_id: UUID
    name: str
    bzs_number: str = ""
    populated_place: str = ""
    land_area: str = ""
    locality: str = ""
    area: float
    sowing_date: Optional[date] = None
    crop_type: Optional[str] = None
    location: Optional[FieldLocation] = None
    season_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name is required")
        return v

    @field_validator("bzs_number")
    @classmethod
    def _bzs(cls, v: str) -> str:
        v = (v or "").strip()
        if v and not BZS_NUMBER_RE.match(v):
            raise ValueError("bzs_number must look like 00000-000")
        return v

    @field_validator("area")
    @classmethod
    def _area(cls, v: float) -> float:
        if v < 0:
            raise ValueError("area must be >= 0")
        return v


class FieldUpdate(BaseModel):
    name: Optional[str] = None
    bzs_number: Optional[str] = None
    populated_place: Optional[str] = None
    land_area: Optional[str] = None
    locality: Optional[str] = None
    area: Optional[float] = None
    sowing_date: Optional[date] = None
    crop_type: Optional[str] = None
    location: Optional[FieldLocation] = None
    season_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def _name_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("bzs_number")
    @classmethod
    def _bzs_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if v and not BZS_NUMBER_RE.match(v):
            raise ValueError("bzs_number must look like 00000-000")
        return v

    @field_validator("area")
    @classmethod
    def _area_optional(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("area must be >= 0")
        return v
