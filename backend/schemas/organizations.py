from pydantic import BaseModel, field_validator
from typing import Optional
from uuid import UUID


class OrganizationRead(BaseModel):
    id: UUID
    clerk_org_id: str
    name: str
    slug: str
    municipality: Optional[str] = None
    settlement: Optional[str] = None
    address: Optional[str] = None
    agriculture_directorate: Optional[str] = None
    regional_food_safety_directorate: Optional[str] = None
    ekatte_registration: Optional[str] = None
    is_onboarded: bool = False


class OrganizationUpsert(BaseModel):
    clerk_org_id: str
    name: str
    slug: str

    @field_validator("clerk_org_id", "name", "slug")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class OrganizationOnboarding(BaseModel):
    municipality: Optional[str] = None
    settlement: Optional[str] = None
    address: Optional[str] = None
    agriculture_directorate: Optional[str] = None
    regional_food_safety_directorate: Optional[str] = None
    ekatte_registration: Optional[str] = None

    @field_validator("ekatte_registration")
    @classmethod
    def _ekatte(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if len(v) != 5 or not v.isdigit():
            raise ValueError("ekatte_registration must be 5 digits")
        return v
