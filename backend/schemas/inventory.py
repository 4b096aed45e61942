from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator


CHEMICAL_CATEGORIES = ("chemical", "pesticide")
FERTILIZER_CATEGORIES = ("fertilizer", "soil_conditioner")


class InventoryItemCreate(BaseModel):
    organization_id: UUID
    name: str
    category: str
    quantity: float = 0.0
    unit: str
    location: Optional[str] = None
    expiry_date: Optional[date] = None
    crop_types: Optional[List[str]] = None
    applicable_for: Optional[List[str]] = None
    contents: Optional[str] = None
    nitrogen_content: Optional[float] = None
    fertilizer_type: Optional[str] = None

    @field_validator("name", "unit")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("category")
    @classmethod
    def _category(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if not v:
            raise ValueError("category is required")
        return v

    @field_validator("quantity")
    @classmethod
    def _quantity_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("quantity must be >= 0")
        return float(v)

    @field_validator("nitrogen_content")
    @classmethod
    def _nitrogen_pct(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return None
        if v < 0 or v > 100:
            raise ValueError("nitrogen_content must be a percentage (0-100)")
        return v


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    # Routed through the ledger as a stock adjustment
    quantity: Optional[float] = None
    unit: Optional[str] = None
    location: Optional[str] = None
    expiry_date: Optional[date] = None
    crop_types: Optional[List[str]] = None
    applicable_for: Optional[List[str]] = None
    contents: Optional[str] = None
    nitrogen_content: Optional[float] = None
    fertilizer_type: Optional[str] = None
    adjustment_reason: Optional[str] = None

    @field_validator("name", "unit", "category")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = (v or "").strip()
        if not v:
            raise ValueError("cannot be empty")
        return v

    @field_validator("quantity")
    @classmethod
    def _quantity_optional(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return None
        if v < 0:
            raise ValueError("quantity must be >= 0")
        return float(v)

    @field_validator("nitrogen_content")
    @classmethod
    def _nitrogen_pct_optional(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return None
        if v < 0 or v > 100:
            raise ValueError("nitrogen_content must be a percentage (0-100)")
        return v


class InventoryMovementOut(BaseModel):
    id: UUID
    inventory_item_id: UUID
    change: float
    quantity_after: float
    reason: Optional[str] = None
    source_type: Optional[str] = None
    source_activity_id: Optional[UUID] = None
    is_reversal: bool
    created_at: datetime

    class Config:
        from_attributes = True
