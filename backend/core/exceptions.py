"""Errors raised by the inventory ledger.

Routers roll the request session back and re-raise; ``core.exception_handler``
turns them into HTTP responses.
"""

from typing import Any, Optional


class LedgerError(Exception):
    """Base class for inventory ledger failures."""

    status_code = 400

    def to_dict(self) -> dict[str, Any]:
        return {"detail": str(self)}


class NotFoundError(LedgerError):
    status_code = 404

    def __init__(self, entity: str = "Inventory item", entity_id: Optional[Any] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")

    def to_dict(self) -> dict[str, Any]:
        return {
            "detail": str(self),
            "id": str(self.entity_id) if self.entity_id is not None else None,
        }


class ItemCategoryError(LedgerError):
    """The referenced item cannot be consumed by this kind of activity."""

    status_code = 422

    def __init__(self, item_id: Any, item_category: str, expected: tuple):
        self.item_id = item_id
        self.item_category = item_category
        self.expected = expected
        super().__init__(
            f"Inventory item category '{item_category}' does not match, "
            f"expected one of: {', '.join(expected)}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "detail": str(self),
            "id": str(self.item_id),
            "category": self.item_category,
            "expected": list(self.expected),
        }


class InsufficientQuantityError(LedgerError):
    status_code = 409

    def __init__(self, available: float, required: float, unit: str):
        self.available = available
        self.required = required
        self.unit = unit
        super().__init__(
            f"Insufficient quantity. Available: {_fmt(available)} {unit}, "
            f"Required: {_fmt(required)} {unit}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "detail": str(self),
            "available": self.available,
            "required": self.required,
            "unit": self.unit,
        }


def _fmt(x: float) -> str:
    # 80.0 -> "80", 12.5 -> "12.5"
    return f"{x:g}"
