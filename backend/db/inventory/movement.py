import uuid

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class InventoryMovement(Base):
    __tablename__ = "inventory_movements"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    inventory_item_id = Column(
        Uuid,
        ForeignKey("inventory_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    change = Column(Float, nullable=False)
    quantity_after = Column(Float, nullable=False)
    reason = Column(Text, nullable=True)
    source_type = Column(Text, nullable=True)  # 'activity' | 'adjustment' | 'opening'
    # No FK: the activity may be deleted while its reversal stays in the journal
    source_activity_id = Column(Uuid, nullable=True, index=True)
    is_reversal = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    inventory_item = relationship("InventoryItem", back_populates="movements")
