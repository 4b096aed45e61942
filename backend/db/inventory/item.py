import uuid

from sqlalchemy import JSON, Column, Date, DateTime, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    # 'chemical' | 'pesticide' | 'fertilizer' | 'soil_conditioner' | ...
    category = Column(Text, nullable=False, index=True)
    # Written only by core.ledger
    quantity = Column(Float, nullable=False, default=0.0)
    unit = Column(Text, nullable=False)
    location = Column(String, nullable=True)
    expiry_date = Column(Date, nullable=True)

    crop_types = Column(JSON, nullable=True)
    applicable_for = Column(JSON, nullable=True)

    # fertilizer only
    contents = Column(Text, nullable=True)
    nitrogen_content = Column(Float, nullable=True)
    fertilizer_type = Column(String, nullable=True)  # "гранулиран" | "листен"

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    movements = relationship(
        "InventoryMovement",
        back_populates="inventory_item",
        cascade="all, delete-orphan",
    )

    def applies_to_crop(self, crop_type):
        return not self.crop_types or crop_type in self.crop_types
