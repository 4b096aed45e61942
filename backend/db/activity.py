import uuid
from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


class Activity(Base):
    """Logged field work. Category-specific columns are left null for other categories."""
    __tablename__ = "activities"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    field_id = Column(Uuid, ForeignKey("fields.id", ondelete="SET NULL"), nullable=True, index=True)

    type = Column(String, nullable=False, default="")
    # 'chemical_treatment' | 'field_inspection' | 'fertilizer' | 'farm_activity'
    category = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)

    # chemical treatment
    chemical_id = Column(Uuid, ForeignKey("inventory_items.id", ondelete="SET NULL"), nullable=True)
    chemical_name = Column(String, nullable=True)
    infestation_type = Column(String, nullable=True)
    dose = Column(Float, nullable=True)  # per decare, shared with fertilizer
    quarantine_period = Column(Integer, nullable=True)  # days, 0 = none
    treated_area = Column(Float, nullable=True)
    equipment = Column(String, nullable=True)

    # field inspection
    start_date = Column(Date, nullable=True)
    surveyed_area = Column(Float, nullable=True)
    attacked_area = Column(Float, nullable=True)
    damage = Column(String, nullable=True)
    damage_type = Column(String, nullable=True)
    attack_density = Column(String, nullable=True)
    phenological_phase = Column(String, nullable=True)

    # fertilizer
    fertilizer_id = Column(Uuid, ForeignKey("inventory_items.id", ondelete="SET NULL"), nullable=True)
    fertilizer_name = Column(String, nullable=True)
    fertilized_area = Column(Float, nullable=True)
    fertilizer_type = Column(String, nullable=True)

    # farm activity
    end_date = Column(Date, nullable=True)
    activity_type = Column(String, nullable=True)
    material_type = Column(String, nullable=True)
    quantity = Column(String, nullable=True)  # free text, e.g. "10 kg/dka"

    # item the ledger debited for this activity
    inventory_item_id = Column(Uuid, ForeignKey("inventory_items.id", ondelete="SET NULL"), nullable=True, index=True)
    consumed_quantity = Column(Float, nullable=True)  # dose * area debited from it

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    field = relationship("Field")

    @property
    def consumed_area(self):
        """Area the stored dose was applied over (treated or fertilized)."""
        return self.treated_area or self.fertilized_area or 0
