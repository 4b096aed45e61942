import uuid
from sqlalchemy import Boolean, Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


class Organization(Base):
    """A farm (company) using the platform, keyed by its external org id."""
    __tablename__ = "organizations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clerk_org_id = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)

    # Onboarding profile, printed on page 1 of the BABH logbook
    municipality = Column(String, nullable=True)  # Община
    settlement = Column(String, nullable=True)  # Населено място
    address = Column(String, nullable=True)
    agriculture_directorate = Column(String, nullable=True)  # ОД "Земеделие"
    regional_food_safety_directorate = Column(String, nullable=True)  # ОДБХ
    ekatte_registration = Column(String(5), nullable=True)
    is_onboarded = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    seasons = relationship("Season", back_populates="organization", cascade="all, delete-orphan")
    fields = relationship("Field", back_populates="organization", cascade="all, delete-orphan")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "clerk_org_id": self.clerk_org_id,
            "name": self.name,
            "slug": self.slug,
            "municipality": self.municipality,
            "settlement": self.settlement,
            "address": self.address,
            "agriculture_directorate": self.agriculture_directorate,
            "regional_food_safety_directorate": self.regional_food_safety_directorate,
            "ekatte_registration": self.ekatte_registration,
            "is_onboarded": bool(self.is_onboarded),
        }
