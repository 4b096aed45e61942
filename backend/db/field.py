import uuid
from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


class Field(Base):
    """Agricultural field (parcel) registered by an organization"""
    __tablename__ = "fields"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    season_id = Column(Uuid, ForeignKey("seasons.id", ondelete="SET NULL"), nullable=True, index=True)

    name = Column(String, nullable=False)
    bzs_number = Column(String, nullable=False, default="")  # НОМЕР по БЗС, "00000-000"
    populated_place = Column(String, nullable=False, default="")
    land_area = Column(String, nullable=False, default="")  # Землище
    locality = Column(String, nullable=False, default="")  # Местност
    area = Column(Float, nullable=False, default=0.0)  # decares
    sowing_date = Column(Date, nullable=True)
    crop_type = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="fields")
    season = relationship("Season")

    @property
    def to_schema(self):
        location = None
        if self.latitude is not None and self.longitude is not None:
            location = {"latitude": self.latitude, "longitude": self.longitude}
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "season_id": self.season_id,
            "name": self.name,
            "bzs_number": self.bzs_number,
            "populated_place": self.populated_place,
            "land_area": self.land_area,
            "locality": self.locality,
            "area": float(self.area or 0),
            "sowing_date": self.sowing_date,
            "crop_type": self.crop_type,
            "location": location,
        }
