import uuid
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


class Season(Base):
    __tablename__ = "seasons"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    year = Column(String, nullable=False, index=True)  # "2024 / 2025"
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="seasons")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "name": self.name,
            "year": self.year,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "is_active": bool(self.is_active),
        }
