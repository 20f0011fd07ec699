import enum

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import relationship

from app.database.base import Base
from app.models.ids import new_id


class PickupStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    COLLECTED = "COLLECTED"
    EN_ROUTE = "EN_ROUTE"
    INCINERATED = "INCINERATED"
    CANCELLED = "CANCELLED"


# Older driver forms still submit IN_TRANSIT.
STATUS_ALIASES = {"IN_TRANSIT": PickupStatus.EN_ROUTE}


class Pickup(Base):
    __tablename__ = "pickups"
    __table_args__ = (
        Index("ix_pickups_hospital_collected_at", "hospital_id", "collected_at"),
        Index("ix_pickups_driver_created_at", "driver_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    hospital_id = Column(String(36), ForeignKey("hospitals.id"), nullable=False, index=True)
    driver_id = Column(String(36), ForeignKey("drivers.id"), nullable=False, index=True)
    weight_kg = Column(Float, nullable=False)
    collected_at = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=PickupStatus.COLLECTED.value, index=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    hospital = relationship("Hospital", back_populates="pickups")
    driver = relationship("Driver", back_populates="pickups")
    photos = relationship(
        "PickupPhoto",
        back_populates="pickup",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PickupPhoto.file_name",
    )


class PickupPhoto(Base):
    __tablename__ = "pickup_photos"

    id = Column(String(36), primary_key=True, default=new_id)
    pickup_id = Column(String(36), ForeignKey("pickups.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    mime_type = Column(String(120), nullable=False, default="application/octet-stream")
    file_size = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    pickup = relationship("Pickup", back_populates="photos")
