from sqlalchemy import Boolean, Column, DateTime, String, func
from sqlalchemy.orm import relationship

from app.database.base import Base
from app.models.ids import new_id


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(String(36), primary_key=True, default=new_id)
    code = Column(String(64), unique=True, index=True, nullable=False)
    name = Column(String(180), nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    pickups = relationship("Pickup", back_populates="driver", passive_deletes=True)
