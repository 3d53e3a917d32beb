import uuid
from sqlalchemy.orm import relationship
from sqlalchemy import Column, DateTime, Float, Integer, JSON, String, Text
from sqlalchemy.sql import func
from app.db import Base


class Turf(Base):
    __tablename__ = "turfs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, index=True, nullable=False)
    location = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String, nullable=True)
    price = Column(Float, nullable=False)
    capacity = Column(Integer, nullable=False)
    rating = Column(Float, nullable=False, default=0)
    reviews = Column(Integer, nullable=False, default=0)
    features = Column(JSON, nullable=False, default=list)
    owner_id = Column(String(36), index=True, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    bookings = relationship(
        "Booking", back_populates="turf", cascade="all, delete-orphan"
    )
    turf_reviews = relationship(
        "Review", back_populates="turf", cascade="all, delete-orphan"
    )
