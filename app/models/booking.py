import uuid
from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db import Base


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # One confirmed booking per start time on a turf and date. Cancelled
        # rows drop out of the index and free the slot.
        Index(
            "unique_booking_slot_confirmed",
            "turf_id",
            "booking_date",
            "start_time",
            unique=True,
            sqlite_where=text("status = 'confirmed'"),
            postgresql_where=text("status = 'confirmed'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    turf_id = Column(String(36), ForeignKey("turfs.id"), index=True, nullable=False)
    user_id = Column(String(36), index=True, nullable=False)
    # address for booking emails, captured from the session at creation
    user_email = Column(String, nullable=True)
    booking_date = Column(Date, nullable=False)
    # "HH:MM", local wall clock
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    total_price = Column(Float, nullable=False)
    status = Column(String(16), nullable=False, default="confirmed")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    turf = relationship("Turf", back_populates="bookings")
