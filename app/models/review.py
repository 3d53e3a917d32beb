import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    turf_id = Column(String(36), ForeignKey("turfs.id"), index=True, nullable=False)
    user_id = Column(String(36), index=True, nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    turf = relationship("Turf", back_populates="turf_reviews")
    replies = relationship(
        "ReviewReply", back_populates="review", cascade="all, delete-orphan"
    )


class ReviewReply(Base):
    __tablename__ = "review_replies"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    review_id = Column(String(36), ForeignKey("reviews.id"), index=True, nullable=False)
    user_id = Column(String(36), nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    review = relationship("Review", back_populates="replies")
