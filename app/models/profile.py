from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func
from app.db import Base


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the user in the auth service
    id = Column(String(36), primary_key=True)
    username = Column(String, unique=True, nullable=True)
    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
