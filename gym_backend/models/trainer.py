"""Trainer model definitions."""

from sqlalchemy import Column, Integer, String
from gym_backend.database import Base


class Trainer(Base):
    """Represents a gym trainer."""
    __tablename__ = "trainers"

    id = Column(Integer, primary_key=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    specialty = Column(String)
