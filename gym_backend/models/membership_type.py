"""Membership type model definitions."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from gym_backend.database import Base


class MembershipType(Base):
    """Represents a membership plan offered by the gym (e.g. Gold, Silver)."""
    __tablename__ = "membership_types"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    cost = Column(Integer, nullable=False, default=0)
    duration_months = Column(Integer, nullable=False, default=1)

    # Removing a plan removes the members on it.
    members = relationship(
        "Member",
        back_populates="membership_type",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
