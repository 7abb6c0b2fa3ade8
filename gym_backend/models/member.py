"""Member model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from gym_backend.database import Base
from gym_backend.models.membership_type import MembershipType


class Member(Base):
    """Represents a gym member.

    A member may correspond to a login identity with the same email. That link
    is resolved by lookup, there is no foreign key to ``users``.
    """
    __tablename__ = "members"

    id = Column(Integer, primary_key=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, index=True)
    phone = Column(String)
    join_date = Column(DateTime)
    membership_type_id = Column(
        Integer,
        ForeignKey("membership_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    membership_type = relationship(MembershipType, back_populates="members", lazy="joined")
