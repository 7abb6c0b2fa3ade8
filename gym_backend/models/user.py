"""Identity (login credential) and role model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from gym_backend.database import Base

ADMIN_ROLE = "Admin"
USER_ROLE = "User"
KNOWN_ROLES = (ADMIN_ROLE, USER_ROLE)


def normalize_email(email: str) -> str:
    return email.strip().lower()


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    """A named permission group assigned to identities."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)


class User(Base):
    """Represents a login identity, distinct from a gym member record."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False)
    normalized_email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    roles = relationship(Role, secondary=user_roles, lazy="selectin")

    @property
    def user_name(self) -> str:
        # Login name is the email address the identity registered with.
        return self.email

    @property
    def role_names(self) -> list[str]:
        return sorted(role.name for role in self.roles)
