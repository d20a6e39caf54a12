"""User ORM model for staff accounts. Exactly one role per user."""

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.infrastructure.persistence.database import Base
from helpdesk.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class User(CuidMixin, CreatedAtMixin, Base):
    """User model. Table: users. Unique username; role_id restricts role deletion."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False
    )

    __table_args__ = (Index("ix_users_role_id", "role_id"),)
