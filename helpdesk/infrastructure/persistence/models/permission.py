"""Permission and RolePermission ORM models (RBAC)."""

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.infrastructure.persistence.database import Base
from helpdesk.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class Permission(CuidMixin, CreatedAtMixin, Base):
    """Permission. Table: permissions. Unique name (machine key)."""

    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False)

    __table_args__ = (Index("ix_permissions_category", "category"),)


class RolePermission(Base):
    """Many-to-many role-permission. Table: role_permissions. Composite primary key."""

    __tablename__ = "role_permissions"

    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    )
    permission_id: Mapped[str] = mapped_column(
        String, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True
    )
