"""Role ORM model. System roles (admin, supervisor, tecnico) plus custom roles."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.infrastructure.persistence.database import Base
from helpdesk.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class Role(CuidMixin, CreatedAtMixin, Base):
    """Role. Table: roles. Unique name (lowercase/underscore)."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
