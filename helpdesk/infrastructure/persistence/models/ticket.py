"""Ticket ORM model. Status is constrained to the four lifecycle values."""

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.domain.enums import TicketStatus
from helpdesk.infrastructure.persistence.database import Base
from helpdesk.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin

_STATUS_VALUES = ", ".join(f"'{s}'" for s in TicketStatus.values())


class Ticket(CuidMixin, TimestampMixin, Base):
    """Support ticket. Table: tickets. reference and edit_token are unique."""

    __tablename__ = "tickets"

    reference: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    requester_name: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str] = mapped_column(String(100), nullable=False)
    support_type: Mapped[str] = mapped_column(String(64), nullable=False)
    priority: Mapped[str] = mapped_column(String(64), nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image_path: Mapped[str | None] = mapped_column(String, nullable=True)
    has_anydesk: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    anydesk_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=TicketStatus.PENDIENTE.value
    )
    edit_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    assigned_to: Mapped[str | None] = mapped_column(
        String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_tickets_status"),
        Index("ix_tickets_status", "status"),
        Index("ix_tickets_priority", "priority"),
        Index("ix_tickets_support_type", "support_type"),
        Index("ix_tickets_assigned_to", "assigned_to"),
        Index("ix_tickets_created_at", "created_at"),
    )
