"""Comment ORM model. Internal comments are staff-only."""

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.infrastructure.persistence.database import Base
from helpdesk.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class Comment(CuidMixin, CreatedAtMixin, Base):
    """Ticket comment. Table: comments. user_id is null for requester comments."""

    __tablename__ = "comments"

    ticket_id: Mapped[str] = mapped_column(
        String, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    author_name: Mapped[str] = mapped_column(String(100), nullable=False)
    author_email: Mapped[str | None] = mapped_column(String(254), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_internal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_comments_ticket_id", "ticket_id"),
        Index("ix_comments_created_at", "created_at"),
    )
