"""Comment repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.application.dtos.ticket import CommentResult
from helpdesk.infrastructure.persistence.models.comment import Comment
from helpdesk.infrastructure.persistence.repositories.base import BaseRepository
from helpdesk.shared.utils.datetime import ensure_utc


def _comment_to_result(c: Comment) -> CommentResult:
    return CommentResult(
        id=c.id,
        ticket_id=c.ticket_id,
        user_id=c.user_id,
        author_name=c.author_name,
        author_email=c.author_email,
        content=c.content,
        is_internal=c.is_internal,
        created_at=ensure_utc(c.created_at),
    )


class CommentRepository(BaseRepository[Comment]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Comment)

    async def create_comment(
        self,
        ticket_id: str,
        author_name: str,
        content: str,
        *,
        user_id: str | None = None,
        author_email: str | None = None,
        is_internal: bool = False,
        created_at: datetime | None = None,
    ) -> CommentResult:
        comment = Comment(
            ticket_id=ticket_id,
            user_id=user_id,
            author_name=author_name,
            author_email=author_email,
            content=content,
            is_internal=is_internal,
        )
        if created_at is not None:
            comment.created_at = created_at
        created = await self.create(comment)
        return _comment_to_result(created)

    async def list_for_ticket(
        self, ticket_id: str, *, include_internal: bool = False
    ) -> list[CommentResult]:
        """Comments oldest first. Internal comments only when include_internal."""
        query = select(Comment).where(Comment.ticket_id == ticket_id)
        if not include_internal:
            query = query.where(Comment.is_internal.is_(False))
        result = await self.db.execute(query.order_by(Comment.created_at, Comment.id))
        return [_comment_to_result(c) for c in result.scalars().all()]
