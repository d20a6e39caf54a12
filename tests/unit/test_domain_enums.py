"""Tests for domain enums (stored values and tier helpers)."""

from helpdesk.domain.enums import (
    NotificationType,
    PermissionCategory,
    SupportType,
    SystemRole,
    TicketPriority,
    TicketStatus,
)


def test_ticket_status_values() -> None:
    assert TicketStatus.values() == ["Pendiente", "En Proceso", "Resuelto", "Cerrado"]


def test_terminal_statuses() -> None:
    assert TicketStatus.RESUELTO.is_terminal
    assert TicketStatus.CERRADO.is_terminal
    assert not TicketStatus.PENDIENTE.is_terminal
    assert not TicketStatus.EN_PROCESO.is_terminal


def test_only_critica_is_top_tier() -> None:
    assert [p for p in TicketPriority if p.is_top_tier] == [TicketPriority.CRITICA]
    assert TicketPriority.CRITICA.value == "Crítica – Bloquea mi trabajo"


def test_support_types() -> None:
    assert "Red e Internet" in SupportType.values()
    assert len(SupportType.values()) == 6


def test_notification_types() -> None:
    assert set(NotificationType.values()) == {
        "new_ticket",
        "ticket_assigned",
        "new_comment",
        "status_change",
        "high_priority",
    }


def test_categories_and_system_roles() -> None:
    assert PermissionCategory.values() == [
        "tickets",
        "comments",
        "statistics",
        "administration",
        "notifications",
    ]
    assert SystemRole.values() == ["admin", "supervisor", "tecnico"]
