"""Application DTOs: read models returned by repositories and services (no ORM)."""
