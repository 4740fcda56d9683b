"""SQLAlchemy ORM models for PostgreSQL.

``workspaces`` is owned by this service.  ``conversations`` and ``files`` are
written by the wider chat application (completion pipeline, upload pipeline)
and only read here, except that deleting a workspace detaches the
conversations pointing at it.

Alembic reads ``Base.metadata`` to autogenerate migration scripts.  Uses
SQLAlchemy 2.0 declarative style with ``Mapped`` type annotations.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, Integer, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Timezone-aware timestamp type for all datetime columns.
TimestampTZ = DateTime(timezone=True)


def utcnow() -> datetime:
    """Python-side timestamp (unlike ``now()``, it advances inside a transaction)."""
    return datetime.now(tz=UTC)


class Base(DeclarativeBase):
    """Declarative base with naming convention for constraints."""

    pass


Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Workspace(Base):
    __tablename__ = "workspaces"
    __table_args__ = (
        Index("ix_workspaces_owner_id_updated_at", "owner_id", "updated_at"),
        Index("ix_workspaces_workspace_id_owner_id", "workspace_id", "owner_id"),
    )

    workspace_id: Mapped[str] = mapped_column(primary_key=True)
    owner_id: Mapped[str]
    name: Mapped[str]
    description: Mapped[str | None] = mapped_column(Text)
    instructions: Mapped[str | None] = mapped_column(Text)
    files: Mapped[list] = mapped_column(JSONB, nullable=False, default=list, server_default="[]")
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        TimestampTZ, default=utcnow, onupdate=utcnow, server_default=func.now()
    )


class Conversation(Base):
    __tablename__ = "conversations"
    __table_args__ = (
        Index("ix_conversations_owner_id_workspace_id_updated_at", "owner_id", "workspace_id", "updated_at"),
    )

    conversation_id: Mapped[str] = mapped_column(primary_key=True)
    owner_id: Mapped[str]
    title: Mapped[str | None]
    endpoint: Mapped[str | None]
    model: Mapped[str | None]
    # Plain pointer, no foreign key: the conversation outlives its workspace.
    workspace_id: Mapped[str | None]
    expired_at: Mapped[datetime | None] = mapped_column(TimestampTZ)
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        TimestampTZ, default=utcnow, onupdate=utcnow, server_default=func.now()
    )


class File(Base):
    __tablename__ = "files"
    __table_args__ = (Index("ix_files_owner_id", "owner_id"),)

    file_id: Mapped[str] = mapped_column(primary_key=True)
    owner_id: Mapped[str]
    filename: Mapped[str]
    type: Mapped[str] = mapped_column(server_default="application/octet-stream")
    bytes: Mapped[int] = mapped_column(Integer, server_default="0")
    width: Mapped[int | None]
    height: Mapped[int | None]
    # Extracted text can be large; only loaded when explicitly undeferred.
    text: Mapped[str | None] = mapped_column(Text, deferred=True)
    created_at: Mapped[datetime] = mapped_column(TimestampTZ, default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        TimestampTZ, default=utcnow, onupdate=utcnow, server_default=func.now()
    )
