"""Declarative base shared by every table of the assessment engine."""

from datetime import datetime, timezone
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, MetaData
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Constraint names used by the hand-written migrations
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utc_now() -> datetime:
    """Timezone-aware now, used for every stored timestamp."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


def parse_id(value: object) -> str | None:
    """Canonical form of a UUID id, or None if ``value`` is not one."""
    try:
        return str(PyUUID(str(value)))
    except ValueError:
        return None


class Base(DeclarativeBase):
    """Base class for all models. Ids are UUIDs handled as strings."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=new_id,
    )


class TimestampMixin:
    """Adds created_at and updated_at."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default=None,
        onupdate=utc_now,
        nullable=True,
    )
