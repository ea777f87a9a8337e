"""SQLAlchemy mapping metadata for the content domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Any, Final, cast

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from chronicler.domain.model import (
    Achievement,
    ContentStatus,
    Period,
    PeriodType,
    Person,
    PersonEdit,
    PersonPatch,
)
from chronicler.domain.model.primitives import PERSON_ID_MAX_LENGTH

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]
PersonIdColumnType: Final = String(PERSON_ID_MAX_LENGTH)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class PersonPatchType(TypeDecorator[PersonPatch]):
    """Stores a ``PersonPatch`` as a JSON object of the supplied fields only."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: PersonPatch | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value.supplied())

    def process_result_value(self, value: str | None, dialect: Dialect) -> PersonPatch:
        _ = dialect
        if value is None:
            return PersonPatch()
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            return PersonPatch()
        return PersonPatch.from_mapping(cast(dict[str, Any], loaded))


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _moderation_columns() -> list[Column[Any]]:
    return [
        Column("status", Enum(ContentStatus, native_enum=False), nullable=False, index=True),
        Column("created_by", Integer, nullable=True, index=True),
        Column("submitted_at", UTCDateTime, nullable=True),
        Column("created_at", UTCDateTime, nullable=True),
        Column("updated_at", UTCDateTime, nullable=True),
    ]


# Content tables ----------------------------------------------------------------

person_table = Table(
    "person",
    mapper_registry.metadata,
    Column("id", PersonIdColumnType, primary_key=True),
    Column("name", String, nullable=False),
    Column("birth_year", Integer, nullable=False),
    Column("death_year", Integer, nullable=False),
    Column("category", String, nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("image_url", String, nullable=True),
    Column("wiki_link", String, nullable=True),
    *_moderation_columns(),
    Column("updated_by", Integer, nullable=True),
    Column("reviewed_by", Integer, nullable=True),
    Column("review_comment", Text, nullable=True),
    Column("reviewed_at", UTCDateTime, nullable=True),
    CheckConstraint("birth_year <= death_year", name="lifespan"),
)

period_table = Table(
    "period",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "person_id",
        PersonIdColumnType,
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("country_id", Integer, nullable=False),
    Column("start_year", Integer, nullable=False),
    Column("end_year", Integer, nullable=False),
    Column("period_type", Enum(PeriodType, native_enum=False), nullable=False),
    Column("comment", Text, nullable=True),
    *_moderation_columns(),
    CheckConstraint("start_year <= end_year", name="interval"),
)

achievement_table = Table(
    "achievement",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "person_id",
        PersonIdColumnType,
        ForeignKey("person.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    ),
    Column("country_id", Integer, nullable=True),
    Column("year", Integer, nullable=False),
    Column("description", Text, nullable=False),
    Column("wikipedia_url", String, nullable=True),
    Column("image_url", String, nullable=True),
    *_moderation_columns(),
)

person_edit_table = Table(
    "person_edit",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "person_id",
        PersonIdColumnType,
        ForeignKey("person.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("proposer_user_id", Integer, nullable=False),
    Column("payload", PersonPatchType, nullable=False),
    Column("status", Enum(ContentStatus, native_enum=False), nullable=False, index=True),
    Column("review_comment", Text, nullable=True),
    Column("reviewed_by", Integer, nullable=True),
    Column("created_at", UTCDateTime, nullable=True),
    Column("reviewed_at", UTCDateTime, nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Map domain dataclasses onto their tables (idempotent)."""

    log.debug("Configuring imperative mappers")
    mapper_registry.map_imperatively(Person, person_table)
    mapper_registry.map_imperatively(Period, period_table)
    mapper_registry.map_imperatively(Achievement, achievement_table)
    mapper_registry.map_imperatively(PersonEdit, person_edit_table)

    configure_mappers()
    return mapper_registry
