"""Curated content: persons and the periods/achievements that hang off them.

Person is the aggregate root for moderation; periods and achievements reference it by
id only and are loaded through their own repositories.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, ClassVar

from chronicler.domain.errors import InvalidAttribute
from chronicler.domain.model.entity import Entity, ModeratedMixin
from chronicler.domain.model.enums import EntityKind, PeriodType

if TYPE_CHECKING:
    from datetime import datetime

    from chronicler.domain.model.primitives import CountryId, PersonId, UserId, Year


@dataclass(frozen=True, slots=True, kw_only=True)
class PersonPatch:
    """Closed partial update of person attributes.

    Only the allow-listed attributes below exist; periods are never part of a patch.
    ``None`` means "not supplied", so optional links cannot be cleared through a patch.
    """

    name: str | None = None
    birth_year: Year | None = None
    death_year: Year | None = None
    category: str | None = None
    description: str | None = None
    image_url: str | None = None
    wiki_link: str | None = None

    FIELDS: ClassVar[tuple[str, ...]] = (
        "name",
        "birth_year",
        "death_year",
        "category",
        "description",
        "image_url",
        "wiki_link",
    )

    def supplied(self) -> dict[str, object]:
        """Return the supplied fields, in allow-list order."""

        values = {name: getattr(self, name) for name in self.FIELDS}
        return {name: value for name, value in values.items() if value is not None}

    @property
    def is_empty(self) -> bool:
        return not self.supplied()

    def normalized(self, attributes: PersonAttributes) -> PersonPatch:
        """Carry the (validated) ``attributes`` values over for every supplied field.

        Fields that normalize to ``None``, such as a blank link, drop out of the patch.
        """

        values = {name: getattr(attributes, name) for name in self.supplied()}
        return PersonPatch(**values)  # pyright: ignore[reportArgumentType]

    @classmethod
    def from_mapping(cls, raw: dict[str, object]) -> PersonPatch:
        """Build a patch from a stored mapping, silently dropping unknown keys."""

        allowed = {key: value for key, value in raw.items() if key in cls.FIELDS}
        return cls(**allowed)  # pyright: ignore[reportArgumentType]


@dataclass(frozen=True, slots=True, kw_only=True)
class PersonAttributes:
    """Full attribute set supplied when a person is created or upserted."""

    name: str
    birth_year: Year
    death_year: Year
    category: str
    description: str = ""
    image_url: str | None = None
    wiki_link: str | None = None

    def validated(self) -> PersonAttributes:
        """Return a trimmed copy, raising ``InvalidAttribute`` on bad values."""

        name = self.name.strip()
        category = self.category.strip()
        if not name:
            raise InvalidAttribute("Name must not be blank", field="name")
        if not category:
            raise InvalidAttribute("Category must not be blank", field="category")
        check_lifespan(self.birth_year, self.death_year)
        return PersonAttributes(
            name=name,
            birth_year=self.birth_year,
            death_year=self.death_year,
            category=category,
            description=self.description.strip(),
            image_url=self.image_url or None,
            wiki_link=self.wiki_link or None,
        )


def check_lifespan(birth_year: Year, death_year: Year) -> None:
    for name, value in (("birth_year", birth_year), ("death_year", death_year)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidAttribute(f"{name} must be an integer year", field=name)
    if birth_year > death_year:
        raise InvalidAttribute("birth_year must not be after death_year", field="death_year")


@dataclass(eq=False, kw_only=True)
class Person(ModeratedMixin):
    """Biographical record subject to moderation.

    ``id`` is derived from the name at creation time and never changes afterwards.
    """

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.PERSON

    id: PersonId
    name: str
    birth_year: Year
    death_year: Year
    category: str
    description: str = ""
    image_url: str | None = None
    wiki_link: str | None = None

    updated_by: UserId | None = None
    reviewed_by: UserId | None = None
    review_comment: str | None = None
    reviewed_at: datetime | None = None

    @property
    def entity_kind(self) -> EntityKind:
        return self.ENTITY_KIND

    @property
    def attributes(self) -> PersonAttributes:
        return PersonAttributes(
            name=self.name,
            birth_year=self.birth_year,
            death_year=self.death_year,
            category=self.category,
            description=self.description,
            image_url=self.image_url,
            wiki_link=self.wiki_link,
        )

    def assign(self, attributes: PersonAttributes) -> None:
        """Overwrite all attributes (upsert semantics); identity is kept."""

        for attribute in fields(PersonAttributes):
            setattr(self, attribute.name, getattr(attributes, attribute.name))

    def merged_with(self, patch: PersonPatch) -> PersonAttributes:
        """Return the attributes this person would have after ``patch``."""

        current = self.attributes
        values = {attribute.name: getattr(current, attribute.name) for attribute in fields(current)}
        values.update(patch.supplied())
        return PersonAttributes(**values)  # pyright: ignore[reportArgumentType]

    def apply_patch(self, patch: PersonPatch) -> None:
        for name, value in patch.supplied().items():
            setattr(self, name, value)

    def record_review(self, *, reviewer: UserId, comment: str | None, at: datetime) -> None:
        self.reviewed_by = reviewer
        self.review_comment = comment
        self.reviewed_at = at
        self.updated_at = at


@dataclass(eq=False, kw_only=True)
class Period(Entity, ModeratedMixin):
    """Time interval a person spent in a country (or ruled it)."""

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.PERIOD

    person_id: PersonId
    country_id: CountryId
    start_year: Year
    end_year: Year
    period_type: PeriodType = PeriodType.LIFE
    comment: str | None = None

    @property
    def is_life(self) -> bool:
        return self.period_type is PeriodType.LIFE


@dataclass(eq=False, kw_only=True)
class Achievement(Entity, ModeratedMixin):
    """Dated historical achievement; may exist without a person."""

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.ACHIEVEMENT

    year: Year
    description: str
    person_id: PersonId | None = None
    country_id: CountryId | None = None
    wikipedia_url: str | None = None
    image_url: str | None = None
