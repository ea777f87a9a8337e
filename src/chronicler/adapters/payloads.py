"""Pydantic models describing inbound person, life-period and edit payloads.

Field aliases follow the camelCase the HTTP layer receives. Parsing failures surface
as ``InvalidAttribute`` so callers only ever see the engine's error taxonomy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from chronicler.domain.errors import InvalidAttribute
from chronicler.domain.model import PersonAttributes, PersonPatch

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chronicler.domain.intervals import RawInterval

type NumberInput = int | float | str


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _reject_bool(value: object) -> object:
    if isinstance(value, bool):
        raise ValueError("expected a year, got a boolean")
    return value


class PayloadBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LifePeriodPayload(PayloadBaseModel):
    """One ``{countryId, start, end}`` entry; years are coerced by the normalizer."""

    country_id: NumberInput = Field(alias="countryId")
    start: NumberInput
    end: NumberInput

    def to_interval(self) -> RawInterval:
        return (self.country_id, self.start, self.end)


class PersonAttributesPayload(PayloadBaseModel):
    name: str
    birth_year: int = Field(alias="birthYear")
    death_year: int = Field(alias="deathYear")
    category: str
    description: str = ""
    image_url: str | None = Field(default=None, alias="imageUrl")
    wiki_link: str | None = Field(default=None, alias="wikiLink")
    life_periods: list[LifePeriodPayload] | None = Field(default=None, alias="lifePeriods")
    save_as_draft: bool = Field(default=False, alias="saveAsDraft")

    _normalize_links = field_validator("image_url", "wiki_link", mode="before")(_blank_to_none)
    _check_years = field_validator("birth_year", "death_year", mode="before")(_reject_bool)

    def to_attributes(self) -> PersonAttributes:
        return PersonAttributes(
            name=self.name,
            birth_year=self.birth_year,
            death_year=self.death_year,
            category=self.category,
            description=self.description,
            image_url=self.image_url,
            wiki_link=self.wiki_link,
        )

    def to_intervals(self) -> list[RawInterval] | None:
        if self.life_periods is None:
            return None
        return [period.to_interval() for period in self.life_periods]


class PersonEditPayloadSchema(PayloadBaseModel):
    """Allow-listed partial update; every other key is dropped silently."""

    name: str | None = None
    birth_year: int | None = Field(default=None, alias="birthYear")
    death_year: int | None = Field(default=None, alias="deathYear")
    category: str | None = None
    description: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    wiki_link: str | None = Field(default=None, alias="wikiLink")

    _normalize_links = field_validator("image_url", "wiki_link", mode="before")(_blank_to_none)
    _check_years = field_validator("birth_year", "death_year", mode="before")(_reject_bool)

    def to_domain(self) -> PersonPatch:
        supplied = {name: getattr(self, name) for name in self.model_fields_set}
        return PersonPatch(
            **{name: value for name, value in supplied.items() if value is not None}
        )


def parse_payload[TModel: PayloadBaseModel](
    model: type[TModel], raw: Mapping[str, object]
) -> TModel:
    """Validate ``raw`` against ``model``, reporting the first failure as ``InvalidAttribute``."""

    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise InvalidAttribute(
            f"Invalid payload: {first['msg']}",
            field=field,
            details={"errors": exc.error_count()},
        ) from exc


__all__ = [
    "LifePeriodPayload",
    "PayloadBaseModel",
    "PersonAttributesPayload",
    "PersonEditPayloadSchema",
    "parse_payload",
]
