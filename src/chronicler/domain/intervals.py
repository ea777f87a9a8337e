"""Life-period normalization.

A person's ``life`` periods must partition the lifespan exactly: sorted by start year
the first one starts no later than the birth year, the last one ends no earlier than
the death year, and consecutive periods neither overlap (a shared boundary year is
fine) nor leave a gap.

``normalize_life_periods`` is the only place this rule is implemented. It is pure and
total: every input either comes back normalized or raises exactly one of
``EmptyIntervalSet``, ``InvalidInterval``, ``IncompleteCoverage``,
``OverlappingIntervals`` or ``CoverageGap``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from itertools import pairwise
from typing import TYPE_CHECKING

from chronicler.domain.errors import (
    CoverageGap,
    EmptyIntervalSet,
    IncompleteCoverage,
    InvalidInterval,
    OverlappingIntervals,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from chronicler.domain.model import CountryId, Period, Year


@dataclass(frozen=True, slots=True)
class LifeInterval:
    """One normalized ``(country, start, end)`` entry of a life-period set."""

    country_id: CountryId
    start_year: Year
    end_year: Year

    @property
    def sort_key(self) -> tuple[Year, Year]:
        return (self.start_year, self.end_year)


type RawInterval = LifeInterval | tuple[object, object, object]


def coerce_int(value: object) -> int | None:
    """Coerce ``value`` to an integer, or return ``None`` if it is not integral.

    Accepts ints, integral floats and numeric strings ("1900", " 1900 ", "1900.0").
    Booleans are rejected.
    """

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
        if not number.is_finite() or number != number.to_integral_value():
            return None
        return int(number)
    return None


def _unpack(raw: RawInterval, position: int) -> tuple[object, object, object]:
    if isinstance(raw, LifeInterval):
        return (raw.country_id, raw.start_year, raw.end_year)
    if not isinstance(raw, str | bytes):
        try:
            raw_country, raw_start, raw_end = raw
        except (TypeError, ValueError):
            pass
        else:
            return (raw_country, raw_start, raw_end)
    raise InvalidInterval(
        f"Interval #{position + 1} is not a (country_id, start_year, end_year) triple: {raw!r}",
        details={"index": position},
    )


def _coerce(raw: RawInterval, position: int) -> LifeInterval:
    raw_country, raw_start, raw_end = _unpack(raw, position)
    country_id = coerce_int(raw_country)
    if country_id is None or country_id <= 0:
        raise InvalidInterval(
            f"Interval #{position + 1} has an invalid country id: {raw_country!r}",
            field="country_id",
            details={"index": position},
        )
    start_year = coerce_int(raw_start)
    end_year = coerce_int(raw_end)
    if start_year is None or end_year is None:
        raise InvalidInterval(
            f"Interval #{position + 1} has non-integer years: {raw_start!r}-{raw_end!r}",
            field="start_year" if start_year is None else "end_year",
            details={"index": position},
        )
    if start_year > end_year:
        raise InvalidInterval(
            f"Interval #{position + 1} starts after it ends: {start_year}-{end_year}",
            field="start_year",
            details={"index": position},
        )
    return LifeInterval(country_id=country_id, start_year=start_year, end_year=end_year)


def normalize_life_periods(
    intervals: Iterable[RawInterval],
    *,
    birth_year: Year,
    death_year: Year,
) -> list[LifeInterval]:
    """Validate and normalize a life-period set against a lifespan.

    A single interval is always stretched to ``(birth_year, death_year)``; otherwise the
    intervals are returned sorted by ``(start_year, end_year)`` with their bounds
    untouched.
    """

    items = list(intervals)
    if not items:
        raise EmptyIntervalSet("At least one life period is required", field="life_periods")
    if birth_year > death_year:
        raise InvalidInterval(
            f"Lifespan is inverted: {birth_year}-{death_year}",
            field="lifespan",
        )

    coerced = [_coerce(raw, position) for position, raw in enumerate(items)]

    if len(coerced) == 1:
        only = coerced[0]
        return [
            LifeInterval(country_id=only.country_id, start_year=birth_year, end_year=death_year)
        ]

    ordered = sorted(coerced, key=lambda interval: interval.sort_key)

    first, last = ordered[0], ordered[-1]
    if first.start_year > birth_year or last.end_year < death_year:
        raise IncompleteCoverage(
            f"Life periods {first.start_year}-{last.end_year} do not cover "
            f"the lifespan {birth_year}-{death_year}",
            field="life_periods",
            details={"birth_year": birth_year, "death_year": death_year},
        )

    for previous, current in pairwise(ordered):
        if current.start_year < previous.end_year:
            raise OverlappingIntervals(
                f"Life periods overlap: {previous.start_year}-{previous.end_year} "
                f"and {current.start_year}-{current.end_year}",
                field="life_periods",
            )
        if current.start_year > previous.end_year + 1:
            raise CoverageGap(
                f"Life periods leave a gap between {previous.end_year} "
                f"and {current.start_year}",
                field="life_periods",
            )

    return ordered


def intervals_of(periods: Sequence[Period]) -> list[LifeInterval]:
    """Project stored periods onto normalizer input."""

    return [
        LifeInterval(
            country_id=period.country_id,
            start_year=period.start_year,
            end_year=period.end_year,
        )
        for period in periods
    ]


__all__ = ["LifeInterval", "RawInterval", "coerce_int", "intervals_of", "normalize_life_periods"]
