"""Fold a :class:`PropertySearchParams` into a conjunction of store-agnostic criteria.

The criteria are interpreted twice: :meth:`Criterion.matches` evaluates them
against a loaded property (in-memory store) and the SQL repository compiles the
same list into a WHERE clause. Which fields take part, and with what semantics,
is decided here only.
"""

import enum
from dataclasses import dataclass
from typing import Any, List, Tuple

from app.schemas.property_search import PropertySearchParams

TEXT_SEARCH_FIELDS = ("title", "description", "address", "city")


class Op(enum.Enum):
    EQ = "eq"
    GTE = "gte"
    LTE = "lte"
    # every listed tag present on the property
    HAS_ALL = "has_all"
    # case-insensitive substring in any of several text fields
    ICONTAINS_ANY = "icontains_any"


@dataclass(frozen=True)
class Criterion:
    fields: Tuple[str, ...]
    op: Op
    value: Any

    @property
    def field(self) -> str:
        return self.fields[0]

    def matches(self, obj) -> bool:
        if self.op is Op.ICONTAINS_ANY:
            needle = str(self.value).lower()
            return any(needle in (getattr(obj, f, None) or "").lower() for f in self.fields)

        actual = getattr(obj, self.field, None)
        if self.op is Op.HAS_ALL:
            return set(self.value) <= set(actual or [])
        if actual is None:
            return False
        if self.op is Op.EQ:
            return actual == self.value
        if self.op is Op.GTE:
            return actual >= self.value
        if self.op is Op.LTE:
            return actual <= self.value
        raise ValueError(f"Unsupported operator {self.op}")


def _single(field: str, op: Op, value) -> Criterion:
    return Criterion(fields=(field,), op=op, value=value)


def build_criteria(params: PropertySearchParams) -> List[Criterion]:
    criteria: List[Criterion] = []

    if params.query:
        criteria.append(Criterion(fields=TEXT_SEARCH_FIELDS, op=Op.ICONTAINS_ANY, value=params.query))
    if params.city:
        criteria.append(_single("city", Op.EQ, params.city))
    if params.min_price is not None:
        criteria.append(_single("price", Op.GTE, params.min_price))
    if params.max_price is not None:
        criteria.append(_single("price", Op.LTE, params.max_price))
    if params.min_bedrooms is not None:
        criteria.append(_single("bedrooms", Op.GTE, params.min_bedrooms))
    if params.min_bathrooms is not None:
        criteria.append(_single("bathrooms", Op.GTE, params.min_bathrooms))
    if params.property_type is not None:
        criteria.append(_single("property_type", Op.EQ, params.property_type))
    if params.listing_type is not None:
        criteria.append(_single("listing_type", Op.EQ, params.listing_type))
    if params.min_square_feet is not None:
        criteria.append(_single("square_feet", Op.GTE, params.min_square_feet))
    if params.max_square_feet is not None:
        criteria.append(_single("square_feet", Op.LTE, params.max_square_feet))
    if params.features:
        criteria.append(_single("features", Op.HAS_ALL, tuple(params.features)))

    return criteria


def matches_all(obj, criteria: List[Criterion]) -> bool:
    return all(c.matches(obj) for c in criteria)
