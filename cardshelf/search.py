"""Translate request parameters into card predicates, ordering and paging.

Search parameters arrive as strings (or, for ``tags``, possibly a list of
strings).  ``CardFilter.from_params`` parses them into an explicit filter
structure; ``card_conditions`` turns that structure into SQLAlchemy clauses.
"""

import json
from dataclasses import dataclass, fields
from datetime import date, datetime, time
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import literal, select, func
from sqlalchemy.orm import Query, Session

from .config import settings
from .errors import CardValidationError
from .models import Card


EXACT_INT_FIELDS = {"year": "year", "quantity": "quantity"}
EXACT_FLOAT_FIELDS = {"pricePaid": "price_paid", "marketPrice": "market_price"}
SUBSTRING_FIELDS = {
    "player": "player",
    "manufacturer": "manufacturer",
    "cardSet": "card_set",
    "subset": "subset",
    "type": "type",
    "onCardCode": "on_card_code",
    "sport": "sport",
    "grade": "grade",
}

SORTABLE_FIELDS = {
    "id": "id",
    "year": "year",
    "player": "player",
    "addedDate": "added_date",
    "manufacturer": "manufacturer",
    "cardSet": "card_set",
    "subset": "subset",
    "type": "type",
    "onCardCode": "on_card_code",
    "sport": "sport",
    "grade": "grade",
    "notes": "notes",
    "pricePaid": "price_paid",
    "marketPrice": "market_price",
    "quantity": "quantity",
    "tags": "tags",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

SORT_ORDERS = ("ASC", "DESC")

# Largest value an INTEGER column or LIMIT/OFFSET can bind
MAX_INT = 2**63 - 1

# Last representable millisecond of a calendar day
END_OF_DAY = time(23, 59, 59, 999000)


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple)):
        return all(_blank(v) for v in value)
    return str(value).strip() == ""


def _first(value: Any) -> Any:
    # repeated query keys arrive as lists; scalar filters use the first value
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def parse_tags(value: Any) -> Tuple[str, ...]:
    """Accept "a, b" or ["a", "b,c"] and return trimmed, non-empty tags."""
    if value is None:
        return ()
    items = value if isinstance(value, (list, tuple)) else [value]
    tags: List[str] = []
    for item in items:
        for tag in str(item).split(","):
            tag = tag.strip()
            if tag and tag not in tags:
                tags.append(tag)
    return tuple(tags)


def parse_day(value: str) -> date:
    # "2024-06-08" or a full ISO timestamp; only the calendar day is used
    return date.fromisoformat(value.strip()[:10])


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, END_OF_DAY)


@dataclass(frozen=True)
class CardFilter:
    """Optional predicates for a card search. ``None`` means unconstrained."""

    year: Optional[int] = None
    quantity: Optional[int] = None
    price_paid: Optional[float] = None
    market_price: Optional[float] = None
    player: Optional[str] = None
    manufacturer: Optional[str] = None
    card_set: Optional[str] = None
    subset: Optional[str] = None
    type: Optional[str] = None
    on_card_code: Optional[str] = None
    sport: Optional[str] = None
    grade: Optional[str] = None
    added_date: Optional[date] = None
    tags: Tuple[str, ...] = ()

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "CardFilter":
        values: Dict[str, Any] = {}
        errors: Dict[str, str] = {}

        for key, attr in EXACT_INT_FIELDS.items():
            raw = _first(params.get(key))
            if _blank(raw):
                continue
            try:
                number = int(str(raw).strip())
            except ValueError:
                errors[key] = f"{key} must be a whole number"
                continue
            if abs(number) > MAX_INT:
                errors[key] = f"{key} is out of range"
            else:
                values[attr] = number

        for key, attr in EXACT_FLOAT_FIELDS.items():
            raw = _first(params.get(key))
            if _blank(raw):
                continue
            try:
                values[attr] = float(str(raw).strip())
            except ValueError:
                errors[key] = f"{key} must be a number"

        for key, attr in SUBSTRING_FIELDS.items():
            raw = _first(params.get(key))
            if not _blank(raw):
                values[attr] = str(raw).strip()

        raw = _first(params.get("addedDate"))
        if not _blank(raw):
            try:
                values["added_date"] = parse_day(str(raw))
            except ValueError:
                errors["addedDate"] = "addedDate must be a date (YYYY-MM-DD)"

        raw = params.get("tags")
        if not _blank(raw):
            values["tags"] = parse_tags(raw)

        if errors:
            raise CardValidationError(errors)
        return cls(**values)

    def is_empty(self) -> bool:
        return all(
            getattr(self, f.name) in (None, ()) for f in fields(self)
        )


@dataclass(frozen=True)
class SortSpec:
    field: Optional[str] = None
    order: Optional[str] = None

    @classmethod
    def from_params(
        cls, sort_field: Optional[str], sort_order: Optional[str]
    ) -> "SortSpec":
        errors = {}
        field = (sort_field or "").strip() or None
        order = (sort_order or "").strip().upper() or None

        if field is not None and field not in SORTABLE_FIELDS:
            errors["sortField"] = f"Cannot sort by {field!r}"
        if order is not None and order not in SORT_ORDERS:
            errors["sortOrder"] = "sortOrder must be ASC or DESC"
        if errors:
            raise CardValidationError(errors)
        return cls(field=field, order=order)

    @property
    def active(self) -> bool:
        return self.field is not None and self.order is not None

    def clauses(self) -> list:
        """ORDER BY clauses; unsorted requests keep insertion order."""
        if not self.active:
            return [Card.id.asc()]
        column = getattr(Card, SORTABLE_FIELDS[self.field])
        if self.order == "DESC":
            return [column.desc(), Card.id.desc()]
        return [column.asc(), Card.id.asc()]


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 10

    @classmethod
    def from_params(cls, page: Any = None, limit: Any = None) -> "PageRequest":
        """
        Lenient parsing: unparseable values fall back to page 1 and the
        default page size, page is at least 1 and limit is kept within
        1..max_page_size. A page whose offset cannot be bound is treated
        as unparseable.
        """
        default_limit = settings.default_page_size
        try:
            page_num = int(str(page).strip()) if page is not None else 1
        except ValueError:
            page_num = 1
        try:
            limit_num = int(str(limit).strip()) if limit is not None else default_limit
        except ValueError:
            limit_num = default_limit

        if page_num < 1:
            page_num = 1
        if limit_num < 1:
            limit_num = default_limit
        limit_num = min(limit_num, settings.max_page_size)
        if (page_num - 1) * limit_num > MAX_INT:
            page_num = 1
        return cls(page=page_num, limit=limit_num)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def tags_overlap(tags: Tuple[str, ...], dialect: str):
    """True when a card's tag list shares at least one element with ``tags``."""
    if dialect == "mysql":
        return func.json_overlaps(Card.tags, json.dumps(list(tags))) == 1
    each = func.json_each(Card.tags).table_valued("value")
    return (
        select(literal(1))
        .select_from(each)
        .where(each.c.value.in_(tags))
        .correlate(Card)
        .exists()
    )


def card_conditions(card_filter: CardFilter, dialect: str = "sqlite") -> list:
    conditions = []

    for attr in list(EXACT_INT_FIELDS.values()) + list(EXACT_FLOAT_FIELDS.values()):
        value = getattr(card_filter, attr)
        if value is not None:
            conditions.append(getattr(Card, attr) == value)

    for attr in SUBSTRING_FIELDS.values():
        value = getattr(card_filter, attr)
        if value:
            conditions.append(getattr(Card, attr).icontains(value, autoescape=True))

    if card_filter.added_date is not None:
        start, end = day_bounds(card_filter.added_date)
        conditions.append(Card.added_date.between(start, end))

    if card_filter.tags:
        conditions.append(tags_overlap(card_filter.tags, dialect))

    return conditions


def build_query(db: Session, card_filter: Optional[CardFilter] = None) -> Query:
    q = db.query(Card)
    if card_filter is None:
        return q
    dialect = db.get_bind().dialect.name
    for condition in card_conditions(card_filter, dialect):
        q = q.filter(condition)
    return q
