from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from .config import LOGGER, settings
from .errors import CardNotFoundError, CardValidationError
from .models import Card
from .search import CardFilter, PageRequest, SortSpec, build_query


REQUIRED_FIELDS = ("year", "player", "manufacturer", "type", "on_card_code", "sport")
WRITABLE_FIELDS = (
    "year",
    "player",
    "added_date",
    "manufacturer",
    "card_set",
    "subset",
    "type",
    "on_card_code",
    "sport",
    "tags",
    "notes",
    "grade",
    "price_paid",
    "market_price",
    "quantity",
)
# None for these means "use the column default"
DEFAULTED_FIELDS = ("added_date", "quantity")


@dataclass
class CardPage:
    items: List[Card]
    total: int
    page: int
    limit: int


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _writable(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k in WRITABLE_FIELDS}


def create_card(db: Session, data: Mapping[str, Any]) -> Card:
    values = _writable(data)
    errors = {
        to_camel(name): f"{to_camel(name)} is required"
        for name in REQUIRED_FIELDS
        if _missing(values.get(name))
    }
    if errors:
        raise CardValidationError(errors)

    for name in DEFAULTED_FIELDS:
        if values.get(name) is None:
            values.pop(name, None)

    obj = Card(**values)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    LOGGER.info(f"Created card {obj.id} ({obj.year} {obj.player})")
    return obj


def get_card(db: Session, card_id: int) -> Card:
    obj = db.get(Card, card_id)
    if obj is None:
        raise CardNotFoundError(card_id)
    return obj


def find_page(
    db: Session,
    card_filter: Optional[CardFilter] = None,
    page: Optional[PageRequest] = None,
    sort: Optional[SortSpec] = None,
) -> CardPage:
    page = page or PageRequest()
    sort = sort or SortSpec()
    q = build_query(db, card_filter)
    total = q.count()
    items = (
        q.order_by(*sort.clauses())
        .offset(page.offset)
        .limit(page.limit)
        .all()
    )
    return CardPage(items=items, total=total, page=page.page, limit=page.limit)


def list_cards(
    db: Session,
    page: Optional[PageRequest] = None,
    sort: Optional[SortSpec] = None,
) -> CardPage:
    return find_page(db, None, page, sort)


def search_cards(
    db: Session,
    card_filter: CardFilter,
    page: Optional[PageRequest] = None,
    sort: Optional[SortSpec] = None,
) -> CardPage:
    return find_page(db, card_filter, page, sort)


def update_card(db: Session, card_id: int, changes: Mapping[str, Any]) -> Card:
    """Apply only the supplied fields; everything else keeps its value."""
    obj = get_card(db, card_id)
    values = _writable(changes)

    errors = {
        to_camel(name): f"{to_camel(name)} cannot be empty"
        for name in REQUIRED_FIELDS
        if name in values and _missing(values[name])
    }
    if errors:
        raise CardValidationError(errors)

    for name in DEFAULTED_FIELDS:
        if name in values and values[name] is None:
            del values[name]

    for name, value in values.items():
        setattr(obj, name, value)
    db.commit()
    db.refresh(obj)
    LOGGER.info(f"Updated card {card_id}: {', '.join(sorted(values)) or 'no changes'}")
    return obj


def delete_card(db: Session, card_id: int) -> None:
    obj = get_card(db, card_id)
    db.delete(obj)
    db.commit()
    LOGGER.info(f"Deleted card {card_id}")


def recent_players(db: Session, limit: Optional[int] = None) -> List[str]:
    """
    Distinct player names, most recently added first.
    A player is placed by their newest card.
    """
    limit = limit or settings.recent_players_limit
    rows = (
        db.query(Card.player)
        .order_by(Card.added_date.desc(), Card.id.desc())
        .yield_per(100)
    )
    players: List[str] = []
    seen = set()
    for (player,) in rows:
        if player in seen:
            continue
        seen.add(player)
        players.append(player)
        if len(players) == limit:
            break
    return players
