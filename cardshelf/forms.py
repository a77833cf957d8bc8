"""Card entry forms: immutable form state, validation and request payloads.

A ``CardForm`` holds exactly what a user typed, as strings.  Editing a field
returns a new form; ``validate_form`` never mutates anything and reports
problems per field, keyed by the API's field names.
"""

import math
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from pydantic.alias_generators import to_camel, to_snake


REQUIRED_TEXT = {
    "player": "Player is required",
    "manufacturer": "Manufacturer is required",
    "card_set": "Set is required",
    "type": "Type is required",
    "on_card_code": "On Card Code is required",
    "sport": "Sport is required",
}


def parse_number(value: Optional[str]) -> Optional[float]:
    """Parse a finite number, or return None."""
    if value is None:
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


@dataclass(frozen=True)
class CardForm:
    year: str = ""
    player: str = ""
    manufacturer: str = ""
    card_set: str = ""
    subset: str = ""
    type: str = ""
    on_card_code: str = ""
    sport: str = ""
    tags: str = ""
    grade: str = ""
    notes: str = ""
    price_paid: str = ""
    market_price: str = ""
    duplicates: str = "1"  # "Total Copies"

    def with_field(self, name: str, value: Any) -> "CardForm":
        """Return a copy with one field replaced. Accepts API or Python names."""
        attr = to_snake(name)
        if attr not in {f.name for f in fields(self)}:
            raise KeyError(name)
        return replace(self, **{attr: "" if value is None else str(value)})

    @property
    def copies(self) -> int:
        number = parse_number(self.duplicates)
        if number is None or number < 1:
            return 1
        return int(number)


def validate_form(form: CardForm) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    year = parse_number(form.year)
    if _blank(form.year) or year is None or year <= 0:
        errors["year"] = "Year is required and must be a positive number"

    for attr, message in REQUIRED_TEXT.items():
        if _blank(getattr(form, attr)):
            errors[to_camel(attr)] = message

    if not _blank(form.price_paid):
        number = parse_number(form.price_paid)
        if number is None or number < 0:
            errors["pricePaid"] = "Price Paid must be a valid number"

    if not _blank(form.market_price):
        number = parse_number(form.market_price)
        if number is None or number < 0:
            errors["marketPrice"] = "Market Price must be a valid number"

    if not _blank(form.duplicates):
        number = parse_number(form.duplicates)
        if number is None or number <= 0 or number != int(number):
            errors["duplicates"] = "Duplicates must be a positive number"

    return errors


def split_tags(value: str) -> list:
    return [tag.strip() for tag in (value or "").split(",") if tag.strip()]


def form_to_payload(form: CardForm) -> Dict[str, Any]:
    """JSON body for POST/PUT. Blank optional fields are left out."""
    payload: Dict[str, Any] = {
        "year": int(parse_number(form.year)),
        "player": form.player.strip(),
        "manufacturer": form.manufacturer.strip(),
        "cardSet": form.card_set.strip(),
        "type": form.type.strip(),
        "onCardCode": form.on_card_code.strip(),
        "sport": form.sport.strip(),
        "quantity": 1,
    }
    for attr in ("subset", "grade", "notes"):
        value = getattr(form, attr).strip()
        if value:
            payload[attr] = value

    tags = split_tags(form.tags)
    if tags:
        payload["tags"] = tags

    for attr in ("price_paid", "market_price"):
        if not _blank(getattr(form, attr)):
            payload[to_camel(attr)] = parse_number(getattr(form, attr))

    return payload


def form_from_card(card: Mapping[str, Any]) -> CardForm:
    """Fill an edit buffer from a card as returned by the API."""

    def text(key: str) -> str:
        value = card.get(key)
        return "" if value is None else str(value)

    return CardForm(
        year=text("year"),
        player=text("player"),
        manufacturer=text("manufacturer"),
        card_set=text("cardSet"),
        subset=text("subset"),
        type=text("type"),
        on_card_code=text("onCardCode"),
        sport=text("sport"),
        tags=", ".join(card.get("tags") or []),
        grade=text("grade"),
        notes=text("notes"),
        price_paid=text("pricePaid"),
        market_price=text("marketPrice"),
    )
