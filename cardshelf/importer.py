import csv
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

import requests

from .client import CardClient
from .config import LOGGER, settings
from .errors import ApiError
from .forms import CardForm, form_to_payload, validate_form


# CSV header -> CardForm attribute
COLUMNS = {
    "Year": "year",
    "Manufacturer": "manufacturer",
    "Set": "card_set",
    "Subset": "subset",
    "Type": "type",
    "Player Name": "player",
    "Card Code": "on_card_code",
    "Sport": "sport",
    "Tags": "tags",
    "Grade": "grade",
    "Price Paid": "price_paid",
    "Market Price": "market_price",
    "Notes": "notes",
    "Total Copies": "duplicates",
}


@dataclass
class RowError:
    row: int  # 1-based, header excluded
    record: Dict[str, str]
    errors: Dict[str, str]


@dataclass
class ImportReport:
    imported: int = 0
    invalid: List[RowError] = field(default_factory=list)
    failed: List[RowError] = field(default_factory=list)

    @property
    def errors(self) -> List[RowError]:
        return sorted(self.invalid + self.failed, key=lambda e: e.row)


def row_to_form(row: Dict[str, str]) -> CardForm:
    values = {}
    for column, attr in COLUMNS.items():
        value = (row.get(column) or "").strip()
        if value:
            values[attr] = value
    return CardForm(**values)


def read_rows(lines: Iterable[str]) -> List[Tuple[int, Dict[str, str], CardForm]]:
    reader = csv.DictReader(lines, skipinitialspace=True)
    rows = []
    number = 0
    for row in reader:
        # skip blank lines and rows of empty cells
        if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
            continue
        number += 1
        record = {k.strip(): (v or "") for k, v in row.items() if isinstance(k, str)}
        rows.append((number, record, row_to_form(record)))
    return rows


def import_rows(lines: Iterable[str], client: CardClient) -> ImportReport:
    """
    Validate every row, then submit the valid ones concurrently.

    A row is created ``Total Copies`` times. Invalid rows and rows the
    server rejects are reported individually; nothing is rolled back.
    """
    report = ImportReport()
    valid: List[Tuple[int, Dict[str, str], CardForm]] = []

    for number, record, form in read_rows(lines):
        errors = validate_form(form)
        if errors:
            report.invalid.append(RowError(number, record, errors))
        else:
            valid.append((number, record, form))

    def submit(item: Tuple[int, Dict[str, str], CardForm]) -> Tuple[int, Dict[str, str]]:
        number, record, form = item
        payload = form_to_payload(form)
        created = 0
        for _ in range(form.copies):
            try:
                client.create_card(payload)
            except ApiError as e:
                return created, dict(e.fields) or {"request": e.message}
            except requests.RequestException as e:
                return created, {"request": str(e)}
            created += 1
        return created, {}

    if valid:
        with ThreadPoolExecutor(max_workers=settings.client_workers) as pool:
            for item, (created, errors) in zip(valid, pool.map(submit, valid)):
                report.imported += created
                if errors:
                    report.failed.append(RowError(item[0], item[1], errors))

    LOGGER.info(
        f"Imported {report.imported} cards; "
        f"{len(report.invalid)} invalid rows, {len(report.failed)} failed rows"
    )
    return report


def import_csv(path: str, client: CardClient) -> ImportReport:
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        return import_rows(f, client)
