"""Tests for CSV bulk import."""

import io
from unittest.mock import Mock

import pytest
import requests

from cardshelf.client import CardClient
from cardshelf.errors import ApiError
from cardshelf.importer import import_csv, import_rows, read_rows


HEADER = "Year,Manufacturer,Set,Subset,Type,Player Name,Card Code,Sport,Tags,Grade,Price Paid,Quantity\n"

ROWS = (
    "1986,Fleer,Basketball,,Base,Michael Jordan,57,Basketball,\"Rookie, HOF\",PSA 8,1500,1\n"
    "1989,Upper Deck,Baseball,,Base,Ken Griffey Jr.,1,Baseball,Rookie,,25.5,1\n"
    "2011,Topps,Update,,Base,Mike Trout,US175,Baseball,,,,1\n"
    "1979,O-Pee-Chee,Hockey,,Base,,18,Hockey,,,,1\n"
)


@pytest.fixture
def client():
    mock = Mock(spec=CardClient)
    mock.create_card.side_effect = lambda payload: dict(payload, id=1)
    return mock


def test_three_valid_one_missing_player(client):
    report = import_rows(io.StringIO(HEADER + ROWS), client)

    assert report.imported == 3
    assert client.create_card.call_count == 3
    assert len(report.errors) == 1

    error = report.errors[0]
    assert error.row == 4
    assert error.record["Year"] == "1979"
    assert error.errors == {"player": "Player is required"}


def test_payload_built_from_columns(client):
    import_rows(io.StringIO(HEADER + ROWS.splitlines(keepends=True)[0]), client)

    payload = client.create_card.call_args.args[0]
    assert payload["player"] == "Michael Jordan"
    assert payload["cardSet"] == "Basketball"
    assert payload["onCardCode"] == "57"
    assert payload["tags"] == ["Rookie", "HOF"]
    assert payload["pricePaid"] == 1500.0
    assert payload["quantity"] == 1
    assert "subset" not in payload


def test_total_copies_repeats_row(client):
    csv_text = (
        "Year,Manufacturer,Set,Type,Player Name,Card Code,Sport,Total Copies\n"
        "2020,Panini,Prizm,Base,Jordan Love,301,Football,3\n"
    )
    report = import_rows(io.StringIO(csv_text), client)
    assert report.imported == 3
    assert client.create_card.call_count == 3


def test_blank_rows_skipped(client):
    csv_text = HEADER + "\n" + ",,,,,,,,,,,\n" + ROWS.splitlines(keepends=True)[1]
    rows = read_rows(io.StringIO(csv_text))
    assert len(rows) == 1
    assert rows[0][0] == 1


def test_server_rejection_does_not_stop_batch(client):
    def create(payload):
        if payload["player"] == "Ken Griffey Jr.":
            raise ApiError(400, "Validation failed", {"player": "duplicate"})
        return dict(payload, id=1)

    client.create_card.side_effect = create
    report = import_rows(io.StringIO(HEADER + ROWS), client)

    assert report.imported == 2
    assert [e.row for e in report.failed] == [2]
    assert report.failed[0].errors == {"player": "duplicate"}
    assert [e.row for e in report.errors] == [2, 4]


def test_connection_error_reported(client):
    client.create_card.side_effect = requests.ConnectionError("refused")
    report = import_rows(io.StringIO(HEADER + ROWS), client)
    assert report.imported == 0
    assert len(report.failed) == 3
    assert report.failed[0].errors == {"request": "refused"}


def test_import_csv_reads_bom_file(tmp_path, client):
    path = tmp_path / "cards.csv"
    path.write_text(HEADER + ROWS, encoding="utf-8-sig")
    report = import_csv(str(path), client)
    assert report.imported == 3
