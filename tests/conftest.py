"""Pytest configuration and shared fixtures for cardshelf tests."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cardshelf.db import Base, get_db, init_db
from cardshelf.main import app
from cardshelf import store


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def api(session_factory):
    """TestClient wired to the in-memory database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def build_card_data(**overrides):
    data = {
        "year": 1986,
        "player": "Michael Jordan",
        "manufacturer": "Fleer",
        "card_set": "Basketball",
        "type": "Base",
        "on_card_code": "57",
        "sport": "Basketball",
    }
    data.update(overrides)
    return data


@pytest.fixture
def card_data():
    """Factory for a complete set of card fields."""
    return build_card_data


@pytest.fixture
def make_card(db):
    """Insert a card through the store, with sensible defaults."""

    def _make(**overrides):
        return store.create_card(db, build_card_data(**overrides))

    return _make


@pytest.fixture
def sample_cards(make_card):
    base = datetime(2024, 6, 8, 12, 0, 0)
    return [
        make_card(
            player="Michael Jordan",
            year=1986,
            tags=["Rookie", "HOF"],
            added_date=base,
            price_paid=100.0,
        ),
        make_card(
            player="Jordan Love",
            year=2020,
            sport="Football",
            manufacturer="Panini",
            tags=["Auto"],
            added_date=base.replace(hour=0, minute=0),
            grade="PSA 10",
        ),
        make_card(
            player="Ken Griffey Jr.",
            year=1989,
            sport="Baseball",
            manufacturer="Upper Deck",
            tags=["rookie"],
            added_date=base.replace(hour=23, minute=59, second=59, microsecond=999000),
            quantity=3,
        ),
        make_card(
            player="Wayne Gretzky",
            year=1979,
            sport="Hockey",
            manufacturer="O-Pee-Chee",
            added_date=base + timedelta(days=1),
            price_paid=50.5,
        ),
        make_card(
            player="Mike Trout",
            year=2011,
            sport="Baseball",
            manufacturer="Topps",
            subset="Update",
            tags=[],
            added_date=datetime(2024, 6, 7, 23, 59, 59, 999000),
        ),
    ]
