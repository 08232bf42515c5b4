"""Test configuration and fixtures.

Provides an isolated in-memory SQLite database (one shared connection via
StaticPool) so API tests never touch the developer's Postgres. Tables are
recreated for every test.
"""

import os
from datetime import date, datetime
from decimal import Decimal
from typing import Generator

# Set env flags BEFORE importing application modules
os.environ.setdefault("DEBUG", "1")
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import database  # original module with Base & SessionLocal placeholder
from database import Base, get_db
from main import app  # imports routers & models
from models import Stock, StockPrice, Profile

engine = create_engine(
    "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session() -> Generator:  # type: ignore
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def override_db_dependency(db_session):  # type: ignore
    """Override FastAPI dependency to use the SQLite session."""
    def _get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = _get_db

    # Also redirect direct imports of SessionLocal within tests/modules
    database.SessionLocal = TestingSessionLocal  # type: ignore
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def client() -> TestClient:  # type: ignore
    return TestClient(app)


@pytest.fixture()
def make_stock(db_session):
    def _make(symbol="AAPL", name="Apple Inc."):
        s = Stock(symbol=symbol, name=name)
        db_session.add(s)
        db_session.commit()
        db_session.refresh(s)
        return s
    return _make


@pytest.fixture()
def add_price(db_session):
    def _add(stock, price, day: date):
        p = StockPrice(stock_id=stock.id, date=day, price=Decimal(str(price)))
        db_session.add(p)
        db_session.commit()
        return p
    return _add


@pytest.fixture()
def make_profile(db_session):
    def _make(balance=10000, holdings=0, init_invest=10000, updated_at: datetime | None = None):
        p = Profile(
            username="tester",
            balance=Decimal(str(balance)),
            holdings=Decimal(str(holdings)),
            init_invest=Decimal(str(init_invest)) if init_invest is not None else None,
            net_profit=Decimal('0'),
            updated_at=updated_at,
        )
        db_session.add(p)
        db_session.commit()
        db_session.refresh(p)
        return p
    return _make
