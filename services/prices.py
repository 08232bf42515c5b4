"""Read helpers for the daily price table.

The "current price" of a stock is the price point with the greatest date.
"""
from __future__ import annotations
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from models.stock import Stock
from models.stock_price import StockPrice


def latest_price_point(db: Session, stock_id: int) -> Optional[StockPrice]:
    return (
        db.query(StockPrice)
        .filter(StockPrice.stock_id == stock_id)
        .order_by(StockPrice.date.desc(), StockPrice.id.desc())
        .first()
    )


def latest_price(db: Session, stock_id: int) -> Optional[Decimal]:
    point = latest_price_point(db, stock_id)
    return Decimal(str(point.price)) if point else None


def latest_prices(db: Session, stock_ids: Iterable[int]) -> Dict[int, Decimal]:
    """Latest price per stock in one round trip. Stocks without prices are absent from the result."""
    ids = list(set(stock_ids))
    if not ids:
        return {}
    newest = (
        db.query(StockPrice.stock_id, func.max(StockPrice.date).label("max_date"))
        .filter(StockPrice.stock_id.in_(ids))
        .group_by(StockPrice.stock_id)
        .subquery()
    )
    rows = (
        db.query(StockPrice.stock_id, StockPrice.price)
        .join(newest, (StockPrice.stock_id == newest.c.stock_id) & (StockPrice.date == newest.c.max_date))
        .all()
    )
    return {stock_id: Decimal(str(price)) for stock_id, price in rows}


def latest_market_date(db: Session) -> Optional[date]:
    return db.query(func.max(StockPrice.date)).scalar()


def prices_on(db: Session, day: date) -> List[tuple[StockPrice, Stock]]:
    return (
        db.query(StockPrice, Stock)
        .join(Stock, StockPrice.stock_id == Stock.id)
        .filter(StockPrice.date == day)
        .order_by(Stock.id.asc())
        .all()
    )


def price_history(db: Session, stock_id: int, days: Optional[int] = None, newest_first: bool = False) -> List[StockPrice]:
    q = db.query(StockPrice).filter(StockPrice.stock_id == stock_id)
    if newest_first:
        q = q.order_by(StockPrice.date.desc(), StockPrice.id.desc())
    else:
        q = q.order_by(StockPrice.date.asc(), StockPrice.id.asc())
    if days is not None:
        q = q.limit(days)
    return q.all()
