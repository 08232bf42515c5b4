"""Portfolio ledger: buy/sell/close bookkeeping against the holdings table and the account profile.

Functions:
- buy(db, stock_id, volume, price) -> (Holding, Profile)
- sell(db, stock_id, volume, price) -> (Optional[Holding], Profile)
- close_position(db, item_id) -> Profile
- get_profile(db, now=None) -> Profile (revalues holdings once per calendar day)
- update_profile(db, profile_id, username=None, avatar_url=None) -> Profile
- list_portfolio(db) -> List[dict]
- list_transactions(db) -> List[Transaction]

Each mutating call validates its raw inputs before touching the session, then
runs inside one transaction: the profile row is locked first, then the
holding row, both with_for_update(). Rows are written in the documented
order (holding then profile for buys, profile then holding for sells) and
committed once. Any failure rolls the whole operation back.
"""
from __future__ import annotations
import logging
import math
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_HALF_UP
from typing import Any, List, Optional, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from models.holding import Holding
from models.profile import Profile
from models.stock import Stock
from models.transaction import Transaction, TransactionAction
from services.prices import latest_price, latest_prices

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
SELL_INPUT_ERROR = "Invalid stockId, volume, or currentPrice"


class LedgerError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    pass


class NotFoundError(LedgerError):
    status_code = 404


class InsufficientFundsError(LedgerError):
    def __init__(self, needed: Decimal, available: Decimal):
        super().__init__(f"Insufficient funds: need {needed}, have {available}")
        self.needed = needed
        self.available = available


class InsufficientHoldingError(LedgerError):
    def __init__(self, stock_id: int, have: int, want: int):
        super().__init__("Sell volume exceeds holding volume")
        self.stock_id = stock_id
        self.have = have
        self.want = want


class PreconditionError(LedgerError):
    pass


class PriceNotFoundError(LedgerError):
    pass


class StoreError(LedgerError):
    pass


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


def _debit(value: Decimal) -> Decimal:
    # Cash leaving the account rounds up so a sub-cent cost is never free
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_CEILING)


def _net_profit(profile: Profile) -> Decimal:
    return _money(_money(profile.balance) + _money(profile.holdings) - _money(profile.init_invest))


def _to_decimal(value: Any, allow_strings: bool) -> Optional[Decimal]:
    # bool is an int subclass; never a valid amount
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return Decimal(str(value))
    if allow_strings and isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def _is_whole(value: Decimal) -> bool:
    return value == value.to_integral_value()


def parse_buy_order(stock_id: Any, volume: Any, price: Any) -> Tuple[int, int, Decimal]:
    """Buy orders only accept JSON numbers."""
    values = [_to_decimal(v, allow_strings=False) for v in (stock_id, volume, price)]
    if any(v is None for v in values):
        raise ValidationError("Invalid request: numeric stockId/volume/currentPrice required")
    sid, vol, px = values
    if not _is_whole(sid):
        raise ValidationError("stockId must be an integer")
    if vol <= 0 or not _is_whole(vol):
        raise ValidationError("volume must be a positive integer")
    if px <= 0:
        raise ValidationError("currentPrice must be positive")
    return int(sid), int(vol), px


def parse_sell_order(stock_id: Any, volume: Any, price: Any) -> Tuple[int, int, Decimal]:
    """Sell orders accept numbers or numeric strings; every rejection shares one message."""
    values = [_to_decimal(v, allow_strings=True) for v in (stock_id, volume, price)]
    if any(v is None for v in values):
        raise ValidationError(SELL_INPUT_ERROR)
    sid, vol, px = values
    if not _is_whole(sid) or not _is_whole(vol) or vol <= 0 or px <= 0:
        raise ValidationError(SELL_INPUT_ERROR)
    return int(sid), int(vol), px


@contextmanager
def _atomic(db: Session):
    try:
        yield
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(str(e)) from e
    except Exception:
        db.rollback()
        raise


def _first_profile(db: Session, lock: bool = False) -> Optional[Profile]:
    # Single tenant: the account is the oldest profile row
    q = db.query(Profile).order_by(Profile.created_at.asc(), Profile.id.asc())
    if lock:
        q = q.with_for_update()
    return q.first()


def _holding_for_stock(db: Session, stock_id: int) -> Optional[Holding]:
    return db.query(Holding).filter(Holding.stock_id == stock_id).with_for_update().first()


def _holding_by_id(db: Session, item_id: int) -> Optional[Holding]:
    return db.query(Holding).filter(Holding.id == item_id).with_for_update().first()


def _record(db: Session, action: TransactionAction, stock_id: int, volume: int, price: Decimal, amount: Decimal, profile: Profile):
    db.add(Transaction(
        stock_id=stock_id,
        action=action.value,
        volume=volume,
        price=float(price),
        amount=_money(amount),
        balance_after=_money(profile.balance),
        created_at=datetime.utcnow()
    ))


def buy(db: Session, stock_id: Any, volume: Any, price: Any) -> Tuple[Holding, Profile]:
    sid, qty, px = parse_buy_order(stock_id, volume, price)
    with _atomic(db):
        if db.get(Stock, sid) is None:
            raise NotFoundError("Stock not found")
        profile = _first_profile(db, lock=True)
        if profile is None:
            raise NotFoundError("Profile not found")
        exact_cost = px * qty
        available = _money(profile.balance)
        if available < exact_cost:
            raise InsufficientFundsError(exact_cost, available)
        total_cost = _debit(exact_cost)

        now = datetime.utcnow()
        holding = _holding_for_stock(db, sid)
        if holding:
            new_volume = holding.volume + qty
            cost_before = Decimal(str(holding.avg_price)) * holding.volume
            holding.avg_price = float((cost_before + px * qty) / new_volume)
            holding.volume = new_volume
            holding.updated_at = now
        else:
            holding = Holding(stock_id=sid, volume=qty, avg_price=float(px), created_at=now, updated_at=now)
            db.add(holding)
        db.flush()

        profile.holdings = _money(profile.holdings) + total_cost
        profile.balance = available - total_cost
        profile.net_profit = _net_profit(profile)
        db.flush()
        _record(db, TransactionAction.BUY, sid, qty, px, total_cost, profile)
    logger.info("Bought %s x%s @ %s; balance now %s", sid, qty, px, profile.balance)
    return holding, profile


def sell(db: Session, stock_id: Any, volume: Any, price: Any) -> Tuple[Optional[Holding], Profile]:
    """Sell part or all of a holding at the caller's price.

    Average cost of the remaining shares is left untouched; a sell that
    exhausts the position deletes the holding row.
    """
    sid, qty, px = parse_sell_order(stock_id, volume, price)
    with _atomic(db):
        profile = _first_profile(db, lock=True)
        holding = _holding_for_stock(db, sid)
        if holding is None:
            raise NotFoundError("Portfolio item not found")
        if qty > holding.volume:
            raise InsufficientHoldingError(sid, holding.volume, qty)
        if profile is None:
            raise NotFoundError("Profile not found")
        if profile.init_invest is None:
            raise PreconditionError("Initial investment is missing")

        sell_value = _money(px * qty)
        profile.balance = _money(profile.balance) + sell_value
        profile.holdings = _money(profile.holdings) - sell_value
        profile.net_profit = _net_profit(profile)
        db.flush()

        if qty == holding.volume:
            db.delete(holding)
            remaining = None
        else:
            holding.volume -= qty
            holding.updated_at = datetime.utcnow()
            remaining = holding
        db.flush()
        _record(db, TransactionAction.SELL, sid, qty, px, sell_value, profile)
    logger.info("Sold %s x%s @ %s; balance now %s", sid, qty, px, profile.balance)
    return remaining, profile


def close_position(db: Session, item_id: int) -> Profile:
    """Liquidate a whole holding at the stock's latest stored price."""
    with _atomic(db):
        profile = _first_profile(db, lock=True)
        holding = _holding_by_id(db, item_id)
        if holding is None:
            raise NotFoundError("Portfolio item not found")
        px = latest_price(db, holding.stock_id)
        if px is None:
            raise PriceNotFoundError(f"No price data found for stockId {holding.stock_id}")
        current_value = _money(px * holding.volume)
        if profile is None:
            raise NotFoundError("Profile not found")
        if profile.init_invest is None:
            raise PreconditionError("Initial investment is missing")

        profile.balance = _money(profile.balance) + current_value
        profile.holdings = _money(profile.holdings) - current_value
        profile.net_profit = _net_profit(profile)
        db.flush()

        stock_id, volume = holding.stock_id, holding.volume
        db.delete(holding)
        db.flush()
        _record(db, TransactionAction.CLOSE, stock_id, volume, px, current_value, profile)
    logger.info("Closed position %s (%s x%s @ %s)", item_id, stock_id, volume, px)
    return profile


def get_profile(db: Session, now: Optional[datetime] = None) -> Profile:
    """Return the account profile, revaluing holdings at market once per calendar day.

    Holdings without any price point are left out of the valuation.
    """
    now = now or datetime.utcnow()
    with _atomic(db):
        profile = _first_profile(db, lock=True)
        if profile is None:
            raise NotFoundError("User not found")
        if profile.updated_at is not None and profile.updated_at.date() == now.date():
            return profile

        holdings = db.query(Holding).all()
        prices = latest_prices(db, [h.stock_id for h in holdings])
        total = Decimal('0')
        for h in holdings:
            px = prices.get(h.stock_id)
            if px is None:
                logger.warning("No price point for stock %s; excluded from holdings valuation", h.stock_id)
                continue
            total += px * h.volume
        profile.holdings = _money(total)
        profile.net_profit = _net_profit(profile)
        profile.updated_at = now
    return profile


def update_profile(db: Session, profile_id: str, username: Any = None, avatar_url: Any = None) -> Profile:
    """Change the display fields of a profile.

    Ledger amounts and the daily valuation stamp are left alone.
    """
    if username is None and avatar_url is None:
        raise ValidationError("Nothing to update: username or avatarUrl required")
    if username is not None and (not isinstance(username, str) or not username.strip()):
        raise ValidationError("username must be a non-empty string")
    if avatar_url is not None and not isinstance(avatar_url, str):
        raise ValidationError("avatarUrl must be a string")
    with _atomic(db):
        profile = db.query(Profile).filter(Profile.id == profile_id).with_for_update().first()
        if profile is None:
            raise NotFoundError("User not found")
        if username is not None:
            profile.username = username.strip()
        if avatar_url is not None:
            profile.avatar_url = avatar_url
    logger.info("Updated profile %s", profile_id)
    return profile


def list_portfolio(db: Session) -> List[dict]:
    rows = (
        db.query(Holding, Stock)
        .join(Stock, Holding.stock_id == Stock.id)
        .order_by(Holding.id.asc())
        .all()
    )
    prices = latest_prices(db, [h.stock_id for h, _ in rows])
    items = []
    for h, s in rows:
        px = prices.get(h.stock_id)
        items.append({
            'id': h.id,
            'stockId': h.stock_id,
            'symbol': s.symbol,
            'name': s.name,
            'volume': h.volume,
            'averagePrice': h.avg_price,
            'currentPrice': float(px) if px is not None else None,
        })
    return items


def list_transactions(db: Session, limit: int = 100) -> List[Transaction]:
    return db.query(Transaction).order_by(Transaction.created_at.desc(), Transaction.id.desc()).limit(limit).all()
