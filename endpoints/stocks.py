from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
from database import get_db
from models.stock import Stock
from schemas.stock import StockItemOut, StockListResponse, PaginationOut, PricePointOut, PricePointListResponse
from services.prices import latest_prices, price_history
from endpoints.errors import error_response
from endpoints.logs import log_error, log_request

router = APIRouter(prefix="/stocks", tags=["stocks"])

@router.get("", response_model=StockListResponse)
async def list_stocks(
    request: Request,
    limit: int = Query(100, ge=1, le=100),
    offset: int = Query(0, ge=0),
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Stock catalog with each stock's latest price (0 when no price is stored)."""
    correlation_id = await log_request(request, "list_stocks", {"limit": limit, "offset": offset, "search": search})
    try:
        q = db.query(Stock)
        if search:
            # % and _ match literally
            term = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{term}%"
            q = q.filter(or_(
                Stock.symbol.ilike(pattern, escape="\\"),
                Stock.name.ilike(pattern, escape="\\")
            ))
        total = q.count()
        stocks = q.order_by(Stock.id.asc()).offset(offset).limit(limit).all()
        prices = latest_prices(db, [s.id for s in stocks])
    except SQLAlchemyError as e:
        log_error("list_stocks_failed", e, correlation_id)
        return error_response(str(e), 400)

    data = [
        StockItemOut(id=s.id, symbol=s.symbol, name=s.name, latestPrice=float(prices.get(s.id, 0)))
        for s in stocks
    ]
    return StockListResponse(
        data=data,
        pagination=PaginationOut(
            total=total,
            limit=limit,
            offset=offset,
            hasNext=offset + limit < total,
            hasPrev=offset > 0
        )
    )

@router.get("/{stock_id}/prices", response_model=PricePointListResponse)
async def recent_prices(
    stock_id: int,
    request: Request,
    days: int = Query(10, ge=1, le=365),
    db: Session = Depends(get_db)
):
    """Most recent `days` price points, newest first."""
    correlation_id = await log_request(request, "recent_prices", {"stock_id": stock_id, "days": days})
    try:
        rows = price_history(db, stock_id, days=days, newest_first=True)
    except SQLAlchemyError as e:
        log_error("recent_prices_failed", e, correlation_id)
        return error_response(str(e), 400)
    return PricePointListResponse(
        data=[PricePointOut(id=p.id, stockId=p.stock_id, date=p.date, price=float(p.price)) for p in rows]
    )
