from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from database import get_db
from models.stock import Stock
from schemas.stock import StockPriceOut, StockPriceListResponse
from services.prices import latest_market_date, prices_on, price_history
from endpoints.errors import error_response
from endpoints.logs import log_error, log_request

router = APIRouter(prefix="/stock-prices", tags=["stock-prices"])

def _flatten(point, stock) -> StockPriceOut:
    return StockPriceOut(
        id=point.id,
        stockId=point.stock_id,
        stockName=stock.name,
        stockSymbol=stock.symbol,
        price=float(point.price),
        date=point.date
    )

@router.get("", response_model=StockPriceListResponse)
async def current_prices(request: Request, db: Session = Depends(get_db)):
    """Every stock's price on the most recent stored date."""
    correlation_id = await log_request(request, "current_prices")
    try:
        latest = latest_market_date(db)
        rows = prices_on(db, latest) if latest else []
    except SQLAlchemyError as e:
        log_error("current_prices_failed", e, correlation_id)
        return error_response(str(e), 400)
    return StockPriceListResponse(data=[_flatten(p, s) for p, s in rows])

@router.get("/{stock_id}", response_model=StockPriceListResponse)
async def historical_prices(stock_id: str, request: Request, db: Session = Depends(get_db)):
    """Full price history of one stock, oldest first."""
    correlation_id = await log_request(request, "historical_prices", {"stock_id": stock_id})
    try:
        sid = int(stock_id)
    except ValueError:
        return error_response("Stock ID must be an integer", 400)
    try:
        stock = db.get(Stock, sid)
        rows = price_history(db, sid) if stock else []
    except SQLAlchemyError as e:
        log_error("historical_prices_failed", e, correlation_id)
        return error_response(str(e), 400)
    if not rows:
        return error_response(f"No price data found for stockId {sid}", 404)
    return StockPriceListResponse(data=[_flatten(p, stock) for p in rows])
