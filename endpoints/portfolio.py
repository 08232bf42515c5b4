from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from database import get_db
from schemas.portfolio import (
    OrderIn, HoldingOut, TradeResult, PortfolioItemOut, PortfolioListResponse,
    BuyResponse, SellResponse, MessageResponse, TransactionOut, TransactionListResponse
)
from schemas.profile import ProfileOut
from services.ledger import LedgerError, buy, sell, close_position, list_portfolio, list_transactions
from endpoints.errors import error_response, ledger_error_response
from endpoints.logs import log_action, log_error, log_request, log_warning

router = APIRouter(prefix="/portfolio", tags=["portfolio"])

@router.get("", response_model=PortfolioListResponse)
async def get_portfolio(request: Request, db: Session = Depends(get_db)):
    """List current holdings with their latest stored price."""
    correlation_id = await log_request(request, "get_portfolio")
    try:
        items = list_portfolio(db)
    except SQLAlchemyError as e:
        log_error("get_portfolio_failed", e, correlation_id)
        return error_response(str(e), 400)
    return PortfolioListResponse(data=[PortfolioItemOut(**i) for i in items], count=len(items))

@router.get("/transactions", response_model=TransactionListResponse)
async def get_transactions(request: Request, db: Session = Depends(get_db)):
    correlation_id = await log_request(request, "get_transactions")
    try:
        rows = list_transactions(db)
    except SQLAlchemyError as e:
        log_error("get_transactions_failed", e, correlation_id)
        return error_response(str(e), 400)
    return TransactionListResponse(data=[TransactionOut.from_model(t) for t in rows], count=len(rows))

@router.post("/buy", response_model=BuyResponse, status_code=201)
async def buy_stock(order: OrderIn, request: Request, db: Session = Depends(get_db)):
    """
    Buy `volume` shares of `stockId` at `currentPrice`.
    Creates the holding or blends the new shares into its average price, then debits the balance.
    """
    correlation_id = await log_request(request, "buy_stock", order.model_dump())
    try:
        holding, profile = buy(db, order.stockId, order.volume, order.currentPrice)
    except LedgerError as e:
        log_warning("buy_rejected", correlation_id, {"reason": e.message, "type": type(e).__name__})
        return ledger_error_response(e)
    except Exception as e:
        log_error("buy_failed", e, correlation_id)
        return error_response(f"Unexpected error: {str(e)}", 500)

    log_action("buy_applied", correlation_id, {
        "stock_id": holding.stock_id, "volume": holding.volume,
        "avg_price": holding.avg_price, "balance": profile.balance
    })
    return BuyResponse(data=TradeResult(portfolio=HoldingOut.from_model(holding), profile=ProfileOut.from_model(profile)))

@router.post("/sell", response_model=SellResponse)
async def sell_stock(order: OrderIn, request: Request, db: Session = Depends(get_db)):
    """
    Sell `volume` shares of `stockId` at `currentPrice`.
    Accepts numeric strings. Selling the full volume removes the holding.
    """
    correlation_id = await log_request(request, "sell_stock", order.model_dump())
    try:
        holding, profile = sell(db, order.stockId, order.volume, order.currentPrice)
    except LedgerError as e:
        log_warning("sell_rejected", correlation_id, {"reason": e.message, "type": type(e).__name__})
        return ledger_error_response(e)
    except Exception as e:
        log_error("sell_failed", e, correlation_id)
        return error_response(f"Unexpected error: {str(e)}", 500)

    log_action("sell_applied", correlation_id, {
        "stock_id": order.stockId, "remaining": holding.volume if holding else 0, "balance": profile.balance
    })
    return SellResponse(
        message="Stock sold successfully",
        data=TradeResult(
            portfolio=HoldingOut.from_model(holding) if holding else None,
            profile=ProfileOut.from_model(profile)
        )
    )

@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_portfolio_item(item_id: int, request: Request, db: Session = Depends(get_db)):
    """Close a holding entirely at the stock's latest stored price."""
    correlation_id = await log_request(request, "delete_portfolio_item", {"item_id": item_id})
    try:
        profile = close_position(db, item_id)
    except LedgerError as e:
        log_warning("delete_rejected", correlation_id, {"reason": e.message, "type": type(e).__name__})
        return ledger_error_response(e)
    except Exception as e:
        log_error("delete_failed", e, correlation_id)
        return error_response(f"Unexpected error: {str(e)}", 500)

    log_action("position_closed", correlation_id, {"item_id": item_id, "balance": profile.balance})
    return MessageResponse(message="Portfolio item deleted successfully")
