from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Any, List, Optional
from schemas.profile import ProfileOut

class OrderIn(BaseModel):
    # Raw values; the ledger owns numeric validation so buy and sell can
    # apply different coercion rules and error messages.
    stockId: Any = None
    volume: Any = None
    currentPrice: Any = None

class HoldingOut(BaseModel):
    id: int
    stockId: int
    volume: int
    averagePrice: float
    updatedAt: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, h) -> "HoldingOut":
        return cls(id=h.id, stockId=h.stock_id, volume=h.volume, averagePrice=h.avg_price, updatedAt=h.updated_at)

class PortfolioItemOut(BaseModel):
    id: int
    stockId: int
    symbol: str
    name: Optional[str]
    volume: int
    averagePrice: float
    currentPrice: Optional[float]

class PortfolioListResponse(BaseModel):
    success: bool = True
    data: List[PortfolioItemOut]
    count: int

class TradeResult(BaseModel):
    portfolio: Optional[HoldingOut]
    profile: ProfileOut

class BuyResponse(BaseModel):
    success: bool = True
    data: TradeResult

class SellResponse(BaseModel):
    success: bool = True
    message: str
    data: TradeResult

class MessageResponse(BaseModel):
    success: bool = True
    message: str

class TransactionOut(BaseModel):
    id: int
    stockId: Optional[int]
    action: str
    volume: int
    price: float
    amount: float
    balanceAfter: float
    createdAt: datetime

    @classmethod
    def from_model(cls, t) -> "TransactionOut":
        return cls(
            id=t.id,
            stockId=t.stock_id,
            action=t.action,
            volume=t.volume,
            price=t.price,
            amount=float(t.amount),
            balanceAfter=float(t.balance_after),
            createdAt=t.created_at,
        )

class TransactionListResponse(BaseModel):
    success: bool = True
    data: List[TransactionOut]
    count: int
