from pydantic import BaseModel
import datetime as dt
from typing import List, Optional

class StockItemOut(BaseModel):
    id: int
    symbol: str
    name: Optional[str]
    latestPrice: float

class PaginationOut(BaseModel):
    total: int
    limit: int
    offset: int
    hasNext: bool
    hasPrev: bool

class StockListResponse(BaseModel):
    success: bool = True
    data: List[StockItemOut]
    pagination: PaginationOut

class PricePointOut(BaseModel):
    id: int
    stockId: int
    date: dt.date
    price: float

class PricePointListResponse(BaseModel):
    success: bool = True
    data: List[PricePointOut]

class StockPriceOut(PricePointOut):
    stockName: Optional[str]
    stockSymbol: str

class StockPriceListResponse(BaseModel):
    success: bool = True
    data: List[StockPriceOut]
