from datetime import datetime
from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, Numeric, Index
from sqlalchemy.orm import relationship
from database import Base


class StockPrice(Base):
    """Daily closing price of a stock. Rows are append-only."""
    __tablename__ = "stock_prices"
    __table_args__ = (
        Index("ix_stock_prices_stock_date", "stock_id", "date"),
    )

    id = Column(Integer, primary_key=True)
    stock_id = Column(Integer, ForeignKey("stocks.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    price = Column(Numeric(18, 4), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    stock = relationship("Stock", back_populates="prices")
