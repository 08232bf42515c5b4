from datetime import datetime
from enum import Enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Float, Index
from database import Base


class TransactionAction(Enum):
    BUY = 'BUY'
    SELL = 'SELL'
    CLOSE = 'CLOSE'


class Transaction(Base):
    """Append-only record of every ledger mutation."""
    __tablename__ = "transaction_history"
    __table_args__ = (
        Index("ix_transaction_history_stock_created", "stock_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    stock_id = Column(Integer, ForeignKey('stocks.id', ondelete='SET NULL'), nullable=True)
    action = Column(String(10), nullable=False)
    volume = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    amount = Column(Numeric(18,2), nullable=False)
    balance_after = Column(Numeric(18,2), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
