from datetime import datetime
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database import Base


class Holding(Base):
	__tablename__ = "portfolio"

	id = Column(Integer, primary_key=True, index=True)
	# one row per owned stock (single tenant)
	stock_id = Column(Integer, ForeignKey('stocks.id', ondelete='CASCADE'), nullable=False, unique=True)
	volume = Column(Integer, nullable=False)
	avg_price = Column(Float, nullable=False, default=0.0)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

	stock = relationship("Stock")
