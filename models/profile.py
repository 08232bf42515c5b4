from sqlalchemy import Column, String, DateTime, Numeric
from database import Base
from datetime import datetime
import uuid

class Profile(Base):
    __tablename__ = "profiles"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    # Original funding amount; net profit is measured against it
    init_invest = Column(Numeric(18,2), nullable=True)
    balance = Column(Numeric(18,2), nullable=False, default=0)
    # Cached market value of all holdings (refreshed daily on read)
    holdings = Column(Numeric(18,2), nullable=False, default=0)
    net_profit = Column(Numeric(18,2), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)
