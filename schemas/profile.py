from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Any, Optional

class ProfileOut(BaseModel):
    id: str
    username: Optional[str] = None
    avatarUrl: Optional[str] = None
    balance: float
    holdings: float
    initInvestment: Optional[float] = None
    netProfit: float
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, p) -> "ProfileOut":
        return cls(
            id=p.id,
            username=p.username,
            avatarUrl=p.avatar_url,
            balance=float(p.balance or 0),
            holdings=float(p.holdings or 0),
            initInvestment=float(p.init_invest) if p.init_invest is not None else None,
            netProfit=float(p.net_profit or 0),
            createdAt=p.created_at,
            updatedAt=p.updated_at,
        )

class ProfileResponse(BaseModel):
    success: bool = True
    data: ProfileOut

class ProfileUpdateIn(BaseModel):
    # Raw values; update_profile rejects non-string or blank input
    username: Any = None
    avatarUrl: Any = None
