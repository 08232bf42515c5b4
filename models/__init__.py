from models.stock import Stock
from models.stock_price import StockPrice
from models.holding import Holding
from models.profile import Profile
from models.transaction import Transaction, TransactionAction

__all__ = ["Stock", "StockPrice", "Holding", "Profile", "Transaction", "TransactionAction"]
