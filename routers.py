from fastapi import APIRouter
from endpoints.health import router as health_router
from endpoints.portfolio import router as portfolio_router
from endpoints.profiles import router as profiles_router
from endpoints.stocks import router as stocks_router
from endpoints.stock_prices import router as stock_prices_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(portfolio_router)
api_router.include_router(profiles_router)
api_router.include_router(stocks_router)
api_router.include_router(stock_prices_router)
