from datetime import datetime, timezone
from fastapi import APIRouter
from config import settings

router = APIRouter(prefix="/health", tags=["health"])

@router.get("")
async def health_check():
    return {
        "message": f"{settings.PROJECT_NAME} is running!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.API_VERSION,
    }
