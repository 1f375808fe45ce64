from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from gridboard.core.logging import logger
from gridboard.database.config import get_db
from gridboard.middleware.rate_limiter import limiter

router = APIRouter()


@router.get("/health")
@limiter.exempt
async def health_check(request: Request, db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Health check endpoint
    """
    try:
        await db.command("ping")
        return {"status": "healthy", "database": "connected"}
    except PyMongoError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "disconnected"},
        )
