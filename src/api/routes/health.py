"""
Health check API route
"""

from datetime import datetime
from fastapi import APIRouter, HTTPException
from database.connection import get_database

router = APIRouter()

@router.get("/health")
async def health_check():
    """Report whether the database answers a ping"""
    try:
        await get_database().command("ping")
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Health check failed: {type(e).__name__}")

    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "connected"
    }
