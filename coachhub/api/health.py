"""
Health check endpoint
"""
from fastapi import APIRouter
from datetime import datetime
from coachhub.config import get_settings
from coachhub import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": get_settings().environment,
        "timestamp": datetime.utcnow().isoformat(),
        "version": __version__
    }
