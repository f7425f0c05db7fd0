"""
Health Check Endpoint
Provides health status for container health checks and monitoring
"""
from datetime import datetime
from typing import Dict

import pytz
from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Dict with status and timestamp
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(pytz.UTC).isoformat(),
        "service": "churchcomm-outreach"
    }


@router.get("/", status_code=status.HTTP_200_OK)
async def root() -> Dict[str, str]:
    return {
        "message": "ChurchComm Outreach Scheduler",
        "version": "1.0.0",
        "docs": "/docs"
    }
