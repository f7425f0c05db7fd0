"""
API Router
Combines all endpoint routers
"""
from fastapi import APIRouter

from churchcomm.api.v1.endpoints import embeddings, scheduler

api_router = APIRouter()

api_router.include_router(scheduler.router)
api_router.include_router(embeddings.router)
