"""Main API router

This module combines the media generation and marketing form routers under /api
"""
from fastapi import APIRouter

from backend.api.routes import marketing, media

# Create main API router
api_router = APIRouter(prefix="/api")

# Image / video generation routes
api_router.include_router(media.router, tags=["Media"])

# Marketing form routes, one per form
api_router.include_router(marketing.router)
