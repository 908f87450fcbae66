"""
Central v1 API router – registers all endpoint sub-routers.
"""
from fastapi import APIRouter
import logging

from store_ratings.api.v1.endpoints import admin, admin_stores, auth, owner, public, stores, user

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api/v1")

logger.info("Registering v1 API routers")
api_router.include_router(auth.router)
api_router.include_router(admin.router)
api_router.include_router(admin_stores.router)
api_router.include_router(owner.router)
api_router.include_router(user.router)
api_router.include_router(stores.router)
api_router.include_router(public.router)
