# routers/__init__.py

from fastapi import APIRouter

from .sidebar import router as sidebar_router
from .buildings import router as buildings_router
from .apartments import router as apartments_router
from .villas import router as villas_router
from .tenants import router as tenants_router
from .health import router as health_router


# Master router for mounting under a prefix
api_router = APIRouter()

api_router.include_router(sidebar_router)
api_router.include_router(buildings_router)
api_router.include_router(apartments_router)
api_router.include_router(villas_router)
api_router.include_router(tenants_router)
api_router.include_router(health_router)

__all__ = ["api_router"]
