"""Aggregate all API routers."""

from fastapi import APIRouter

from . import gifts, system

api_router = APIRouter()
api_router.include_router(gifts.router)
api_router.include_router(system.router)
