"""
Главный API роутер
"""
from fastapi import APIRouter

from apps.api.routers.payroll import router as payroll_router

api_router = APIRouter(prefix="/api")

api_router.include_router(payroll_router)
