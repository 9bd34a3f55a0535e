"""
Main API router
"""
from fastapi import APIRouter

from primecare.api.v1.endpoints import actions, cron, machines, reminders

api_router = APIRouter()

api_router.include_router(cron.router, prefix="/cron", tags=["cron"])
api_router.include_router(actions.router, prefix="/actions", tags=["actions"])
api_router.include_router(machines.router, prefix="/machines", tags=["machines"])
api_router.include_router(reminders.router, prefix="/reminders", tags=["reminders"])
