from fastapi import APIRouter

from src.safeops.api.v1 import approvals, incidents, workflows

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(incidents.router)
api_router.include_router(workflows.router)
api_router.include_router(approvals.router)
