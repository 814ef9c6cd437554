from fastapi import APIRouter

from eod_report.api.v1 import exports, reports, users

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(reports.router)
api_router.include_router(exports.router)
api_router.include_router(users.router)
