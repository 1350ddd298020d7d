"""Dashboard route: totals, recent summaries and the next pending tasks."""

from fastapi import APIRouter, Depends

from studyspark.dependencies import get_storage
from studyspark.schemas.dashboard import DashboardStats
from studyspark.storage.base import StorageRepository

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats, summary="Dashboard statistics")
async def dashboard_stats(storage: StorageRepository = Depends(get_storage)):
    return await storage.get_dashboard_stats()
