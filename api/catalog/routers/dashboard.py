import logging
from typing import Dict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config.database import get_db
from ..config.settings import RECENT_DOWNLOADS_LIMIT
from ..core.security import require_admin
from ..models.dashboard import DashboardStats, DashboardSummary
from ..services.catalog_queries import compute_dashboard_stats, list_recent_downloads

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/dashboard",
    tags=["dashboard"],
)


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    db: Session = Depends(get_db),
    current_user: Dict = Depends(require_admin),
):
    """Row counts of programs, resources, downloads and messages"""
    return compute_dashboard_stats(db)


@router.get("/summary", response_model=DashboardSummary)
async def get_dashboard_summary(
    limit: int = Query(RECENT_DOWNLOADS_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Dict = Depends(require_admin),
):
    """Fast summary endpoint for the admin dashboard.

    Saves the frontend separate round trips by returning the counters and the
    latest download events together.
    """
    stats = compute_dashboard_stats(db)
    recent_downloads = list_recent_downloads(db, limit)
    logger.debug(f"Dashboard summary for {current_user['id']}: {stats.model_dump()}")
    return DashboardSummary(stats=stats, recentDownloads=recent_downloads)
