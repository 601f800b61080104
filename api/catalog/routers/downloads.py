import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ..config.database import get_db
from ..config.settings import RECENT_DOWNLOADS_LIMIT
from ..core.security import require_admin
from ..models.download import DownloadCreate, DownloadResponse, RecentDownload
from ..services.catalog_queries import list_recent_downloads
from ..services.download_recorder import record_download

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/downloads",
    tags=["downloads"]
)


def get_client_address(request: Request) -> Optional[str]:
    """Requester address: first X-Forwarded-For hop, else the socket peer"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else None


@router.post("", response_model=DownloadResponse, status_code=status.HTTP_201_CREATED)
async def create_download_event(
    payload: DownloadCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    """Record that a resource was requested; the resource need not exist"""
    return record_download(db, payload.resource_id, get_client_address(request))


@router.get("/recent", response_model=List[RecentDownload])
async def get_recent_downloads(
    limit: int = Query(RECENT_DOWNLOADS_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Dict = Depends(require_admin),
):
    """Most recent download events, newest first"""
    return list_recent_downloads(db, limit)
