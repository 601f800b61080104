from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import platform
import psutil
from datetime import datetime, timezone
import logging

from ..config.database import get_db
from ..config.settings import ENV, API_VERSION, MAX_FILE_SIZE
from ..utils.s3_utils import get_object_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_GB = 1024 ** 3


@router.get("")
async def health_check(db: Session = Depends(get_db)):
    """Liveness plus a round trip to the catalog database"""
    try:
        db.execute(text("SELECT 1"))
        database = {"status": "healthy"}
    except SQLAlchemyError as e:
        logger.error(f"Catalog database unreachable: {str(e)}")
        database = {"status": "unhealthy", "error": str(e)}

    vm = psutil.virtual_memory()
    return {
        "status": database["status"],
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": ENV,
        "version": API_VERSION,
        "python_version": platform.python_version(),
        "database": database,
        "object_store": type(get_object_store()).__name__,
        "max_upload_size": MAX_FILE_SIZE,
        "memory": {
            "total_gb": round(vm.total / _GB, 2),
            "available_gb": round(vm.available / _GB, 2),
            "percent": vm.percent,
        },
    }
