import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config.database import get_db
from ..models.program import ProgramResponse
from ..services.catalog_queries import list_programs

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/programs",
    tags=["programs"]
)


@router.get("", response_model=List[ProgramResponse])
async def get_programs(db: Session = Depends(get_db)):
    """All programs, undergraduate first, then by name"""
    return list_programs(db)
