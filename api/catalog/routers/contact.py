import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..config.database import get_db
from ..core.security import require_admin
from ..models.contact_message import ContactMessageCreate, ContactMessageResponse
from ..services.catalog_queries import list_contact_messages
from ..utils.db_utils import create_contact_message

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/contact",
    tags=["contact"]
)


@router.post("", response_model=ContactMessageResponse, status_code=status.HTTP_201_CREATED)
async def submit_contact_message(
    payload: ContactMessageCreate,
    db: Session = Depends(get_db),
):
    """Store a message from the public contact form"""
    message = create_contact_message(
        db,
        name=payload.name,
        email=payload.email,
        subject=payload.subject,
        message=payload.message,
    )
    logger.info(f"Contact message {message.id} received from {message.email}")
    return message


@router.get("/messages", response_model=List[ContactMessageResponse])
async def get_contact_messages(
    db: Session = Depends(get_db),
    current_user: Dict = Depends(require_admin),
):
    """All contact messages, newest first"""
    return list_contact_messages(db)
