import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..config.database import SessionLocal
from ..models.download import Download
from ..utils.db_utils import create_download

logger = logging.getLogger(__name__)


def record_download(db: Session, resource_id: int, requester_address: Optional[str] = None) -> Download:
    """Log a download request.

    The resource is not looked up first: the event records intent, taken
    before the client is sent to the file, and stays valid as history even if
    the resource is gone.
    """
    download = create_download(db, resource_id=resource_id, ip_address=requester_address)
    logger.debug(f"Recorded download {download.id} of resource {resource_id} from {requester_address}")
    return download


def record_download_in_background(resource_id: int, requester_address: Optional[str] = None) -> None:
    """Fire-and-forget variant run after the file redirect has been sent.

    Uses its own session because the request session is closed by then.
    Failures are logged and go no further; the file transfer has already
    happened.
    """
    db = SessionLocal()
    try:
        record_download(db, resource_id, requester_address)
    except Exception as e:
        logger.error(f"Failed to record download of resource {resource_id}: {str(e)}")
    finally:
        db.close()
