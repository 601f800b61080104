import logging
from typing import Dict, List, Optional

from fastapi import (
    APIRouter, BackgroundTasks, Depends, File, Form, Query, Request, UploadFile, status
)
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ..config.database import MAX_INTEGER, get_db
from ..core.security import require_admin
from ..models.resource import ResourceResponse
from ..services.catalog_queries import find_resource, list_resources, resource_filter
from ..services.download_recorder import record_download_in_background
from ..services.ingestion import IngestionPipeline, delete_resource
from ..utils.s3_utils import ObjectStore, get_object_store
from .downloads import get_client_address

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/resources",
    tags=["resources"]
)


@router.get("", response_model=List[ResourceResponse])
async def get_resources(
    program_id: Optional[int] = Query(None, ge=0, le=MAX_INTEGER),
    semester: Optional[int] = Query(None, ge=0, le=MAX_INTEGER),
    db: Session = Depends(get_db),
):
    """Resources, newest first.

    semester only applies together with program_id and is ignored otherwise.
    """
    return list_resources(db, resource_filter(program_id, semester))


@router.post("/upload", response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
async def upload_resource(
    file: Optional[UploadFile] = File(None),
    program_id: Optional[int] = Form(None),
    semester: Optional[int] = Form(None),
    title: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    object_store: ObjectStore = Depends(get_object_store),
    current_user: Dict = Depends(require_admin),
):
    """Upload one file and register it as a resource"""
    file_bytes = await file.read() if file is not None else None
    filename = file.filename if file is not None else None
    logger.info(
        f"Upload request from {current_user['id']}: {filename!r} "
        f"({len(file_bytes or b'')} bytes) for program {program_id}, semester {semester}"
    )

    pipeline = IngestionPipeline(db, object_store)
    pipeline.progress.subscribe(
        lambda value: logger.debug(f"Upload of {filename!r}: {value}%")
    )
    return pipeline.upload_resource(
        file_bytes=file_bytes,
        filename=filename,
        program_id=program_id,
        semester=semester,
        title=title,
        resource_type=type,
        uploader_id=current_user["id"],
        content_type=file.content_type if file is not None else None,
    )


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_resource(
    resource_id: int,
    db: Session = Depends(get_db),
    object_store: ObjectStore = Depends(get_object_store),
    current_user: Dict = Depends(require_admin),
):
    """Delete a resource; its download history is kept"""
    delete_resource(db, resource_id, object_store)


@router.get("/{resource_id}/download")
async def download_resource(
    resource_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Redirect to the file and record the download once the response is sent"""
    resource = find_resource(db, resource_id)
    background_tasks.add_task(
        record_download_in_background, resource.id, get_client_address(request)
    )
    return RedirectResponse(url=resource.file_url, status_code=status.HTTP_302_FOUND)
