"""
Read side of the catalog.

Every function here is read-only and returns a list, empty when nothing
matches, rather than raising for "no rows".
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from ..config.database import MAX_INTEGER
from ..core.exceptions import NotFoundError, ValidationError
from ..models.contact_message import ContactMessage
from ..models.dashboard import DashboardStats
from ..models.download import (
    Download, DownloadResourceInfo, RecentDownload, UNKNOWN_RESOURCE
)
from ..models.program import Program, ProgramType
from ..models.resource import Resource
from ..utils.db_utils import count_rows, get_resource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoFilter:
    pass


@dataclass(frozen=True)
class ByProgram:
    program_id: int


@dataclass(frozen=True)
class ByProgramAndSemester:
    program_id: int
    semester: int


ResourceFilter = Union[NoFilter, ByProgram, ByProgramAndSemester]


def resource_filter(program_id: Optional[int] = None, semester: Optional[int] = None) -> ResourceFilter:
    """Build a filter from optional query parameters.

    A semester without a program is ignored: semester numbers only mean
    something inside one program. A program id or semester of 0 counts as
    not given.
    """
    if not program_id:
        if semester:
            logger.debug(f"Ignoring semester={semester} filter without program_id")
        return NoFilter()
    if not semester:
        return ByProgram(program_id)
    return ByProgramAndSemester(program_id, semester)


def list_programs(db: Session) -> List[Program]:
    """Undergraduate programs first, then postgraduate; by name within a type"""
    programs = db.query(Program).order_by(Program.id).all()
    # Sorted in Python so name order is case-sensitive whatever the database
    # collation; the sort is stable, equal names keep insertion order
    return sorted(
        programs,
        key=lambda p: (0 if p.type == ProgramType.UNDERGRADUATE.value else 1, p.name)
    )


def _column_values_fit(filter_by: ResourceFilter) -> bool:
    """False when a filter value is outside what an Integer column can hold"""
    values = [filter_by.program_id]
    if isinstance(filter_by, ByProgramAndSemester):
        values.append(filter_by.semester)
    return all(-MAX_INTEGER - 1 <= value <= MAX_INTEGER for value in values)


def list_resources(db: Session, filter_by: ResourceFilter = NoFilter()) -> List[Resource]:
    """Resources, most recently uploaded first, with their program attached"""
    if not isinstance(filter_by, NoFilter) and not _column_values_fit(filter_by):
        return []

    query = db.query(Resource)
    if isinstance(filter_by, ByProgram):
        query = query.filter(Resource.program_id == filter_by.program_id)
    elif isinstance(filter_by, ByProgramAndSemester):
        query = query.filter(
            Resource.program_id == filter_by.program_id,
            Resource.semester == filter_by.semester
        )
    return query.order_by(Resource.upload_date.desc(), Resource.id.desc()).all()


def find_resource(db: Session, resource_id: int) -> Resource:
    """Get one resource or raise NotFoundError"""
    resource = get_resource(db, resource_id)
    if resource is None:
        raise NotFoundError("resource", resource_id)
    return resource


def list_recent_downloads(db: Session, limit: int = 10) -> List[RecentDownload]:
    """Latest download events with the title and type of what was downloaded.

    Events whose resource has since been deleted get the UNKNOWN_RESOURCE
    projection instead of being dropped.
    """
    if limit < 1:
        raise ValidationError("limit must be at least 1", details={"limit": limit})

    rows = (
        db.query(Download, Resource.title, Resource.type)
        .outerjoin(Resource, Resource.id == Download.resource_id)
        .order_by(Download.downloaded_at.desc(), Download.id.desc())
        .limit(limit)
        .all()
    )

    recent = []
    for download, title, resource_type in rows:
        if title is None:
            resource = UNKNOWN_RESOURCE
        else:
            resource = DownloadResourceInfo(title=title, type=resource_type)
        recent.append(RecentDownload(
            id=download.id,
            resource_id=download.resource_id,
            downloaded_at=download.downloaded_at,
            ip_address=download.ip_address,
            resource=resource
        ))
    return recent


def list_contact_messages(db: Session) -> List[ContactMessage]:
    """Contact form submissions, newest first"""
    return (
        db.query(ContactMessage)
        .order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
        .all()
    )


def compute_dashboard_stats(db: Session) -> DashboardStats:
    """Independent row counts of the four catalog tables.

    The counts are read one after another, not inside one snapshot.
    """
    return DashboardStats(
        programs=count_rows(db, Program),
        resources=count_rows(db, Resource),
        downloads=count_rows(db, Download),
        messages=count_rows(db, ContactMessage)
    )
