import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config.database import MAX_INTEGER
from ..core.exceptions import NotFoundError, StorageError, ValidationError
from ..models.contact_message import ContactMessage
from ..models.download import Download
from ..models.program import Program, ProgramType
from ..models.resource import Resource, ResourceType

logger = logging.getLogger(__name__)


def _require(**fields) -> None:
    """Raise ValidationError naming every missing or blank field"""
    missing = [
        name for name, value in fields.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise ValidationError(
            "missing required field",
            details={"fields": missing}
        )


def _is_row_id(value) -> bool:
    """True when value can be an id stored in an Integer column"""
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= MAX_INTEGER


def _commit(db: Session, row):
    """Add and commit a row, translating database failures"""
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
    except IntegrityError as e:
        db.rollback()
        raise ValidationError(f"Integrity check failed: {e.orig}") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Catalog store write failed: {str(e)}") from e


def create_program(
    db: Session,
    name: str,
    program_type: str,
    semesters: int,
    specializations: Optional[List[str]] = None
) -> Program:
    """Insert a program row (administrative seeding only)"""
    _require(name=name, type=program_type, semesters=semesters)
    if not isinstance(name, str):
        raise ValidationError("program name must be a string", details={"name": repr(name)})
    try:
        program_type = ProgramType(program_type).value
    except ValueError:
        raise ValidationError(f"invalid program type: {program_type}")
    if isinstance(semesters, bool) or not isinstance(semesters, int) or semesters < 1:
        raise ValidationError("semester count must be a positive integer")

    program = Program(
        name=name.strip(),
        type=program_type,
        semesters=semesters,
        specializations=list(specializations or [])
    )
    return _commit(db, program)


def get_program(db: Session, program_id: int) -> Optional[Program]:
    """Get a program by ID; ids no row can have find nothing"""
    if not _is_row_id(program_id):
        return None
    return db.query(Program).filter(Program.id == program_id).first()


def create_resource(
    db: Session,
    program_id: int,
    semester: int,
    title: str,
    resource_type: str,
    file_url: str,
    file_size: Optional[str] = None,
    uploaded_by: Optional[str] = None,
    storage_path: Optional[str] = None
) -> Resource:
    """Insert a resource row; the owning program must exist"""
    _require(
        program_id=program_id, semester=semester, title=title,
        type=resource_type, file_url=file_url
    )
    try:
        resource_type = ResourceType(resource_type).value
    except ValueError:
        raise ValidationError("invalid resource type", details={"type": resource_type})

    program = get_program(db, program_id)
    if program is None:
        raise ValidationError("unknown program", details={"program_id": program_id})
    if not 1 <= semester <= program.semesters:
        raise ValidationError(
            "semester out of range",
            details={"semester": semester, "semesters": program.semesters}
        )

    resource = Resource(
        program_id=program_id,
        semester=semester,
        title=title.strip(),
        type=resource_type,
        file_url=file_url,
        file_size=file_size,
        uploaded_by=uploaded_by,
        storage_path=storage_path
    )
    return _commit(db, resource)


def get_resource(db: Session, resource_id: int) -> Optional[Resource]:
    """Get a resource by ID; ids no row can have find nothing"""
    if not _is_row_id(resource_id):
        return None
    return db.query(Resource).filter(Resource.id == resource_id).first()


def delete_resource(db: Session, resource_id: int) -> Resource:
    """Delete a resource row and return the removed row.

    Download rows referencing it are left untouched.
    """
    resource = get_resource(db, resource_id)
    if resource is None:
        raise NotFoundError("resource", resource_id)
    try:
        db.delete(resource)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Catalog store delete failed: {str(e)}") from e
    return resource


def create_download(
    db: Session,
    resource_id: int,
    ip_address: Optional[str] = None
) -> Download:
    """Append a download event; the resource is not required to exist"""
    _require(resource_id=resource_id)
    if not _is_row_id(resource_id):
        raise ValidationError("invalid resource id", details={"resource_id": resource_id})
    return _commit(db, Download(resource_id=resource_id, ip_address=ip_address))


def create_contact_message(
    db: Session,
    name: str,
    email: str,
    subject: str,
    message: str
) -> ContactMessage:
    """Insert a contact form submission"""
    _require(name=name, email=email, subject=subject, message=message)
    if "@" not in email:
        raise ValidationError("invalid email address", details={"email": email})
    return _commit(db, ContactMessage(
        name=name.strip(),
        email=email.strip(),
        subject=subject.strip(),
        message=message
    ))


def count_rows(db: Session, model) -> int:
    """Row count of one table as seen at the time of the call"""
    try:
        return db.query(func.count(model.id)).scalar() or 0
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to count {model.__tablename__}: {str(e)}") from e
