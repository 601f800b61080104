"""
Write side of the catalog: uploading and deleting resources.

Upload sequence: validate -> store blob -> create resource row. A resource row
only ever points at a blob that was stored successfully. The reverse is not
guaranteed: when the row cannot be written after the blob was stored (or the
caller gives up in between) the blob is left behind and logged as orphaned.
"""
import logging
import mimetypes
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from ..config.settings import MAX_FILE_SIZE, STORAGE_PREFIX
from ..core.exceptions import CatalogError, StorageError, ValidationError
from ..models.resource import Resource, ResourceType
from ..utils import db_utils
from ..utils.file_utils import format_file_size, generate_object_path
from ..utils.s3_utils import ObjectStore

logger = logging.getLogger(__name__)

ProgressListener = Callable[[int], None]


class UploadProgress:
    """Advisory 0-100 progress of the current upload.

    Never moves backwards within one upload; only reset() brings it back to 0.
    """

    def __init__(self):
        self.value = 0
        self._listeners: List[ProgressListener] = []

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def reset(self) -> None:
        self.value = 0
        self._notify()

    def advance(self, value: int) -> None:
        value = max(0, min(100, value))
        if value <= self.value:
            return
        self.value = value
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self.value)


class IngestionPipeline:
    VALIDATED = 20
    STORED = 80
    WRITING = 90
    DONE = 100

    def __init__(
        self,
        db: Session,
        object_store: ObjectStore,
        max_file_size: int = MAX_FILE_SIZE,
        storage_prefix: str = STORAGE_PREFIX
    ):
        self.db = db
        self.object_store = object_store
        self.max_file_size = max_file_size
        self.storage_prefix = storage_prefix
        self.progress = UploadProgress()

    def _validate(
        self,
        file_bytes: Optional[bytes],
        program_id: Optional[int],
        semester: Optional[int],
        title: Optional[str],
        resource_type: Optional[str]
    ) -> None:
        """Checks run in a fixed order; the first failing one is reported"""
        if program_id is None or not (title and title.strip()) or not file_bytes:
            raise ValidationError("missing required field")

        if len(file_bytes) > self.max_file_size:
            raise ValidationError(
                "file too large",
                details={"size": len(file_bytes), "max_size": self.max_file_size}
            )

        program = db_utils.get_program(self.db, program_id)
        if program is None:
            raise ValidationError("unknown program", details={"program_id": program_id})

        if semester is None or not 1 <= semester <= program.semesters:
            raise ValidationError(
                "semester out of range",
                details={"semester": semester, "semesters": program.semesters}
            )

        try:
            ResourceType(resource_type)
        except ValueError:
            raise ValidationError("invalid resource type", details={"type": resource_type})

    def upload_resource(
        self,
        file_bytes: Optional[bytes],
        filename: Optional[str],
        program_id: Optional[int],
        semester: Optional[int],
        title: Optional[str],
        resource_type: Optional[str],
        uploader_id: Optional[str] = None,
        content_type: Optional[str] = None
    ) -> Resource:
        """Validate, store and register one uploaded file.

        Raises:
            ValidationError: input rejected; nothing was stored
            StorageError: the object store or the catalog store failed
        """
        self.progress.reset()

        self._validate(file_bytes, program_id, semester, title, resource_type)
        self.progress.advance(self.VALIDATED)

        path = generate_object_path(filename, prefix=self.storage_prefix)
        content_type = content_type or mimetypes.guess_type(filename or "")[0]
        try:
            file_url = self.object_store.store(file_bytes, path, content_type=content_type)
        except StorageError:
            logger.error(f"Object store rejected upload of {filename!r} to {path}")
            raise
        except Exception as e:
            logger.error(f"Object store failed for {filename!r}: {str(e)}")
            raise StorageError(f"Failed to store file: {str(e)}", details={"path": path}) from e
        if not file_url:
            raise StorageError("Object store returned no URL", details={"path": path})
        self.progress.advance(self.STORED)

        file_size = format_file_size(len(file_bytes))
        self.progress.advance(self.WRITING)
        try:
            resource = db_utils.create_resource(
                self.db,
                program_id=program_id,
                semester=semester,
                title=title,
                resource_type=resource_type,
                file_url=file_url,
                file_size=file_size,
                uploaded_by=uploader_id,
                storage_path=path
            )
        except CatalogError:
            logger.warning(f"Resource row not created; blob at {path} is orphaned")
            raise

        self.progress.advance(self.DONE)
        logger.info(
            f"Uploaded resource {resource.id} ({title!r}, program {program_id}, "
            f"semester {semester}, {file_size}) by {uploader_id or 'unknown'}"
        )
        return resource


def delete_resource(db: Session, resource_id: int, object_store: Optional[ObjectStore] = None) -> None:
    """Remove a resource from the catalog.

    Download history is kept. Blob cleanup is attempted afterwards and only
    logged when it fails.
    """
    resource = db_utils.delete_resource(db, resource_id)
    logger.info(f"Deleted resource {resource_id} ({resource.title!r})")

    if object_store is None or not resource.storage_path:
        return
    try:
        object_store.delete(resource.storage_path)
    except Exception as e:
        logger.warning(f"Could not delete blob {resource.storage_path} for resource {resource_id}: {str(e)}")
