from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ..config.database import Base
from ..utils.time_utils import utcnow
from .program import ProgramResponse


class ResourceType(str, Enum):
    PREVIOUS_YEAR_PAPERS = "previous_year_papers"
    STUDY_MATERIAL = "study_material"
    SYLLABUS = "syllabus"


class Resource(Base):
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    program_id = Column(Integer, ForeignKey("programs.id"), nullable=False, index=True)
    semester = Column(Integer, nullable=False, index=True)
    title = Column(String, nullable=False)
    type = Column(String, nullable=False)  # ResourceType value
    file_url = Column(String, nullable=False)
    file_size = Column(String, nullable=True)  # e.g. "2.34 MB"
    storage_path = Column(String, nullable=True)  # object store path, used for cleanup on delete
    upload_date = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    uploaded_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    program = relationship("Program", lazy="joined")

    def __repr__(self) -> str:
        return f"<Resource id={self.id} program_id={self.program_id} semester={self.semester} title={self.title!r}>"


class ResourceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    program_id: int
    semester: int
    title: str
    type: ResourceType
    file_url: str
    file_size: Optional[str] = None
    upload_date: datetime
    uploaded_by: Optional[str] = None
    created_at: datetime
    program: Optional[ProgramResponse] = None
