from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict
from sqlalchemy import CheckConstraint, Column, DateTime, Integer, JSON, String

from ..config.database import Base
from ..utils.time_utils import utcnow


class ProgramType(str, Enum):
    UNDERGRADUATE = "undergraduate"
    POSTGRADUATE = "postgraduate"


class Program(Base):
    __tablename__ = "programs"
    __table_args__ = (
        CheckConstraint("semesters >= 1", name="ck_programs_semesters_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, index=True)  # ProgramType value
    specializations = Column(JSON, nullable=False, default=list)
    semesters = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Program id={self.id} name={self.name!r} type={self.type}>"


class ProgramCreate(BaseModel):
    name: str
    type: ProgramType
    specializations: List[str] = []
    semesters: int


class ProgramResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: ProgramType
    specializations: List[str]
    semesters: int
    created_at: datetime
