from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Column, DateTime, Integer, String

from ..config.database import Base, MAX_INTEGER
from ..utils.time_utils import utcnow


class Download(Base):
    __tablename__ = "downloads"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    # Historical reference only: the resource may be deleted later
    resource_id = Column(Integer, nullable=False, index=True)
    downloaded_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    ip_address = Column(String, nullable=True)


class DownloadCreate(BaseModel):
    resource_id: int = Field(..., ge=1, le=MAX_INTEGER)


class DownloadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    resource_id: int
    downloaded_at: datetime
    ip_address: Optional[str] = None


class DownloadResourceInfo(BaseModel):
    title: str
    type: str
    available: bool = True


UNKNOWN_RESOURCE = DownloadResourceInfo(title="Unknown resource", type="unknown", available=False)


class RecentDownload(BaseModel):
    id: int
    resource_id: int
    downloaded_at: datetime
    ip_address: Optional[str] = None
    resource: DownloadResourceInfo
