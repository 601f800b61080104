from typing import List

from pydantic import BaseModel

from .download import RecentDownload


class DashboardStats(BaseModel):
    programs: int
    resources: int
    downloads: int
    messages: int


class DashboardSummary(BaseModel):
    stats: DashboardStats
    recentDownloads: List[RecentDownload]
