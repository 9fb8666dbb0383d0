from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from schemas.appointment import Appointment
from schemas.service import Service


class DashboardStats(BaseModel):
    total: int = 0
    today: int = 0
    upcoming: int = 0
    pending: int = 0


class DashboardSnapshot(BaseModel):
    appointments: List[Appointment] = []
    services: List[Service] = []
    stats: DashboardStats = Field(default_factory=DashboardStats)
    error: Optional[str] = None
    last_refreshed: Optional[datetime] = None
