"""Dashboard schemas"""

from pydantic import BaseModel


class StaffLoad(BaseModel):
    id: int
    name: str
    load: str  # "<count>/<capacity>"
    status: str  # OK | FULL


class DashboardStats(BaseModel):
    todayTotal: int
    completedToday: int
    pendingToday: int
    waitingQueue: int
    staffLoad: list[StaffLoad]
