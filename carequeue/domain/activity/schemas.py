"""Activity log schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ActivityLogResponse(BaseModel):
    id: int
    message: str
    createdAt: Optional[datetime] = None
