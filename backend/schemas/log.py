from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class LogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: Optional[datetime] = None
    meta: Optional[Any] = None


class LogPage(BaseModel):
    success: bool = True
    items: List[LogResponse]
    total: int
    page: int
    page_size: int
