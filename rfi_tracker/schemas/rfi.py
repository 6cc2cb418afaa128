# schemas/rfi.py

from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class RFIStatus(str, Enum):
    NEW = "New"
    WORKING_ON_IT = "Working on it"
    STUCK = "Stuck"
    COMPLETED = "Completed"


class RFICreate(BaseModel):
    title: str
    description: Optional[str] = ""


class RFIRead(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: RFIStatus
    project_id: int
    created_by: str
    created_at: datetime

    class Config:
        from_attributes = True


class RFIStatusUpdate(BaseModel):
    status: RFIStatus


class RFIDraft(BaseModel):
    """Unsaved input of a project's new-RFI form."""
    title: str = ""
    description: str = ""
