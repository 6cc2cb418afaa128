from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class ProjectCreate(BaseModel):
    name: str
    description: Optional[str] = ""

class ProjectRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_by: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ProjectDraft(BaseModel):
    """Unsaved input of the new-project form."""
    name: str = ""
    description: str = ""
