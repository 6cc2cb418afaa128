from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class RFI(SQLModel, table=True):
    __tablename__ = "rfis"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    status: str = "New"            # 'New', 'Working on it', 'Stuck', 'Completed'
    project_id: int = Field(foreign_key="projects.id", index=True)
    created_by: str = Field(foreign_key="auth_accounts.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
