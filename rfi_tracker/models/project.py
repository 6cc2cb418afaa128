from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class Project(SQLModel, table=True):
    __tablename__ = "projects"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    created_by: str = Field(foreign_key="auth_accounts.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
