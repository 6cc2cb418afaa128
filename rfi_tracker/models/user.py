from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime


class AuthAccount(SQLModel, table=True):
    __tablename__ = "auth_accounts"

    id: str = Field(primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


class UserProfile(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(primary_key=True)
    email: Optional[str] = None
    name: str = "New User"
