# schemas/user.py

from typing import Optional
from pydantic import BaseModel


class UserCredentials(BaseModel):
    email: str
    password: str


class UserRead(BaseModel):
    id: str
    email: Optional[str] = None

    class Config:
        from_attributes = True


class UserProfile(BaseModel):
    id: str
    email: Optional[str] = None
    name: str = "New User"
