from typing import Optional
from pydantic import BaseModel

from rfi_tracker.schemas.user import UserRead


class ErrorDescriptor(BaseModel):
    kind: str  # "validation" | "rejected" | "backend" | "unauthenticated" | "confirmation"
    message: str


class AuthResult(BaseModel):
    user: Optional[UserRead] = None
    error: Optional[ErrorDescriptor] = None

    @property
    def ok(self) -> bool:
        return self.error is None
