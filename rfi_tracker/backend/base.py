"""
Backend client interface shared by the hosted and local implementations.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

Row = Dict[str, Any]
Filters = Dict[str, Any]
M = TypeVar("M", bound=BaseModel)

TABLES = ("projects", "rfis", "users")


class BackendError(Exception):
    """A failed backend call, carrying the backend's human readable message."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DecodeError(BackendError):
    """The backend answered with a record of an unexpected shape."""


class BackendClient(Protocol):
    """Auth and table CRUD surface of the backend-as-a-service."""

    def sign_up(self, email: str, password: str) -> Row:
        ...

    def sign_in(self, email: str, password: str) -> Row:
        ...

    def sign_out(self) -> None:
        ...

    def get_user(self) -> Optional[Row]:
        ...

    def select(self, table: str, filters: Optional[Filters] = None) -> List[Row]:
        ...

    def insert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        ...

    def update(self, table: str, filters: Filters, patch: Row) -> List[Row]:
        ...

    def delete(self, table: str, filters: Filters) -> None:
        ...

    def close(self) -> None:
        ...


def decode_row(model: Type[M], row: Any) -> M:
    try:
        return model.model_validate(row)
    except ValidationError as exc:
        raise DecodeError(f"Unexpected {model.__name__} record: {exc.errors()[0]['msg']}") from exc


def decode_rows(model: Type[M], rows: Any) -> List[M]:
    if not isinstance(rows, list):
        raise DecodeError(f"Expected a list of {model.__name__} records")
    return [decode_row(model, row) for row in rows]
