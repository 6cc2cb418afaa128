"""
Self-hosted stand-in for the hosted backend, stored with SQLModel.

Mirrors the hosted service closely enough for local development: password
accounts, a bearer session, and row ownership on `projects` and `rfis`.
"""

import logging
import uuid
from typing import Dict, List, Optional, Sequence, Type

from pydantic import ValidationError
from sqlmodel import Session, SQLModel, select

from rfi_tracker.backend.base import BackendError, Filters, Row
from rfi_tracker.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from rfi_tracker.database import create_db_and_tables, make_engine
from rfi_tracker.models.project import Project
from rfi_tracker.models.rfi import RFI
from rfi_tracker.models.user import AuthAccount, UserProfile
from rfi_tracker.schemas.rfi import RFIStatus

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

TABLE_MODELS: Dict[str, Type[SQLModel]] = {
    "projects": Project,
    "rfis": RFI,
    "users": UserProfile,
}
OWNED_TABLES = ("projects", "rfis")
STATUSES = {s.value for s in RFIStatus}


class LocalBackend:
    def __init__(self, engine, secret_key: str):
        self.engine = engine
        self.secret_key = secret_key
        self.access_token: Optional[str] = None
        create_db_and_tables(engine)

    @classmethod
    def from_settings(cls, settings) -> "LocalBackend":
        return cls(make_engine(settings.database_url, echo=settings.sql_echo), settings.secret_key)

    # Auth

    def _session_for(self, account: AuthAccount) -> Row:
        self.access_token = create_access_token({"sub": account.id}, self.secret_key)
        return {"id": account.id, "email": account.email}

    def sign_up(self, email: str, password: str) -> Row:
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise BackendError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters", 422)
        with Session(self.engine) as session:
            if session.exec(select(AuthAccount).where(AuthAccount.email == email)).first():
                raise BackendError("User already registered", 422)
            account = AuthAccount(
                id=str(uuid.uuid4()),
                email=email,
                password_hash=get_password_hash(password),
            )
            session.add(account)
            session.commit()
            session.refresh(account)
            logger.info("Registered account %s", account.id)
            return self._session_for(account)

    def sign_in(self, email: str, password: str) -> Row:
        with Session(self.engine) as session:
            account = session.exec(select(AuthAccount).where(AuthAccount.email == email)).first()
            if not account or not verify_password(password, account.password_hash):
                raise BackendError("Invalid login credentials", 400)
            return self._session_for(account)

    def sign_out(self) -> None:
        self.access_token = None

    def _current_account_id(self) -> Optional[str]:
        if self.access_token is None:
            return None
        return decode_access_token(self.access_token, self.secret_key)

    def get_user(self) -> Optional[Row]:
        account_id = self._current_account_id()
        if account_id is None:
            return None
        with Session(self.engine) as session:
            account = session.get(AuthAccount, account_id)
            if account is None:
                return None
            return {"id": account.id, "email": account.email}

    # Tables

    def _require_user(self) -> str:
        account_id = self._current_account_id()
        if account_id is None:
            raise BackendError("JWT required", 401)
        return account_id

    def _model(self, table: str) -> Type[SQLModel]:
        model = TABLE_MODELS.get(table)
        if model is None:
            raise BackendError(f"Unknown table: {table}", 404)
        return model

    def _check_columns(self, model: Type[SQLModel], row: Row) -> None:
        unknown = set(row) - set(model.model_fields)
        if unknown:
            raise BackendError(f"Unknown column(s): {', '.join(sorted(unknown))}", 400)
        if model is RFI and "status" in row and row["status"] not in STATUSES:
            raise BackendError(f"Invalid status: {row['status']}", 400)

    def _query(self, table: str, filters: Optional[Filters], user_id: str):
        model = self._model(table)
        statement = select(model)
        for column, value in (filters or {}).items():
            if column not in model.model_fields:
                raise BackendError(f"Unknown column: {column}", 400)
            statement = statement.where(getattr(model, column) == value)
        if table in OWNED_TABLES:
            statement = statement.where(model.created_by == user_id)
        elif table == "users":
            statement = statement.where(model.id == user_id)
        return statement.order_by(model.id)

    def select(self, table: str, filters: Optional[Filters] = None) -> List[Row]:
        user_id = self._require_user()
        with Session(self.engine) as session:
            return [obj.model_dump() for obj in session.exec(self._query(table, filters, user_id)).all()]

    def insert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        user_id = self._require_user()
        model = self._model(table)
        objects = []
        for row in rows:
            self._check_columns(model, row)
            owner = row.get("created_by") if table in OWNED_TABLES else row.get("id")
            if owner != user_id:
                raise BackendError(f'new row violates row-level security policy for table "{table}"', 403)
            try:
                objects.append(model.model_validate(row))
            except ValidationError as exc:
                raise BackendError(str(exc), 400) from exc
        with Session(self.engine) as session:
            if table == "rfis":
                for obj in objects:
                    project = session.get(Project, obj.project_id)
                    if project is None or project.created_by != user_id:
                        raise BackendError("insert or update on table \"rfis\" violates foreign key constraint", 409)
            session.add_all(objects)
            session.commit()
            for obj in objects:
                session.refresh(obj)
            return [obj.model_dump() for obj in objects]

    def update(self, table: str, filters: Filters, patch: Row) -> List[Row]:
        user_id = self._require_user()
        if not filters:
            raise BackendError("Refusing to change rows without a filter", 400)
        self._check_columns(self._model(table), patch)
        with Session(self.engine) as session:
            matched = session.exec(self._query(table, filters, user_id)).all()
            for obj in matched:
                for key, value in patch.items():
                    setattr(obj, key, value)
                session.add(obj)
            session.commit()
            for obj in matched:
                session.refresh(obj)
            return [obj.model_dump() for obj in matched]

    def delete(self, table: str, filters: Filters) -> None:
        user_id = self._require_user()
        if not filters:
            raise BackendError("Refusing to change rows without a filter", 400)
        with Session(self.engine) as session:
            for obj in session.exec(self._query(table, filters, user_id)).all():
                session.delete(obj)
            session.commit()

    def close(self) -> None:
        self.engine.dispose()
