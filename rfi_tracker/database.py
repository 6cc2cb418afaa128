from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

import rfi_tracker.models.user  # noqa
import rfi_tracker.models.project  # noqa
import rfi_tracker.models.rfi  # noqa


def make_engine(database_url: str, echo: bool = False):
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(database_url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
        return create_engine(database_url, echo=echo, connect_args=connect_args)
    return create_engine(database_url, echo=echo)


def create_db_and_tables(engine):
    SQLModel.metadata.create_all(engine)
