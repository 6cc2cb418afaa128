# create_tables.py
from rfi_tracker.core.config import get_settings
from rfi_tracker.database import make_engine, create_db_and_tables


if __name__ == "__main__":
    settings = get_settings()
    create_db_and_tables(make_engine(settings.database_url, echo=settings.sql_echo))
