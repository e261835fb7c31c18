"""SQLite database setup via SQLModel."""

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlmodel import SQLModel, create_engine

from config import FILTER_DB_URL

engine = create_engine(FILTER_DB_URL, echo=False)


def create_db():
    database = make_url(FILTER_DB_URL).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    # Register the table on SQLModel.metadata before create_all.
    import filter_store  # noqa: F401

    SQLModel.metadata.create_all(engine)
