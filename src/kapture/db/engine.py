"""SQLModel engine construction for the local entry database."""
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from kapture.db.migrations import run_migrations


def build_engine(database_url: str, **kwargs) -> Engine:
    """Create the engine, create missing tables and apply migrations.

    Called once by the composition root; the engine is then handed to each
    store explicitly.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False  # stores lock their own writes
    engine = create_engine(database_url, connect_args=connect_args, **kwargs)

    # Import all models so metadata is populated before create_all
    from kapture.models.entry import Entry  # noqa
    from kapture.models.preference import DestinationPreference  # noqa
    from kapture.models.sync import SyncLog  # noqa
    SQLModel.metadata.create_all(engine)
    run_migrations(engine)
    return engine
