# storefront/database.py
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from storefront.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Durable local storage (SQLite file next to the storefront)
#
# - check_same_thread=False: FastAPI runs sync handlers in a threadpool,
#   so the connection may be used from a different thread than the one
#   that opened it.
# ---------------------------------------------------------

db_url = settings.LOCAL_STORAGE_URL

connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}

engine = create_engine(
    db_url,
    echo=False,        # set to True if you want to debug SQL queries
    connect_args=connect_args,
)


def create_db_and_tables(bind: Engine | None = None) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    # Import models so SQLModel metadata is populated before create_all()
    from storefront.models import local_storage as _local_storage_models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)

