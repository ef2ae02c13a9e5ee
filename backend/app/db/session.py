from sqlmodel import SQLModel, create_engine
from sqlalchemy.engine import Engine

from backend.app.core.config import settings

database_url = settings.DATABASE_URL

connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
engine = create_engine(database_url, connect_args=connect_args)

def create_db_and_tables():
    SQLModel.metadata.create_all(engine)

def get_engine() -> Engine:
    return engine
