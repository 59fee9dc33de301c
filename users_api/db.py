# users_api/db.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# In-memory only: a single shared connection, otherwise every pooled
# connection would see its own empty database.
MEMORY_URL = "sqlite://"

Base = declarative_base()


def make_engine(url: str = MEMORY_URL) -> Engine:
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    # Records leave the repository detached, so keep their loaded state.
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )
