from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

CONNECT_TIMEOUT_SECONDS = 5


class Base(DeclarativeBase):
    pass


def make_engine(database_url: str) -> Engine:
    connect_args = {}
    kwargs = {}
    if database_url.startswith("sqlite"):
        # request handlers run in a threadpool
        connect_args = {"check_same_thread": False}
    else:
        connect_args = {"connect_timeout": CONNECT_TIMEOUT_SECONDS}
        kwargs["isolation_level"] = "READ COMMITTED"

    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=connect_args,
        **kwargs,
    )


def make_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(engine: Engine):
    # Import models so metadata is registered
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
