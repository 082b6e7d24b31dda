from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine, SQLModel


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo)
    connect_args = {"check_same_thread": False, "timeout": 30}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every checkout sees an empty database
        return create_engine(database_url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def init_db(engine: Engine):
    from . import models  # noqa
    SQLModel.metadata.create_all(engine)
