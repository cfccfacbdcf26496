from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from library_seats.config import DATABASE_URL


def make_engine(url = DATABASE_URL, **kwargs):
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, **kwargs)


engine = make_engine()

SessionLocal = sessionmaker(autocommit = False, autoflush = False, bind = engine)

Base = declarative_base()


def init_db(bind = engine):
    # registers the tables on Base.metadata
    from library_seats import db_models  # noqa: F401

    Base.metadata.create_all(bind = bind)
