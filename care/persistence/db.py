from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session, declarative_base

from config import settings


def make_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def make_session_factory(engine):
    return scoped_session(sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True))


engine = make_engine(settings.DB_URL)
SessionLocal = make_session_factory(engine)
Base = declarative_base()
