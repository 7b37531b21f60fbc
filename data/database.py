from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config.defaults import DATABASE_URL

Base = declarative_base()


def create_db_engine(url: str = DATABASE_URL):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


def create_session_factory(engine):
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
