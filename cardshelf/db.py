from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from urllib.parse import quote_plus
from .config import LOGGER, Settings, settings


def database_url(conf: Settings) -> str:
    if conf.use_sqlite:
        return f"sqlite:///{conf.sqlite_path}"
    # URL encode password to handle special characters like @
    password = quote_plus(conf.mysql_password)
    return (
        f"mysql+pymysql://{conf.mysql_user}:{password}"
        f"@{conf.mysql_host}:{conf.mysql_port}/{conf.mysql_db}?charset=utf8mb4"
    )


def make_engine(conf: Settings) -> Engine:
    url = database_url(conf)
    if conf.use_sqlite:
        # sessions are handed between FastAPI's worker threads
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True, pool_recycle=3600)


engine = make_engine(settings)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def init_db(bind=None):
    """Create the cards table if it does not exist yet."""
    # models must be imported so their tables are registered on Base
    from . import models  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    LOGGER.debug(f"Tables ready on {bind.url.render_as_string(hide_password=True)}")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
