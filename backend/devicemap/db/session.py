from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from ..core.config import settings

def make_engine(uri: str):
    return create_engine(uri, connect_args={"check_same_thread": False} if uri.startswith("sqlite") else {})

engine = make_engine(settings.DB_URI)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

class Base(DeclarativeBase): pass

def init_db(bind=None):
    from ..models import user, city, device  # noqa
    Base.metadata.create_all(bind=bind or engine)
