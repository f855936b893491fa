from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from civic_triage.config import DATABASE_URL

# Default remains the lightweight local sqlite DB; override via DATABASE_URL.
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

class Base(DeclarativeBase):
	pass
