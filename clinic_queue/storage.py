# clinic_queue/storage.py

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, Column, DateTime, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from . import config

logger = logging.getLogger(__name__)


def utcnow():
    return datetime.now(timezone.utc)


def make_engine(url: str):
    # SQLite connections are shared across FastAPI's worker threads
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine(config.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Dependency: one database session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class AppState(Base):
    __tablename__ = "app_state"
    namespace = Column(String(100), primary_key=True, index=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class User(Base):
    __tablename__ = "users"
    username = Column(String(50), primary_key=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(100))
    role = Column(String(20), default="staff")  # 'admin', 'doctor', 'staff'
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)


class StateRepository:
    """Stores one JSON document per namespace in the app_state table."""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def load(self, namespace: str) -> Optional[Dict[str, Any]]:
        db = self.session_factory()
        try:
            row = db.query(AppState).filter(AppState.namespace == namespace).first()
            return json.loads(row.payload) if row else None
        finally:
            db.close()

    def save(self, namespace: str, blob: Dict[str, Any]):
        db = self.session_factory()
        try:
            row = db.query(AppState).filter(AppState.namespace == namespace).first()
            payload = json.dumps(blob)
            if row:
                row.payload = payload
            else:
                db.add(AppState(namespace=namespace, payload=payload))
            db.commit()
            logger.debug("Saved state namespace=%s (%d bytes)", namespace, len(payload))
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
