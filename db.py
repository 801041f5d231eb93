import os
from datetime import datetime
from pathlib import Path

from sqlalchemy import DateTime, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker


# Default DB path: ./data/symptom_triage.db (create dir if missing)
DATABASE_DIR = Path(__file__).resolve().parent / "data"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATABASE_DIR / 'symptom_triage.db'}")


class Base(DeclarativeBase):
    pass


class SymptomCheck(Base):
    __tablename__ = "symptom_checks"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    symptoms_json: Mapped[str] = mapped_column(Text, nullable=False)  # JSON string, wire keys
    analysis_json: Mapped[str] = mapped_column(Text, nullable=False)  # JSON string, wire keys
    risk_level: Mapped[str] = mapped_column(Text, nullable=False)
    urgency: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


# Engine and session factory
_engine = None
_SessionLocal = None


def get_engine():
    global _engine
    if _engine is None:
        if DATABASE_URL.startswith("sqlite:///") and ":memory:" not in DATABASE_URL:
            Path(DATABASE_URL[len("sqlite:///") :]).parent.mkdir(parents=True, exist_ok=True)
        _engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False} if "sqlite" in DATABASE_URL else {})
    return _engine


def get_session_factory():
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def init_db() -> None:
    """Create all tables. No migrations."""
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
