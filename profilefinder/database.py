"""
Lookup history storage.

Uses SQLite with SQLAlchemy to keep one row per resolution request.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from sqlalchemy import Boolean, Column, DateTime, Integer, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class LookupRecord(Base):
    """Outcome of one profile lookup."""

    __tablename__ = "lookups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contact_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=False)
    company = Column(String, nullable=True)
    profile_url = Column(String, nullable=True)
    success = Column(Boolean, nullable=False, default=False)
    reason = Column(String, nullable=True)  # no_candidates, blocked_by_challenge, quota_exceeded, ...
    provenance = Column(String, nullable=True)  # DirectLink, RedirectDecoded, ...
    created_at = Column(DateTime, nullable=False, default=datetime.now)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()


def record_lookup(
    session,
    name: str,
    company: Optional[str] = None,
    contact_id: Optional[str] = None,
    profile_url: Optional[str] = None,
    reason: Optional[str] = None,
    provenance: Optional[str] = None,
) -> LookupRecord:
    record = LookupRecord(
        contact_id=contact_id,
        name=name,
        company=company,
        profile_url=profile_url,
        success=profile_url is not None,
        reason=reason,
        provenance=provenance,
    )
    session.add(record)
    session.commit()
    return record


def recent_lookups(session, limit: int = 20) -> List[LookupRecord]:
    return (
        session.query(LookupRecord)
        .order_by(LookupRecord.created_at.desc(), LookupRecord.id.desc())
        .limit(limit)
        .all()
    )
