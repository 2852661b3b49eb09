"""
Tests for database.py - lookup history storage.
"""

import pytest
from sqlalchemy import inspect, create_engine

from profilefinder.database import LookupRecord, get_session, init_database, recent_lookups, record_lookup


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "data" / "lookups.db"
    init_database(path)
    return path


@pytest.fixture
def session(db_path):
    session = get_session(db_path)
    yield session
    session.close()


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_database_file(self, tmp_path):
        """init_database creates parent directories and the file."""
        path = tmp_path / "nested" / "lookups.db"
        assert not path.exists()

        init_database(path)

        assert path.exists()

    def test_init_creates_tables(self, db_path):
        engine = create_engine(f"sqlite:///{db_path}")
        assert "lookups" in inspect(engine).get_table_names()

    def test_init_is_idempotent(self, db_path):
        init_database(db_path)
        init_database(db_path)


class TestLookupRecords:
    """Test recording and listing lookups."""

    def test_record_found(self, session):
        record = record_lookup(
            session,
            name="Sam Schalkwijk",
            company="Acme",
            contact_id="42",
            profile_url="https://www.linkedin.com/in/sam-schalkwijk-22687b99/",
            provenance="RedirectDecoded",
        )

        assert record.id is not None
        assert record.success is True
        assert record.created_at is not None

    def test_record_miss(self, session):
        record = record_lookup(session, name="Peter Jansen", reason="no_verified_candidate")

        stored = session.query(LookupRecord).filter_by(id=record.id).one()
        assert stored.success is False
        assert stored.profile_url is None
        assert stored.reason == "no_verified_candidate"

    def test_recent_lookups_newest_first(self, session):
        for name in ("First Person", "Second Person", "Third Person"):
            record_lookup(session, name=name)

        records = recent_lookups(session, limit=2)

        assert [r.name for r in records] == ["Third Person", "Second Person"]

    def test_recent_lookups_empty(self, session):
        assert recent_lookups(session) == []
