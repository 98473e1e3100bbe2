"""Integration tests for State Store database."""

import tempfile
from pathlib import Path

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError

from enrollgate.state_store.database import Database
from enrollgate.state_store.models import (
    Course,
    Enrollment,
    Institution,
    Prerequisite,
    Student,
)


@pytest.fixture
def temp_db_path() -> str:
    """Create a temporary database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        return f.name


@pytest.fixture
def database(temp_db_path: str) -> Database:
    """Create a database instance with tables."""
    db = Database(temp_db_path)
    db.create_tables()
    yield db
    db.close()
    # Cleanup
    Path(temp_db_path).unlink(missing_ok=True)
    Path(f"{temp_db_path}-wal").unlink(missing_ok=True)
    Path(f"{temp_db_path}-shm").unlink(missing_ok=True)


@pytest.fixture
def seeded(database: Database) -> dict[str, str]:
    """One institution, student and course."""
    session = database.get_session()
    institution = Institution(name="North", id="inst")
    session.add(institution)
    session.flush()
    session.add(Student(institution_id="inst", name="Ada", id="s1"))
    session.add(Course(institution_id="inst", code="CS101", name="Intro", credits=3, id="c1"))
    session.add(Course(institution_id="inst", code="CS201", name="Data", credits=3, id="c2"))
    session.commit()
    session.close()
    return {"institution": "inst", "student": "s1", "course": "c1"}


@pytest.mark.integration
class TestDatabaseSetup:
    """Tests for database setup."""

    def test_database_creates_file(self, temp_db_path: str) -> None:
        """SQLite file created at specified path."""
        db = Database(temp_db_path)
        db.create_tables()
        assert Path(temp_db_path).exists()
        db.close()

    def test_database_creates_tables(self, database: Database) -> None:
        inspector = inspect(database.engine)
        assert set(inspector.get_table_names()) == {
            "institutions",
            "institution_policies",
            "students",
            "courses",
            "time_slots",
            "prerequisites",
            "enrollments",
        }

    def test_database_wal_mode(self, database: Database) -> None:
        """WAL mode is enabled."""
        assert database.is_wal_mode()

    def test_database_foreign_keys_enabled(self, database: Database) -> None:
        with database.engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_create_tables_is_repeatable(self, database: Database) -> None:
        database.create_tables()
        assert len(inspect(database.engine).get_table_names()) == 7

    def test_in_memory_database(self) -> None:
        db = Database(":memory:")
        db.create_tables()

        session = db.get_session()
        session.add(Institution(name="Test"))
        session.commit()
        assert len(session.query(Institution).all()) == 1

        session.close()
        db.close()


@pytest.mark.integration
class TestWriteSessions:
    """Tests for write-locking sessions."""

    def test_write_session_holds_lock_from_first_statement(self, database: Database) -> None:
        """A second writer cannot start while the first holds BEGIN IMMEDIATE."""
        blocked = Database(database.db_path, busy_timeout=0.1)
        first = database.get_session(write=True)
        second = blocked.get_session(write=True)
        try:
            first.execute(text("SELECT 1"))
            with pytest.raises(Exception, match="locked"):
                second.execute(text("SELECT 1"))
        finally:
            first.close()
            second.close()
            blocked.close()

    def test_read_sessions_do_not_block_each_other(self, database: Database) -> None:
        first = database.get_session()
        second = database.get_session()
        try:
            first.execute(text("SELECT 1"))
            assert second.execute(text("SELECT 1")).scalar() == 1
        finally:
            first.close()
            second.close()


@pytest.mark.integration
class TestConstraints:
    """Tests for schema-level invariants."""

    def test_one_active_enrollment_per_student_and_course(
        self, database: Database, seeded: dict[str, str]
    ) -> None:
        session = database.get_session()
        session.add(Enrollment(student_id="s1", course_id="c1"))
        session.commit()

        session.add(Enrollment(student_id="s1", course_id="c1"))
        with pytest.raises(IntegrityError):
            session.commit()
        session.close()

    def test_inactive_enrollments_do_not_block_retake(
        self, database: Database, seeded: dict[str, str]
    ) -> None:
        session = database.get_session()
        session.add(Enrollment(student_id="s1", course_id="c1", status="withdrawn"))
        session.add(Enrollment(student_id="s1", course_id="c1", status="completed"))
        session.add(Enrollment(student_id="s1", course_id="c1"))
        session.commit()

        assert session.query(Enrollment).count() == 3
        session.close()

    def test_self_prerequisite_rejected(self, database: Database, seeded: dict[str, str]) -> None:
        session = database.get_session()
        session.add(Prerequisite(course_id="c1", prerequisite_id="c1"))
        with pytest.raises(IntegrityError):
            session.commit()
        session.close()

    def test_credit_range_enforced(self, database: Database, seeded: dict[str, str]) -> None:
        session = database.get_session()
        session.add(Course(institution_id="inst", code="BIG", name="Big", credits=7))
        with pytest.raises(IntegrityError):
            session.commit()
        session.close()

    def test_student_requires_institution(self, database: Database) -> None:
        session = database.get_session()
        session.add(Student(institution_id="nowhere", name="Ghost"))
        with pytest.raises(IntegrityError):
            session.commit()
        session.close()
