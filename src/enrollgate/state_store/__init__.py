"""State Store - SQLAlchemy persistence for catalog data and enrollments."""

from enrollgate.state_store.database import Database
from enrollgate.state_store.models import (
    Course,
    CourseTimeSlot,
    Enrollment,
    Institution,
    InstitutionPolicy,
    Prerequisite,
    Student,
)
from enrollgate.state_store.repository import SqlRepository, SqlTransaction
from enrollgate.state_store.store import CatalogStore

__all__ = [
    "CatalogStore",
    "Course",
    "CourseTimeSlot",
    "Database",
    "Enrollment",
    "Institution",
    "InstitutionPolicy",
    "Prerequisite",
    "SqlRepository",
    "SqlTransaction",
    "Student",
]
