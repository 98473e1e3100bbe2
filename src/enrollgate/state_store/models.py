"""SQLAlchemy models for the State Store."""

from __future__ import annotations

import uuid
from datetime import datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)

from enrollgate.policy import Policy
from enrollgate.repository import (
    CourseRecord,
    EnrollmentRecord,
    EnrollmentStatus,
    PrerequisiteEdge,
    StudentRecord,
)
from enrollgate.timemodel import DayOfWeek, TimeSlot

ACTIVE_ONLY = text("status = 'active'")


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Institution(Base):
    """Institution model - owns students, courses and a policy."""

    __tablename__ = "institutions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    # Relationships
    policy: Mapped[InstitutionPolicy | None] = relationship(
        "InstitutionPolicy", back_populates="institution", cascade="all, delete-orphan"
    )

    def __init__(self, name: str, id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name

    def __repr__(self) -> str:
        return f"<Institution(id={self.id!r}, name={self.name!r})>"


class InstitutionPolicy(Base):
    """Policy model - explicit enrollment limits of one institution."""

    __tablename__ = "institution_policies"
    __table_args__ = (
        CheckConstraint("credit_hour_cap BETWEEN 1 AND 30", name="ck_policy_credit_hour_cap"),
        CheckConstraint("daily_hour_cap BETWEEN 0 AND 16", name="ck_policy_daily_hour_cap"),
        CheckConstraint("buffer_minutes BETWEEN 0 AND 60", name="ck_policy_buffer_minutes"),
        CheckConstraint("course_count_cap BETWEEN 1 AND 10", name="ck_policy_course_count_cap"),
    )

    institution_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("institutions.id"), primary_key=True
    )
    credit_hour_cap: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_hour_cap: Mapped[int] = mapped_column(Integer, nullable=False)
    buffer_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    course_count_cap: Mapped[int] = mapped_column(Integer, nullable=False)
    allow_overnight_classes: Mapped[bool] = mapped_column(Boolean, nullable=False)
    allow_weekend_classes: Mapped[bool] = mapped_column(Boolean, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    institution: Mapped[Institution] = relationship("Institution", back_populates="policy")

    def __init__(self, institution_id: str, policy: Policy, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.institution_id = institution_id
        self.apply(policy)

    def apply(self, policy: Policy) -> None:
        """Copy every limit from a Policy value."""
        self.credit_hour_cap = policy.credit_hour_cap
        self.daily_hour_cap = policy.daily_hour_cap
        self.buffer_minutes = policy.buffer_minutes
        self.course_count_cap = policy.course_count_cap
        self.allow_overnight_classes = policy.allow_overnight_classes
        self.allow_weekend_classes = policy.allow_weekend_classes

    def to_policy(self) -> Policy:
        return Policy(
            credit_hour_cap=self.credit_hour_cap,
            daily_hour_cap=self.daily_hour_cap,
            buffer_minutes=self.buffer_minutes,
            course_count_cap=self.course_count_cap,
            allow_overnight_classes=self.allow_overnight_classes,
            allow_weekend_classes=self.allow_weekend_classes,
        )

    def __repr__(self) -> str:
        return f"<InstitutionPolicy(institution_id={self.institution_id!r})>"


class Student(Base):
    """Student model - institution is fixed at creation."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    institution_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("institutions.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __init__(
        self, institution_id: str, name: str, id: str | None = None, **kwargs: Any
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.institution_id = institution_id
        self.name = name

    def to_record(self) -> StudentRecord:
        return StudentRecord(id=self.id, institution_id=self.institution_id, name=self.name)

    def __repr__(self) -> str:
        return f"<Student(id={self.id!r}, name={self.name!r})>"


class Course(Base):
    """Course model - credit weight, seat capacity and weekly slots."""

    __tablename__ = "courses"
    __table_args__ = (
        UniqueConstraint("institution_id", "code", name="uq_courses_institution_code"),
        CheckConstraint("credits BETWEEN 1 AND 6", name="ck_courses_credits"),
        CheckConstraint(
            "capacity IS NULL OR capacity BETWEEN 1 AND 200", name="ck_courses_capacity"
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    institution_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("institutions.id"), nullable=False
    )
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    # Relationships
    slots: Mapped[list[CourseTimeSlot]] = relationship(
        "CourseTimeSlot", back_populates="course", cascade="all, delete-orphan"
    )

    def __init__(
        self,
        institution_id: str,
        code: str,
        name: str,
        credits: int,
        capacity: int | None = None,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.institution_id = institution_id
        self.code = code
        self.name = name
        self.credits = credits
        self.capacity = capacity

    def to_record(self) -> CourseRecord:
        return CourseRecord(
            id=self.id,
            institution_id=self.institution_id,
            credits=self.credits,
            capacity=self.capacity,
            code=self.code,
            name=self.name,
        )

    def __repr__(self) -> str:
        return f"<Course(id={self.id!r}, code={self.code!r}, capacity={self.capacity!r})>"


class CourseTimeSlot(Base):
    """Time slot model - one weekly meeting of a course."""

    __tablename__ = "time_slots"
    __table_args__ = (
        UniqueConstraint(
            "course_id", "day", "start_minute", "end_minute", name="uq_time_slots_course_time"
        ),
        CheckConstraint("start_minute BETWEEN 0 AND 1439", name="ck_time_slots_start"),
        CheckConstraint("end_minute BETWEEN 0 AND 1439", name="ck_time_slots_end"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    day: Mapped[str] = mapped_column(String(10), nullable=False)
    start_minute: Mapped[int] = mapped_column(Integer, nullable=False)
    end_minute: Mapped[int] = mapped_column(Integer, nullable=False)
    overnight: Mapped[bool] = mapped_column(Boolean, nullable=False)

    # Relationships
    course: Mapped[Course] = relationship("Course", back_populates="slots")

    def __init__(self, slot: TimeSlot, id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.course_id = slot.course_id
        self.day = slot.day.value
        self.start_minute = slot.start
        self.end_minute = slot.end
        self.overnight = slot.overnight

    def to_slot(self) -> TimeSlot:
        return TimeSlot(
            course_id=self.course_id,
            day=DayOfWeek(self.day),
            start=self.start_minute,
            end=self.end_minute,
            overnight=self.overnight,
            id=self.id,
        )

    def __repr__(self) -> str:
        return f"<CourseTimeSlot(id={self.id!r}, course_id={self.course_id!r}, day={self.day!r})>"


class Prerequisite(Base):
    """Prerequisite model - `course_id` requires `prerequisite_id`."""

    __tablename__ = "prerequisites"
    __table_args__ = (
        UniqueConstraint("course_id", "prerequisite_id", name="uq_prerequisites_edge"),
        CheckConstraint("course_id != prerequisite_id", name="ck_prerequisites_not_self"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    prerequisite_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id"), nullable=False
    )
    is_mandatory: Mapped[bool] = mapped_column(Boolean, nullable=False)
    minimum_grade: Mapped[str | None] = mapped_column(String(5), nullable=True)
    # Insertion order within the dependent course
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __init__(
        self,
        course_id: str,
        prerequisite_id: str,
        is_mandatory: bool = True,
        minimum_grade: str | None = None,
        position: int = 0,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.course_id = course_id
        self.prerequisite_id = prerequisite_id
        self.is_mandatory = is_mandatory
        self.minimum_grade = minimum_grade
        self.position = position

    def to_edge(self) -> PrerequisiteEdge:
        return PrerequisiteEdge(
            course_id=self.course_id,
            prerequisite_id=self.prerequisite_id,
            is_mandatory=self.is_mandatory,
            minimum_grade=self.minimum_grade,
        )

    def __repr__(self) -> str:
        return (
            f"<Prerequisite(course_id={self.course_id!r}, "
            f"prerequisite_id={self.prerequisite_id!r})>"
        )


class Enrollment(Base):
    """Enrollment model - records are never deleted, only moved out of active."""

    __tablename__ = "enrollments"
    __table_args__ = (
        Index(
            "uq_enrollments_active_student_course",
            "student_id",
            "course_id",
            unique=True,
            sqlite_where=ACTIVE_ONLY,
            postgresql_where=ACTIVE_ONLY,
        ),
        Index("ix_enrollments_course_status", "course_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("students.id"), nullable=False)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    grade: Mapped[str | None] = mapped_column(String(5), nullable=True)
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def __init__(
        self,
        student_id: str,
        course_id: str,
        id: str | None = None,
        status: str | None = None,
        grade: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.student_id = student_id
        self.course_id = course_id
        self.status = status if status is not None else EnrollmentStatus.ACTIVE.value
        self.grade = grade

    @property
    def enrollment_status(self) -> EnrollmentStatus:
        """Get status as EnrollmentStatus enum."""
        return EnrollmentStatus(self.status)

    def to_record(self) -> EnrollmentRecord:
        return EnrollmentRecord(
            id=self.id,
            student_id=self.student_id,
            course_id=self.course_id,
            status=self.enrollment_status,
            grade=self.grade,
            enrolled_at=self.enrolled_at,
            completed_at=self.completed_at,
        )

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id!r}, student_id={self.student_id!r}, "
            f"course_id={self.course_id!r}, status={self.status!r})>"
        )
