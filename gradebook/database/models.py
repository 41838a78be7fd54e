"""
SQLAlchemy ORM models for persistence

Models:
- GroupDB: Teaching groups (subject + semester)
- StudentDB: Students, enrolled in one or more groups
- PeriodRecordDB: Raw records of a group for one partial (p1/p2/p3)
- StudentObservationDB: Behavioral observations of a student
"""
from sqlalchemy import Boolean, Column, String, Text, ForeignKey, JSON, Table, Index, CheckConstraint, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator

from .base import Base, BaseModel


class JSONBCompatible(TypeDecorator):
    """
    A JSON type that uses JSONB on PostgreSQL and JSON on other databases (e.g., SQLite).
    This allows tests to run with SQLite while production uses PostgreSQL with JSONB.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())


group_students = Table(
    "group_students",
    Base.metadata,
    Column("group_id", String(36), ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", String(36), ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
)


class StudentDB(Base, BaseModel):
    """Database model for students"""

    __tablename__ = "students"

    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    tutor_name = Column(String(200), nullable=True)
    tutor_phone = Column(String(50), nullable=True)

    groups = relationship("GroupDB", secondary=group_students, back_populates="students")
    observations = relationship(
        "StudentObservationDB",
        back_populates="student",
        cascade="all, delete-orphan",
        order_by="StudentObservationDB.date",
    )


class GroupDB(Base, BaseModel):
    """Database model for teaching groups"""

    __tablename__ = "groups"

    subject = Column(String(200), nullable=False)
    semester = Column(String(50), nullable=True)
    group_name = Column(String(100), nullable=True)
    facilitator = Column(String(200), nullable=True)

    students = relationship(
        "StudentDB",
        secondary=group_students,
        back_populates="groups",
        order_by="StudentDB.name",
    )
    period_records = relationship(
        "PeriodRecordDB",
        back_populates="group",
        cascade="all, delete-orphan",
    )


class PeriodRecordDB(Base, BaseModel):
    """
    Raw records of one group in one partial.

    Each section of the bundle is a JSON column; the grade engine reads them
    through PeriodRecordBundle and never writes back.
    """

    __tablename__ = "period_records"

    group_id = Column(String(36), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    partial_id = Column(String(2), nullable=False)

    criteria = Column(JSONBCompatible, default=list, nullable=False)
    grades = Column(JSONBCompatible, default=dict, nullable=False)
    attendance = Column(JSONBCompatible, default=dict, nullable=False)
    participations = Column(JSONBCompatible, default=dict, nullable=False)
    activities = Column(JSONBCompatible, default=list, nullable=False)
    activity_records = Column(JSONBCompatible, default=dict, nullable=False)
    recovery_grades = Column(JSONBCompatible, default=dict, nullable=False)
    feedbacks = Column(JSONBCompatible, default=dict, nullable=False)
    group_analysis = Column(Text, nullable=True)

    group = relationship("GroupDB", back_populates="period_records")

    __table_args__ = (
        UniqueConstraint('group_id', 'partial_id', name='uq_period_record_group_partial'),
        Index('idx_period_record_partial', 'partial_id'),
        CheckConstraint(
            "partial_id IN ('p1', 'p2', 'p3')",
            name='ck_period_record_partial_valid'
        ),
    )

    def to_dict(self) -> dict:
        return {
            "criteria": self.criteria or [],
            "grades": self.grades or {},
            "attendance": self.attendance or {},
            "participations": self.participations or {},
            "activities": self.activities or [],
            "activity_records": self.activity_records or {},
            "recovery_grades": self.recovery_grades or {},
            "feedbacks": self.feedbacks or {},
            "group_analysis": self.group_analysis,
        }


class StudentObservationDB(Base, BaseModel):
    """Behavioral observation of a student, with its follow-up log"""

    __tablename__ = "student_observations"

    student_id = Column(String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    partial_id = Column(String(2), nullable=False)
    date = Column(String(40), nullable=False)
    type = Column(String(100), nullable=False)
    details = Column(Text, nullable=False, default="")
    requires_canalization = Column(Boolean, nullable=False, default=False)
    canalization_target = Column(String(100), nullable=True)
    requires_follow_up = Column(Boolean, nullable=False, default=False)
    follow_up_updates = Column(JSONBCompatible, default=list, nullable=False)
    is_closed = Column(Boolean, nullable=False, default=False)

    student = relationship("StudentDB", back_populates="observations")

    __table_args__ = (
        CheckConstraint(
            "partial_id IN ('p1', 'p2', 'p3')",
            name='ck_observation_partial_valid'
        ),
    )
