"""
Repository pattern for database operations

Provides:
- StudentRepository: Manage students
- GroupRepository: Manage groups and their enrolment
- PeriodRecordRepository: Load/save the raw records of a (group, partial)
- ObservationRepository: Behavioral observations and their follow-up

The grade engine never talks to these classes: callers load a
PeriodRecordBundle here and pass it to the engine as a plain argument.

TRANSACTION MANAGEMENT:
----------------------
Every write method commits immediately. On failure it rolls back, logs the
error with context and re-raises.
"""
import copy
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Union
from uuid import uuid4

from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.attributes import flag_modified

from ..core.constants import utc_now
from ..models.criterion import Criterion
from ..models.observation import StudentObservation
from ..models.period import PARTIALS, Activity, PartialId, PeriodRecordBundle
from .models import GroupDB, StudentDB, PeriodRecordDB, StudentObservationDB

logger = logging.getLogger(__name__)

PartialLike = Union[PartialId, str]


def _partial_value(partial_id: PartialLike) -> str:
    """
    Normaliza un identificador de parcial.

    Raises:
        ValueError: Si no es p1, p2 ni p3
    """
    return PartialId(partial_id).value


class StudentRepository:
    """Repository for student operations"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def create(
        self,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        tutor_name: Optional[str] = None,
        tutor_phone: Optional[str] = None,
        student_id: Optional[str] = None,
    ) -> StudentDB:
        """
        Create a new student.

        Raises:
            Exception: Re-raises after rollback if creation fails
        """
        try:
            student = StudentDB(
                id=student_id or str(uuid4()),
                name=name,
                email=email,
                phone=phone,
                tutor_name=tutor_name,
                tutor_phone=tutor_phone,
            )
            self.db.add(student)
            self.db.commit()
            self.db.refresh(student)
            return student
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create student: {e}", extra={"student_id": student_id}, exc_info=True)
            raise

    def get_by_id(self, student_id: str) -> Optional[StudentDB]:
        return self.db.query(StudentDB).filter(StudentDB.id == student_id).first()

    def get_all(self, limit: int = 500, offset: int = 0) -> List[StudentDB]:
        return self.db.query(StudentDB).order_by(StudentDB.name).limit(limit).offset(offset).all()


class GroupRepository:
    """Repository for group operations"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def create(
        self,
        subject: str,
        semester: Optional[str] = None,
        group_name: Optional[str] = None,
        facilitator: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> GroupDB:
        """
        Create a new group.

        Raises:
            Exception: Re-raises after rollback if creation fails
        """
        try:
            group = GroupDB(
                id=group_id or str(uuid4()),
                subject=subject,
                semester=semester,
                group_name=group_name,
                facilitator=facilitator,
            )
            self.db.add(group)
            self.db.commit()
            self.db.refresh(group)
            return group
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create group: {e}", extra={"subject": subject}, exc_info=True)
            raise

    def get_by_id(self, group_id: str, load_students: bool = True) -> Optional[GroupDB]:
        query = self.db.query(GroupDB).filter(GroupDB.id == group_id)
        if load_students:
            # Eager loading para evitar N+1 al recorrer group.students
            query = query.options(selectinload(GroupDB.students))
        return query.first()

    def get_all(self) -> List[GroupDB]:
        return (
            self.db.query(GroupDB)
            .options(selectinload(GroupDB.students))
            .order_by(GroupDB.subject)
            .all()
        )

    def get_by_student(self, student_id: str) -> List[GroupDB]:
        return (
            self.db.query(GroupDB)
            .filter(GroupDB.students.any(StudentDB.id == student_id))
            .options(selectinload(GroupDB.students))
            .order_by(GroupDB.subject)
            .all()
        )

    def exists(self, group_id: str) -> bool:
        from sqlalchemy import exists
        return self.db.query(
            exists().where(GroupDB.id == group_id)
        ).scalar()

    def add_student(self, group_id: str, student_id: str) -> bool:
        """
        Enrol a student in a group.

        Returns:
            True if enrolled (or already enrolled), False if group or student not found
        """
        try:
            group = self.get_by_id(group_id)
            student = self.db.query(StudentDB).filter(StudentDB.id == student_id).first()
            if not group or not student:
                return False
            if student not in group.students:
                group.students.append(student)
                self.db.commit()
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to enrol student: {e}",
                extra={"group_id": group_id, "student_id": student_id},
                exc_info=True
            )
            raise

    def remove_student(self, group_id: str, student_id: str) -> bool:
        try:
            group = self.get_by_id(group_id)
            if not group:
                return False
            student = next((s for s in group.students if s.id == student_id), None)
            if student is None:
                return False
            group.students.remove(student)
            self.db.commit()
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to remove student from group: {e}",
                extra={"group_id": group_id, "student_id": student_id},
                exc_info=True
            )
            raise

    def delete(self, group_id: str) -> bool:
        """
        Delete a group (hard delete with CASCADE to its period records)

        Returns:
            True if group was deleted, False if group not found
        """
        try:
            group = self.db.query(GroupDB).filter(GroupDB.id == group_id).first()
            if not group:
                return False

            record_count = self.db.query(PeriodRecordDB).filter(
                PeriodRecordDB.group_id == group_id
            ).count()
            if record_count > 0:
                logger.warning(
                    f"Deleting group {group_id} will CASCADE delete {record_count} period records",
                    extra={"group_id": group_id, "period_records": record_count}
                )

            self.db.delete(group)
            self.db.commit()

            logger.info(f"Group {group_id} deleted successfully", extra={"group_id": group_id})
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to delete group {group_id}",
                extra={"group_id": group_id, "error": str(e)},
                exc_info=True
            )
            raise


class PeriodRecordRepository:
    """
    Repository for the raw records of a (group, partial).

    A record is created empty the first time the pair is accessed and is then
    mutated section by section as the teacher captures data.
    """

    def __init__(self, db_session: Session):
        self.db = db_session

    def get(self, group_id: str, partial_id: PartialLike) -> Optional[PeriodRecordDB]:
        return self.db.query(PeriodRecordDB).filter(
            PeriodRecordDB.group_id == group_id,
            PeriodRecordDB.partial_id == _partial_value(partial_id),
        ).first()

    def get_or_create(self, group_id: str, partial_id: PartialLike) -> PeriodRecordDB:
        record = self.get(group_id, partial_id)
        if record is not None:
            return record
        try:
            record = PeriodRecordDB(
                id=str(uuid4()),
                group_id=group_id,
                partial_id=_partial_value(partial_id),
                criteria=[],
                grades={},
                attendance={},
                participations={},
                activities=[],
                activity_records={},
                recovery_grades={},
                feedbacks={},
            )
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
            logger.debug(
                "Empty period record created",
                extra={"group_id": group_id, "partial_id": record.partial_id}
            )
            return record
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to create period record: {e}",
                extra={"group_id": group_id, "partial_id": str(partial_id)}
            )
            raise

    def get_bundle(self, group_id: str, partial_id: PartialLike) -> PeriodRecordBundle:
        """Snapshot de solo lectura para el motor de calificaciones"""
        record = self.get(group_id, partial_id)
        if record is None:
            return PeriodRecordBundle.empty()
        return PeriodRecordBundle.from_raw(record.to_dict())

    def get_bundles_for_group(self, group_id: str) -> Dict[PartialId, PeriodRecordBundle]:
        return {partial_id: self.get_bundle(group_id, partial_id) for partial_id in PARTIALS}

    def get_bundles_for_partial(
        self,
        group_ids: Iterable[str],
        partial_id: PartialLike,
    ) -> Dict[str, PeriodRecordBundle]:
        group_ids = list(group_ids)
        if not group_ids:
            return {}
        records = self.db.query(PeriodRecordDB).filter(
            PeriodRecordDB.group_id.in_(group_ids),
            PeriodRecordDB.partial_id == _partial_value(partial_id),
        ).all()
        by_group = {r.group_id: PeriodRecordBundle.from_raw(r.to_dict()) for r in records}
        return {gid: by_group.get(gid, PeriodRecordBundle.empty()) for gid in group_ids}

    def _update(
        self,
        group_id: str,
        partial_id: PartialLike,
        column: str,
        mutate: Callable[[Any], Any],
        operation: str,
    ) -> PeriodRecordDB:
        record = self.get_or_create(group_id, partial_id)
        try:
            current = copy.deepcopy(getattr(record, column))
            setattr(record, column, mutate(current))
            flag_modified(record, column)
            self.db.commit()
            self.db.refresh(record)
            return record
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to {operation}: {e}",
                extra={"group_id": group_id, "partial_id": str(partial_id), "column": column},
                exc_info=True
            )
            raise

    def save_bundle(
        self,
        group_id: str,
        partial_id: PartialLike,
        bundle: PeriodRecordBundle,
    ) -> PeriodRecordDB:
        record = self.get_or_create(group_id, partial_id)
        try:
            data = bundle.model_dump(mode="json")
            for column, value in data.items():
                setattr(record, column, value)
                if column != "group_analysis":
                    flag_modified(record, column)
            self.db.commit()
            self.db.refresh(record)
            return record
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to save period bundle: {e}",
                extra={"group_id": group_id, "partial_id": str(partial_id)},
                exc_info=True
            )
            raise

    def set_criteria(self, group_id: str, partial_id: PartialLike, criteria: List[Criterion]) -> PeriodRecordDB:
        payload = [c.model_dump(mode="json") for c in criteria]
        return self._update(group_id, partial_id, "criteria", lambda _: payload, "set criteria")

    def set_grade(
        self,
        group_id: str,
        partial_id: PartialLike,
        student_id: str,
        criterion_id: str,
        delivered: Optional[float],
    ) -> PeriodRecordDB:
        def mutate(grades):
            grades = grades or {}
            grades.setdefault(student_id, {})[criterion_id] = {"delivered": delivered}
            return grades
        return self._update(group_id, partial_id, "grades", mutate, "set grade")

    def _set_daily(
        self,
        group_id: str,
        partial_id: PartialLike,
        column: str,
        date: str,
        entries: Dict[str, bool],
    ) -> PeriodRecordDB:
        def mutate(record):
            record = record or {}
            record.setdefault(date, {}).update(entries)
            return record
        return self._update(group_id, partial_id, column, mutate, f"set {column}")

    def set_attendance(self, group_id: str, partial_id: PartialLike, date: str, entries: Dict[str, bool]) -> PeriodRecordDB:
        return self._set_daily(group_id, partial_id, "attendance", date, entries)

    def set_participations(self, group_id: str, partial_id: PartialLike, date: str, entries: Dict[str, bool]) -> PeriodRecordDB:
        return self._set_daily(group_id, partial_id, "participations", date, entries)

    def set_activities(self, group_id: str, partial_id: PartialLike, activities: List[Activity]) -> PeriodRecordDB:
        payload = [a.model_dump(mode="json") for a in activities]
        return self._update(group_id, partial_id, "activities", lambda _: payload, "set activities")

    def set_activity_record(
        self,
        group_id: str,
        partial_id: PartialLike,
        student_id: str,
        activity_id: str,
        delivered: bool,
    ) -> PeriodRecordDB:
        def mutate(records):
            records = records or {}
            records.setdefault(student_id, {})[activity_id] = delivered
            return records
        return self._update(group_id, partial_id, "activity_records", mutate, "set activity record")

    def set_recovery_grade(
        self,
        group_id: str,
        partial_id: PartialLike,
        student_id: str,
        grade: Optional[float],
        applied: bool,
    ) -> PeriodRecordDB:
        def mutate(recovery):
            recovery = recovery or {}
            recovery[student_id] = {"grade": grade, "applied": applied}
            return recovery
        return self._update(group_id, partial_id, "recovery_grades", mutate, "set recovery grade")

    def set_feedback(self, group_id: str, partial_id: PartialLike, student_id: str, feedback: str) -> PeriodRecordDB:
        def mutate(feedbacks):
            feedbacks = feedbacks or {}
            feedbacks[student_id] = feedback
            return feedbacks
        return self._update(group_id, partial_id, "feedbacks", mutate, "set feedback")

    def reset_all(self) -> int:
        """
        Delete every period record (full data reset).

        Returns:
            Number of deleted records
        """
        try:
            deleted = self.db.query(PeriodRecordDB).delete(synchronize_session=False)
            self.db.commit()
            logger.warning("All period records deleted", extra={"deleted": deleted})
            return deleted
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to reset period records: {e}", exc_info=True)
            raise


class ObservationRepository:
    """Repository for behavioral observations of students"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def create(
        self,
        student_id: str,
        partial_id: PartialLike,
        type: str,
        details: str = "",
        requires_canalization: bool = False,
        canalization_target: Optional[str] = None,
        requires_follow_up: bool = False,
    ) -> StudentObservationDB:
        """
        Record a new observation (open, without follow-up updates).

        Raises:
            Exception: Re-raises after rollback if creation fails
        """
        try:
            observation = StudentObservationDB(
                id=str(uuid4()),
                student_id=student_id,
                partial_id=_partial_value(partial_id),
                date=utc_now().isoformat(),
                type=type,
                details=details,
                requires_canalization=requires_canalization,
                canalization_target=canalization_target if requires_canalization else None,
                requires_follow_up=requires_follow_up,
                follow_up_updates=[],
                is_closed=False,
            )
            self.db.add(observation)
            self.db.commit()
            self.db.refresh(observation)
            logger.info(
                "Observation recorded",
                extra={"student_id": student_id, "observation_id": observation.id, "type": type}
            )
            return observation
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to create observation: {e}",
                extra={"student_id": student_id},
                exc_info=True
            )
            raise

    def get_by_id(self, observation_id: str) -> Optional[StudentObservationDB]:
        return self.db.query(StudentObservationDB).filter(StudentObservationDB.id == observation_id).first()

    def get_by_student(self, student_id: str) -> List[StudentObservationDB]:
        return (
            self.db.query(StudentObservationDB)
            .filter(StudentObservationDB.student_id == student_id)
            .order_by(StudentObservationDB.date)
            .all()
        )

    def get_by_students(self, student_ids: Iterable[str]) -> Dict[str, List[StudentObservation]]:
        """Observations grouped by student (students without any map to [])"""
        student_ids = list(student_ids)
        by_student: Dict[str, List[StudentObservation]] = {sid: [] for sid in student_ids}
        if not student_ids:
            return by_student
        rows = (
            self.db.query(StudentObservationDB)
            .filter(StudentObservationDB.student_id.in_(student_ids))
            .order_by(StudentObservationDB.date)
            .all()
        )
        for row in rows:
            by_student[row.student_id].append(StudentObservation.model_validate(row))
        return by_student

    def add_follow_up(self, observation_id: str, update: str, is_closing: bool = False) -> Optional[StudentObservationDB]:
        """
        Append a follow-up update; is_closing sets the closed flag.

        Returns:
            The updated observation, or None if not found
        """
        observation = self.get_by_id(observation_id)
        if observation is None:
            return None
        try:
            updates = list(observation.follow_up_updates or [])
            updates.append({"date": utc_now().isoformat(), "update": update})
            observation.follow_up_updates = updates
            observation.is_closed = is_closing
            self.db.commit()
            self.db.refresh(observation)
            return observation
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to add follow-up: {e}",
                extra={"observation_id": observation_id},
                exc_info=True
            )
            raise
