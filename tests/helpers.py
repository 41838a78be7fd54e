"""
Builders de paquetes de registros para las pruebas
"""
from gradebook.models import Criterion, CriterionKind, Group, PeriodRecordBundle, Student, StudentObservation


def exam(weight=100, expected=10, criterion_id="exam"):
    return Criterion(id=criterion_id, name="Examen", weight=weight, expected_value=expected)


def activities_criterion(weight=30, criterion_id="act"):
    return Criterion(id=criterion_id, name="Actividades", weight=weight, kind=CriterionKind.ACTIVITY_BASED)


def participation_criterion(weight=10, criterion_id="part"):
    return Criterion(id=criterion_id, name="Participación", weight=weight, kind=CriterionKind.PARTICIPATION_BASED)


def bundle(criteria=None, delivered=None, **sections):
    """
    delivered: {student_id: {criterion_id: value}}
    """
    grades = {
        student_id: {cid: {"delivered": value} for cid, value in per_criterion.items()}
        for student_id, per_criterion in (delivered or {}).items()
    }
    return PeriodRecordBundle(criteria=criteria or [], grades=grades, **sections)


def attendance_days(student_id, present, absent):
    """present días presentes seguidos de absent ausencias"""
    record = {}
    for day in range(present + absent):
        record[f"2024-02-{day + 1:02d}"] = {student_id: day < present}
    return record


def group(group_id, *student_ids, subject=None):
    return Group(
        id=group_id,
        subject=subject or f"Materia {group_id}",
        students=[Student(id=sid, name=f"Alumno {sid}") for sid in student_ids],
    )


def observation(student_id, canalization=False, follow_up=False, observation_id="obs"):
    return StudentObservation(
        id=observation_id,
        student_id=student_id,
        partial_id="p1",
        date="2024-02-01T10:00:00",
        type="Problema de conducta",
        requires_canalization=canalization,
        requires_follow_up=follow_up,
    )
