from gradebook.models import (
    Criterion,
    CriterionInput,
    CriterionKind,
    PeriodRecordBundle,
    RecoveryGrade,
    StudentObservation,
    infer_kind_from_name,
)


def test_kind_inferred_from_legacy_names():
    assert infer_kind_from_name("Actividades") == CriterionKind.ACTIVITY_BASED
    assert infer_kind_from_name("Portafolio") == CriterionKind.ACTIVITY_BASED
    assert infer_kind_from_name("Participación") == CriterionKind.PARTICIPATION_BASED
    assert infer_kind_from_name("Examen") == CriterionKind.MANUAL
    assert infer_kind_from_name("") == CriterionKind.MANUAL


def test_criterion_accepts_stored_camel_case():
    criterion = Criterion.model_validate(
        {"id": "c1", "name": "Proyecto", "weight": 40, "expectedValue": 3, "isAutomated": False}
    )
    assert criterion.expected_value == 3
    assert criterion.kind == CriterionKind.MANUAL


def test_criterion_input_keeps_explicit_kind():
    criterion = CriterionInput(
        id="c1", name="Participación", weight=10, kind=CriterionKind.MANUAL, expected_value=5
    ).to_criterion()
    assert criterion.kind == CriterionKind.MANUAL
    assert criterion.expected_value == 5


def test_criterion_input_infers_kind_when_missing():
    criterion = CriterionInput(id="c1", name="Actividades", weight=30).to_criterion()
    assert criterion.kind == CriterionKind.ACTIVITY_BASED


def test_bundle_from_raw_accepts_original_keys():
    bundle = PeriodRecordBundle.from_raw({
        "criteria": [],
        "activityRecords": {"s1": {"a1": True}},
        "recoveryGrades": {"s1": {"grade": 80, "applied": True}},
        "groupAnalysis": "Buen avance",
    })
    assert bundle.activity_records == {"s1": {"a1": True}}
    assert bundle.recovery_grades["s1"].applied is True
    assert bundle.group_analysis == "Buen avance"


def test_bundle_from_raw_never_raises():
    assert PeriodRecordBundle.from_raw(None) == PeriodRecordBundle()
    assert PeriodRecordBundle.from_raw(42) == PeriodRecordBundle()
    assert PeriodRecordBundle.from_raw({"attendance": {"d1": "yes"}}) == PeriodRecordBundle()


def test_has_recorded_grades():
    exam = {"id": "e", "name": "Examen", "weight": 100, "expectedValue": 10}
    assert not PeriodRecordBundle.from_raw({"criteria": [exam]}).has_recorded_grades()
    assert not PeriodRecordBundle.from_raw(
        {"grades": {"s1": {"e": {"delivered": 5}}}}
    ).has_recorded_grades()
    assert PeriodRecordBundle.from_raw(
        {"criteria": [exam], "grades": {"s1": {"e": {"delivered": 5}}}}
    ).has_recorded_grades()
    assert PeriodRecordBundle.from_raw(
        {"criteria": [exam], "participations": {"d1": {"s1": False}}}
    ).has_recorded_grades()


def test_applied_recovery_is_per_student():
    b = PeriodRecordBundle(recovery_grades={
        "s1": RecoveryGrade(grade=80, applied=True),
        "s2": RecoveryGrade(grade=75, applied=False),
        "s3": RecoveryGrade(grade=None, applied=True),
    })
    assert b.has_applied_recovery("s1")
    assert not b.has_applied_recovery("s2")
    assert not b.has_applied_recovery("s3")
    assert not b.has_applied_recovery("s4")


def test_observation_accepts_stored_camel_case():
    obs = StudentObservation.model_validate({
        "id": "OBS-1",
        "studentId": "s1",
        "partialId": "p2",
        "date": "2024-03-01T09:00:00",
        "type": "Asesoría académica",
        "details": "",
        "requiresCanalization": True,
        "canalizationTarget": "Tutor",
        "requiresFollowUp": False,
        "followUpUpdates": [{"date": "2024-03-02T09:00:00", "update": "Cita agendada"}],
        "isClosed": False,
    })
    assert obs.requires_canalization is True
    assert obs.follow_up_updates[0].update == "Cita agendada"
    assert obs.partial_id.value == "p2"
