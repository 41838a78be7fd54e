import pytest

from gradebook.core.aggregation import (
    build_student_report,
    calculate_group_averages,
    calculate_group_statistics,
    calculate_overall_participation,
    calculate_semester_grades,
    find_at_risk_students,
    resolve_period_grade,
)
from gradebook.models import PartialId, RecoveryGrade, RiskLevel

from tests.helpers import attendance_days, bundle, exam, group, observation


def exam_bundle(**delivered):
    return bundle([exam()], delivered={sid: {"exam": value} for sid, value in delivered.items()})


class TestGroupAverages:
    def test_average_per_group(self):
        groups = [group("g1", "s1", "s2"), group("g2")]
        averages = calculate_group_averages(groups, {"g1": exam_bundle(s1=8, s2=6)})

        assert averages["g1"] == pytest.approx(70)
        assert averages["g2"] == 0

    def test_missing_bundle_counts_as_empty(self):
        averages = calculate_group_averages([group("g1", "s1")], {})
        assert averages == {"g1": 0}


class TestAtRiskRoster:
    def test_only_medium_and_high_are_listed(self):
        groups = [group("g1", "s1", "s2", "s3")]
        roster = find_at_risk_students(groups, {"g1": exam_bundle(s1=8, s2=6, s3=7.5)})

        by_id = {s.id: s for s in roster}
        assert set(by_id) == {"s2", "s3"}
        assert by_id["s2"].calculated_risk.level == RiskLevel.HIGH
        assert by_id["s3"].calculated_risk.level == RiskLevel.MEDIUM
        assert by_id["s2"].calculated_risk.reason == "Promedio de 60% y 0% de ausencias."

    def test_student_in_several_groups_is_listed_once(self):
        groups = [group("g1", "s1"), group("g2", "s1")]
        bundles = {"g1": exam_bundle(s1=5), "g2": exam_bundle(s1=7.5)}

        roster = find_at_risk_students(groups, bundles)

        assert len(roster) == 1
        assert roster[0].group_id == "g2"
        assert roster[0].calculated_risk.level == RiskLevel.MEDIUM

    def test_absences_alone_put_student_at_risk(self):
        b = exam_bundle(s1=10)
        b.attendance.update(attendance_days("s1", present=7, absent=3))
        roster = find_at_risk_students([group("g1", "s1")], {"g1": b})
        assert roster[0].calculated_risk.level == RiskLevel.HIGH


class TestSemester:
    def test_periods_without_data_are_excluded(self):
        semester = calculate_semester_grades(
            "s1",
            {PartialId.P1: exam_bundle(s1=8), PartialId.P2: exam_bundle(s1=9), PartialId.P3: None},
        )

        assert semester.p1.grade == pytest.approx(80)
        assert semester.p2.grade == pytest.approx(90)
        assert semester.p3 is None
        assert semester.periods_counted == 2
        assert semester.average == pytest.approx(85)

    def test_criteria_without_any_capture_do_not_count(self):
        semester = calculate_semester_grades(
            "s1",
            {"p1": exam_bundle(s1=8), "p2": bundle([exam()]), "p3": bundle([exam()])},
        )
        assert semester.periods_counted == 1
        assert semester.average == pytest.approx(80)

    def test_no_data_at_all(self):
        semester = calculate_semester_grades("s1", {})
        assert semester.periods_counted == 0
        assert semester.average == 0

    def test_unknown_partial_keys_are_ignored(self):
        semester = calculate_semester_grades("s1", {"p1": exam_bundle(s1=6), "p9": exam_bundle(s1=10)})
        assert semester.periods_counted == 1
        assert semester.average == pytest.approx(60)

    def test_recovery_only_period_counts(self):
        recovery_only = bundle(recovery_grades={"s1": RecoveryGrade(grade=70, applied=True)})
        semester = calculate_semester_grades("s1", {"p1": exam_bundle(s1=9), "p2": recovery_only})

        assert semester.p2.is_recovery is True
        assert semester.average == pytest.approx(80)

    def test_recovery_of_another_student_does_not_include_period(self):
        only_s1_recovered = bundle(recovery_grades={"s1": RecoveryGrade(grade=70, applied=True)})
        bundles = {"p1": exam_bundle(s2=9), "p2": only_s1_recovered}

        s2 = calculate_semester_grades("s2", bundles)
        assert s2.p2 is None
        assert s2.periods_counted == 1
        assert s2.average == pytest.approx(90)

        s1 = calculate_semester_grades("s1", bundles)
        assert s1.periods_counted == 2
        assert s1.average == pytest.approx(35)

    def test_unapplied_recovery_does_not_include_period(self):
        pending = bundle(recovery_grades={"s1": RecoveryGrade(grade=70, applied=False)})
        semester = calculate_semester_grades("s1", {"p1": exam_bundle(s1=9), "p2": pending})
        assert semester.periods_counted == 1


class TestRecovery:
    def test_applied_recovery_replaces_grade(self):
        b = exam_bundle(s1=5)
        b.recovery_grades["s1"] = RecoveryGrade(grade=75, applied=True)

        period = resolve_period_grade("s1", b)
        assert period.grade == 75
        assert period.is_recovery is True
        assert period.criteria_details[0].earned == pytest.approx(50)

    def test_unapplied_recovery_is_ignored(self):
        b = exam_bundle(s1=5)
        b.recovery_grades["s1"] = RecoveryGrade(grade=75, applied=False)

        period = resolve_period_grade("s1", b)
        assert period.grade == pytest.approx(50)
        assert period.is_recovery is False

    def test_recovery_grade_is_clamped(self):
        b = exam_bundle(s1=5)
        b.recovery_grades["s1"] = RecoveryGrade(grade=140, applied=True)
        assert resolve_period_grade("s1", b).grade == 100


class TestOverallParticipation:
    def test_no_data_defaults_to_100(self):
        assert calculate_overall_participation(group("g1", "s1"), [None, bundle()]) == 100

    def test_present_and_participated_flags_over_entries(self):
        b = bundle(
            attendance={"2024-02-01": {"s1": True, "s2": False}, "2024-02-02": {"s1": True}},
            participations={"2024-02-01": {"s1": True, "s2": False}, "2024-02-02": {"outsider": True}},
        )
        # Presentes: 2 de 3; participaciones: 1 de 2 -> 3/5
        assert calculate_overall_participation(group("g1", "s1", "s2"), [b]) == 60

    def test_all_periods_are_folded(self):
        p1 = bundle(attendance={"d1": {"s1": True}})
        p2 = bundle(attendance={"d1": {"s1": False}})
        assert calculate_overall_participation(group("g1", "s1"), [p1, p2, None]) == 50

    def test_half_percent_rounds_up(self):
        b = bundle(attendance={f"d{i}": {"s1": i < 5} for i in range(8)})
        # 5 de 8 = 62.5%
        assert calculate_overall_participation(group("g1", "s1"), [b]) == 63


class TestGroupStatistics:
    def test_statistics(self):
        b = exam_bundle(s1=10, s2=5)
        b.attendance.update({
            "2024-02-01": {"s1": True, "s2": False},
            "2024-02-02": {"s1": True, "s2": True},
        })

        stats = calculate_group_statistics(group("g1", "s1", "s2"), b)

        assert stats.student_count == 2
        assert stats.average_grade == pytest.approx(75)
        assert (stats.approved, stats.failed) == (1, 1)
        assert (stats.attendance_present, stats.attendance_absent) == (3, 1)
        assert stats.attendance_rate == pytest.approx(75)
        assert stats.risk_distribution == {"low": 1, "medium": 0, "high": 1}
        assert [s.student_id for s in stats.top_students] == ["s1", "s2"]
        buckets = {b.name: b.students for b in stats.participation_distribution}
        assert buckets["81-100%"] == 2
        assert sum(buckets.values()) == 2
        assert stats.observation_stats.observations == 0

    def test_observation_counts(self):
        observations = {
            "s1": [observation("s1", canalization=True, observation_id="o1"), observation("s1", observation_id="o2")],
            "s2": [observation("s2", canalization=True, follow_up=True, observation_id="o3")],
            "outsider": [observation("outsider", follow_up=True, observation_id="o4")],
        }
        stats = calculate_group_statistics(group("g1", "s1", "s2"), exam_bundle(s1=8), observations)

        counts = stats.observation_stats
        assert (counts.observations, counts.canalizations, counts.follow_ups) == (3, 2, 1)

    def test_empty_group(self):
        stats = calculate_group_statistics(group("g1"), None)
        assert stats.student_count == 0
        assert stats.average_grade == 0
        assert stats.attendance_rate == 100
        assert stats.top_students == []


class TestStudentReport:
    def test_report_across_groups(self):
        g1 = group("g1", "s1", subject="Matemáticas")
        g2 = group("g2", "s1", subject="Historia")
        b1 = exam_bundle(s1=8)
        b1.attendance.update({"d1": {"s1": True}, "d2": {"s1": False}})
        b2 = exam_bundle(s1=9)
        b2.attendance.update({"d1": {"s1": True}})

        report = build_student_report("s1", [(g1, b1), (g2, b2)])

        assert report.average_grade == pytest.approx(85)
        assert (report.attendance.p, report.attendance.a, report.attendance.total) == (2, 1, 3)
        assert [g.group for g in report.grades_by_group] == ["Matemáticas", "Historia"]
        assert report.grades_by_group[0].criteria_details[0].name == "Examen"

    def test_no_memberships(self):
        report = build_student_report("s1", [])
        assert report.average_grade == 0
        assert report.grades_by_group == []
