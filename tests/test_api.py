import pytest

API = "/api/v1"


@pytest.fixture
def enrolled(client):
    """Grupo con dos estudiantes: Ana (s1) y Beto (s2)"""
    group_id = client.post(f"{API}/groups", json={"subject": "Matemáticas", "semester": "2024-1"}).json()["data"]["id"]
    ids = []
    for name in ("Ana", "Beto"):
        student_id = client.post(f"{API}/students", json={"name": name}).json()["data"]["id"]
        response = client.post(f"{API}/groups/{group_id}/students", json={"student_id": student_id})
        assert response.status_code == 200
        ids.append(student_id)
    return group_id, ids[0], ids[1]


@pytest.fixture
def graded(client, enrolled):
    group_id, ana, beto = enrolled
    period = f"{API}/groups/{group_id}/periods/p1"
    response = client.put(f"{period}/criteria", json={"criteria": [
        {"id": "exam", "name": "Examen", "weight": 70, "expected_value": 10},
        {"id": "part", "name": "Participación", "weight": 30},
    ]})
    assert response.status_code == 200
    assert client.put(f"{period}/grades/{ana}/exam", json={"delivered": 9}).status_code == 200
    assert client.put(f"{period}/attendance/2024-02-01", json={"entries": {ana: True, beto: False}}).status_code == 200
    return enrolled


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_new_period_starts_empty(client, enrolled):
    group_id, _, _ = enrolled
    response = client.get(f"{API}/groups/{group_id}/periods/p2")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["criteria"] == []
    assert body["data"]["attendance"] == {}


def test_criteria_kind_is_inferred(client, graded):
    group_id, _, _ = graded
    criteria = client.get(f"{API}/groups/{group_id}/periods/p1").json()["data"]["criteria"]
    assert [c["kind"] for c in criteria] == ["manual", "participation_based"]


def test_student_grade_and_risk(client, graded):
    group_id, ana, beto = graded

    ana_grade = client.get(f"{API}/groups/{group_id}/periods/p1/students/{ana}/grade").json()["data"]
    assert ana_grade["final_grade"] == pytest.approx(93)
    assert [d["earned"] for d in ana_grade["criteria_details"]] == pytest.approx([63, 30])
    assert ana_grade["risk"] == {"level": "low", "reason": "Sin riesgo detectado"}

    beto_grade = client.get(f"{API}/groups/{group_id}/periods/p1/students/{beto}/grade").json()["data"]
    assert beto_grade["final_grade"] == pytest.approx(30)
    assert beto_grade["risk"]["level"] == "high"
    assert beto_grade["risk"]["reason"] == "Promedio de 30% y 100% de ausencias."
    assert beto_grade["attendance"]["absent"] == 1


def test_grade_for_student_outside_group(client, graded):
    group_id, _, _ = graded
    response = client.get(f"{API}/groups/{group_id}/periods/p1/students/nobody/grade")
    assert response.status_code == 404
    assert response.json()["error_code"] == "STUDENT_NOT_FOUND"


def test_dashboard(client, graded):
    group_id, _, beto = graded
    data = client.get(f"{API}/dashboard", params={"partial_id": "p1", "active_group_id": group_id}).json()["data"]

    assert data["group_averages"][group_id] == pytest.approx(61.5)
    assert [s["id"] for s in data["at_risk_students"]] == [beto]
    assert data["at_risk_students"][0]["group_id"] == group_id
    assert data["overall_participation"] == 50


def test_dashboard_without_active_group(client, graded):
    data = client.get(f"{API}/dashboard").json()["data"]
    assert data["partial_id"] == "p1"
    assert data["overall_participation"] is None


def test_semester_evaluation_counts_only_recorded_periods(client, graded):
    group_id, ana, _ = graded
    results = client.get(f"{API}/groups/{group_id}/semester-evaluation").json()["data"]

    assert [r["student_id"] for r in results][0] == ana
    assert results[0]["periods_counted"] == 1
    assert results[0]["average"] == pytest.approx(93)
    assert results[0]["p2"] is None


def test_recovery_grade_replaces_period_grade(client, graded):
    group_id, _, beto = graded
    response = client.put(
        f"{API}/groups/{group_id}/periods/p1/recovery-grades/{beto}",
        json={"grade": 72, "applied": True},
    )
    assert response.status_code == 200

    results = client.get(f"{API}/groups/{group_id}/semester-evaluation").json()["data"]
    beto_result = results[1]
    assert beto_result["p1"]["is_recovery"] is True
    assert beto_result["average"] == pytest.approx(72)


def test_group_statistics(client, graded):
    group_id, _, _ = graded
    stats = client.get(f"{API}/groups/{group_id}/periods/p1/statistics").json()["data"]

    assert stats["student_count"] == 2
    assert stats["average_grade"] == pytest.approx(61.5)
    assert (stats["approved"], stats["failed"]) == (1, 1)
    assert stats["risk_distribution"] == {"low": 1, "medium": 0, "high": 1}


def test_student_report(client, graded):
    _, ana, _ = graded
    report = client.get(f"{API}/students/{ana}/report").json()["data"]

    assert report["average_grade"] == pytest.approx(93)
    assert report["attendance"] == {"p": 1, "a": 0, "total": 1}
    assert report["grades_by_group"][0]["group"] == "Matemáticas"


class TestDataEntryValidation:
    def test_weights_over_100_are_rejected(self, client, enrolled):
        group_id, _, _ = enrolled
        response = client.put(f"{API}/groups/{group_id}/periods/p1/criteria", json={"criteria": [
            {"id": "a", "name": "Examen", "weight": 60, "expected_value": 10},
            {"id": "b", "name": "Proyecto", "weight": 50, "expected_value": 1},
        ]})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "INVALID_CRITERIA"
        assert body["extra"]["total_weight"] == 110

    def test_duplicate_criterion_ids_are_rejected(self, client, enrolled):
        group_id, _, _ = enrolled
        response = client.put(f"{API}/groups/{group_id}/periods/p1/criteria", json={"criteria": [
            {"id": "a", "name": "Examen", "weight": 50, "expected_value": 10},
            {"id": "a", "name": "Proyecto", "weight": 50, "expected_value": 1},
        ]})
        assert response.json()["error_code"] == "INVALID_CRITERIA"

    def test_negative_delivered_is_rejected(self, client, enrolled):
        group_id, ana, _ = enrolled
        response = client.put(f"{API}/groups/{group_id}/periods/p1/grades/{ana}/exam", json={"delivered": -1})
        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_GRADE_ENTRY"

    def test_unknown_partial(self, client, enrolled):
        group_id, _, _ = enrolled
        response = client.get(f"{API}/groups/{group_id}/periods/p4")
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_PARTIAL"

    def test_unknown_group(self, client):
        response = client.get(f"{API}/groups/missing/periods/p1")
        assert response.status_code == 404
        assert response.json()["error_code"] == "GROUP_NOT_FOUND"

    def test_unknown_group_on_write(self, client):
        response = client.put(f"{API}/groups/missing/periods/p1/feedbacks/s1", json={"feedback": "x"})
        assert response.status_code == 404
        assert response.json()["error_code"] == "GROUP_NOT_FOUND"


def test_observations_feed_group_statistics(client, enrolled):
    group_id, ana, beto = enrolled
    url = f"{API}/students/{ana}/observations"
    created = client.post(url, json={
        "partial_id": "p1",
        "type": "Problema de conducta",
        "requires_canalization": True,
        "canalization_target": "Atención psicológica",
        "requires_follow_up": True,
    })
    assert created.status_code == 201
    observation_id = created.json()["data"]["id"]
    client.post(f"{API}/students/{beto}/observations", json={"partial_id": "p2", "type": "Mérito"})

    closed = client.put(f"{url}/{observation_id}/follow-up", json={"update": "Canalizado", "is_closing": True})
    assert closed.json()["data"]["is_closed"] is True
    assert [o["id"] for o in client.get(url).json()["data"]] == [observation_id]

    stats = client.get(f"{API}/groups/{group_id}/periods/p1/statistics").json()["data"]
    assert stats["observation_stats"] == {"observations": 2, "canalizations": 1, "follow_ups": 1}


def test_follow_up_on_another_students_observation(client, enrolled):
    _, ana, beto = enrolled
    observation_id = client.post(
        f"{API}/students/{ana}/observations", json={"partial_id": "p1", "type": "Otros"}
    ).json()["data"]["id"]

    response = client.put(
        f"{API}/students/{beto}/observations/{observation_id}/follow-up", json={"update": "x"}
    )
    assert response.status_code == 404
    assert response.json()["error_code"] == "OBSERVATION_NOT_FOUND"


def test_reset_period_records(client, graded):
    group_id, _, _ = graded
    response = client.delete(f"{API}/period-records")
    assert response.json()["data"] == {"deleted": 1}
    assert client.get(f"{API}/groups/{group_id}/periods/p1").json()["data"]["criteria"] == []


def test_metrics_endpoint(client, graded):
    group_id, ana, _ = graded
    client.get(f"{API}/groups/{group_id}/periods/p1/students/{ana}/grade")

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "gradebook_grade_calculations_total" in response.text
