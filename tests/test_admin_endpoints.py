"""Tests for admin endpoints."""

from fastapi.testclient import TestClient

from patrol_tracker.api.app import create_app
from patrol_tracker.domain.patrols import PatrolStatus, Shift

HEADERS = {"X-Admin-Token": "admin-token"}


def test_admin_requires_token(container) -> None:
    with TestClient(create_app(container)) as client:
        missing = client.get("/admin/health")
        wrong = client.get("/admin/health", headers={"X-Admin-Token": "nope"})
        ok = client.get("/admin/health", headers=HEADERS)

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert ok.json() == {"status": "ok"}


def test_admin_lists_active_patrols(container) -> None:
    with TestClient(create_app(container)) as client:
        client.post(
            "/patrols",
            json={
                "officer_name": "Sam",
                "company_id": "comp1",
                "site_id": "site1",
                "area_id": "area1",
                "shift": "Night",
            },
        )
        response = client.get("/admin/patrols", headers=HEADERS)

    assert response.status_code == 200
    patrols = response.json()["patrols"]
    assert len(patrols) == 1
    assert patrols[0]["patrol"]["officer_name"] == "Sam"
    assert patrols[0]["coverage"]["total"] == 3
    assert patrols[0]["autosave_running"] is True


def test_admin_lists_reports(container, patrol_repository) -> None:
    for name in ["First", "Second", "Third"]:
        patrol_repository.create_session(name, "comp1", "site1", "area1", Shift.DAY)

    with TestClient(create_app(container)) as client:
        response = client.get("/admin/reports?limit=2", headers=HEADERS)

    assert response.status_code == 200
    assert len(response.json()["reports"]) == 2


def test_admin_searches_reports_by_officer(container, patrol_repository) -> None:
    for name in ["Sam Vimes", "Fred Colon", "Sybil Vimes"]:
        patrol_repository.create_session(name, "comp1", "site1", "area1", Shift.DAY)

    with TestClient(create_app(container)) as client:
        response = client.get("/admin/reports?officer=vimes", headers=HEADERS)

    assert response.status_code == 200
    names = {report["officer_name"] for report in response.json()["reports"]}
    assert names == {"Sam Vimes", "Sybil Vimes"}


def test_admin_fetches_single_report(container, patrol_repository) -> None:
    session = patrol_repository.create_session(
        "Sam", "comp1", "site1", "area1", Shift.NIGHT
    )

    with TestClient(create_app(container)) as client:
        found = client.get(f"/admin/reports/{session.id}", headers=HEADERS)
        missing = client.get("/admin/reports/nope", headers=HEADERS)
        unauthorized = client.get(f"/admin/reports/{session.id}")

    assert found.status_code == 200
    assert found.json()["report"]["id"] == session.id
    assert found.json()["report"]["shift"] == "Night"
    assert missing.status_code == 404
    assert unauthorized.status_code == 401


def test_admin_dashboard(container, patrol_repository) -> None:
    running = patrol_repository.create_session(
        "Running", "comp1", "site1", "area1", Shift.DAY
    )
    finished = patrol_repository.create_session(
        "Finished", "comp1", "site1", "area1", Shift.DAY
    )
    patrol_repository.update_session(
        finished.id, {"status": PatrolStatus.COMPLETED}
    )

    with TestClient(create_app(container)) as client:
        response = client.get("/admin/dashboard", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["site_count"] == 1
    assert [report["id"] for report in data["recent_patrols"]] == [finished.id]
    assert running.id not in {report["id"] for report in data["recent_patrols"]}
