from __future__ import annotations

import mysql.connector
import pytest
from mysql.connector import errorcode

from src.hojaverde.hojaverde.container import wire_services
from src.hojaverde.hojaverde.employees.mysql_employee_repository import MySQLEmployeeRepository
from src.hojaverde.hojaverde.main import create_app

from tests.fakes import CULTIVO_1, POSTCOSECHA, emp_id

EDITOR = {"X-User-Id": "u-1", "X-User-Role": "EDITOR"}
VIEWER = {"X-User-Id": "u-2", "X-User-Role": "VIEWER"}


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def test_health_without_database(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_bulk_requires_role_headers(client):
    resp = client.post("/api/attendance/bulk", json={"date": "2025-06-10", "records": []})
    assert resp.status_code == 401

    resp = client.post("/api/attendance/bulk", json={"date": "2025-06-10", "records": []}, headers=VIEWER)
    assert resp.status_code == 403
    assert resp.get_json()["success"] is False


def test_bulk_created_with_rejections(client):
    records = [{"employeeId": emp_id(1)}, {"employeeId": emp_id(777)}]
    resp = client.post("/api/attendance/bulk", json={"date": "2025-06-10", "records": records}, headers=EDITOR)

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["processed"] == 1
    assert data["errors"] == 1
    assert data["totalRequested"] == 2
    assert data["successRate"] == "50.0%"
    assert data["timeElapsed"].endswith("s")
    assert data["processedRecords"][0]["workedHours"] == 9.0
    assert data["processedRecords"][0]["status"] == "created"
    assert data["errorList"][0]["kind"] == "not_found"
    assert emp_id(777) in data["missingEmployees"]


def test_bulk_error_list_is_truncated(client):
    records = [{"employeeId": emp_id(1000 + n)} for n in range(15)]
    resp = client.post("/api/attendance/bulk", json={"date": "2025-06-10", "records": records}, headers=EDITOR)

    data = resp.get_json()["data"]
    assert len(data["errorList"]) == 10
    assert data["totalErrors"] == 15
    assert data["missingEmployees"].endswith("and 10 more")


def test_bulk_validation_errors(client):
    resp = client.post("/api/attendance/bulk", json={"date": "2025-13-45", "records": [{}]}, headers=EDITOR)
    assert resp.status_code == 400

    resp = client.post("/api/attendance/bulk", data="nope", headers=EDITOR)
    assert resp.status_code == 400

    too_many = [{"employeeId": emp_id(1)}] * 1001
    resp = client.post("/api/attendance/bulk", json={"date": "2025-06-10", "records": too_many}, headers=EDITOR)
    assert resp.status_code == 400


def test_bulk_storage_failure_is_500(client, attendance):
    attendance.fail_for.add(emp_id(1))
    resp = client.post(
        "/api/attendance/bulk", json={"date": "2025-06-10", "records": [{"employeeId": emp_id(1)}]}, headers=EDITOR
    )
    assert resp.status_code == 500
    assert "timeElapsed" in resp.get_json()
    assert attendance.store == {}


def test_template_endpoint(client):
    resp = client.get(
        f"/api/attendance/template?date=2025-06-10&areaIds={CULTIVO_1.area_id},{POSTCOSECHA.area_id}",
        headers=EDITOR,
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["meta"]["totalEmployees"] == 8
    area = body["data"]["areas"][0]
    assert area["defaultEntryTime"] == "06:30"
    defaults = area["employees"][0]["defaultValues"]
    assert defaults["foodAllowance"]["breakfast"] == 1
    assert defaults["isVacation"] is False


def test_template_missing_area_is_404(client):
    resp = client.get(
        "/api/attendance/template?date=2025-06-10&areaIds=0b8f6c1e-3a51-4c0e-9f0a-1c2d3e4f5aff", headers=EDITOR
    )
    assert resp.status_code == 404


def test_verify_and_daily_summary(client):
    client.post(
        "/api/attendance/bulk",
        json={"date": "2025-06-10", "records": [{"employeeId": emp_id(1)}, {"employeeId": emp_id(6)}]},
        headers=EDITOR,
    )

    resp = client.get("/api/attendance/verify?date=2025-06-10", headers=EDITOR)
    summary = resp.get_json()["data"]["summary"]
    assert summary["registered"] == 2
    assert summary["totalEmployees"] == 9

    resp = client.get("/api/attendance/daily-summary?date=2025-06-10", headers=EDITOR)
    data = resp.get_json()["data"]
    assert [a["areaName"] for a in data["areaStats"]] == ["CULTIVO 1", "POSTCOSECHA"]
    assert data["summary"]["registeredEmployees"] == 2


def test_period_summary_open_to_viewers(client):
    resp = client.get("/api/attendance/period-summary?date=2025-06-10", headers=VIEWER)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["startDate"] == "2025-05-26"


def test_period_export_is_csv(client):
    client.post(
        "/api/attendance/bulk", json={"date": "2025-06-10", "records": [{"employeeId": emp_id(1)}]}, headers=EDITOR
    )
    resp = client.get("/api/attendance/period-summary/export?date=2025-06-10", headers=EDITOR)

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    text = resp.data.decode("utf-8-sig")
    assert text.splitlines()[0].startswith("employeeId,identification,fullName")
    assert emp_id(1) in text



class UnreachableDatabase:
    def connect(self, *, with_database=True):
        raise mysql.connector.InterfaceError(msg="Lost connection to MySQL server", errno=errorcode.CR_SERVER_LOST)


def test_bulk_lookup_failure_is_500_with_elapsed_time(areas, attendance, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    container = wire_services(
        areas_repo=areas,
        employees_repo=MySQLEmployeeRepository(UnreachableDatabase()),
        attendance_repo=attendance,
    )
    client = create_app(container).test_client()

    resp = client.post(
        "/api/attendance/bulk", json={"date": "2025-06-10", "records": [{"employeeId": emp_id(1)}]}, headers=EDITOR
    )

    assert resp.status_code == 500
    body = resp.get_json()
    assert body["success"] is False
    assert "timeElapsed" in body
    assert attendance.transactions == 0
