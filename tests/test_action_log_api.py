"""
Action log endpoint tests
"""
from datetime import timedelta
from unittest.mock import patch

import pytest

from primecare.core.timeutils import utcnow
from primecare.models import ActionLog, ActionType, ActionChannel
from primecare.services.action_log import create_action_log


@pytest.mark.api
def test_create_action_log(client, make_machine):
    machine = make_machine(sold_days_ago=10)

    response = client.post("/api/v1/actions/log", json={
        "machineId": machine.id,
        "actionType": "WARRANTY_VIEWED",
        "channel": "WEB",
        "metadata": {"source": "qr-code", "campaign": "spring"},
    })

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    log = data["actionLog"]
    assert log["machineId"] == machine.id
    assert log["actionType"] == "WARRANTY_VIEWED"
    assert log["channel"] == "WEB"
    assert log["metadata"] == {"source": "qr-code", "campaign": "spring"}
    assert log["createdAt"]


@pytest.mark.api
def test_create_action_log_defaults_metadata(client, make_machine):
    machine = make_machine()

    response = client.post("/api/v1/actions/log", json={
        "machineId": str(machine.id),
        "actionType": "LINK_CLICKED",
        "channel": "EMAIL",
    })

    assert response.status_code == 200
    assert response.json()["actionLog"]["metadata"] == {}
    assert response.json()["actionLog"]["machineId"] == machine.id


@pytest.mark.api
@pytest.mark.parametrize("payload,message", [
    ({"actionType": "WARRANTY_VIEWED", "channel": "WEB"}, "Missing required fields: machineId, actionType, channel"),
    ({"machineId": 1, "channel": "WEB"}, "Missing required fields: machineId, actionType, channel"),
    ({"machineId": 1, "actionType": "WARRANTY_VIEWED"}, "Missing required fields: machineId, actionType, channel"),
    ({"machineId": 1, "actionType": "BOGUS", "channel": "WEB"}, "Invalid actionType"),
    ({"machineId": 1, "actionType": "WARRANTY_VIEWED", "channel": "PIGEON"}, "Invalid channel"),
    ({"machineId": "abc", "actionType": "WARRANTY_VIEWED", "channel": "WEB"}, "Invalid machineId"),
    ({"machineId": 1, "actionType": "WARRANTY_VIEWED", "channel": "WEB", "metadata": [1, 2]}, "metadata must be an object"),
])
def test_create_action_log_validation(client, payload, message):
    response = client.post("/api/v1/actions/log", json=payload)

    assert response.status_code == 400
    assert response.json()["error"].startswith(message)


@pytest.mark.api
def test_invalid_action_type_lists_valid_values(client):
    response = client.post("/api/v1/actions/log", json={
        "machineId": 1,
        "actionType": "BOGUS",
        "channel": "WEB",
    })

    assert response.status_code == 400
    error = response.json()["error"]
    for action_type in ActionType:
        assert action_type.value in error


@pytest.mark.api
def test_reminder_sent_metadata_is_typed(client, make_machine):
    machine = make_machine(sold_days_ago=10)

    response = client.post("/api/v1/actions/log", json={
        "machineId": machine.id,
        "actionType": "REMINDER_SENT",
        "channel": "EMAIL",
        "metadata": {"daysUntilService": "soon"},
    })

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid metadata for REMINDER_SENT")


@pytest.mark.api
def test_create_action_log_database_error(client, make_machine):
    machine = make_machine()

    with patch("primecare.api.v1.endpoints.actions.create_action_log", side_effect=RuntimeError("db down")):
        response = client.post("/api/v1/actions/log", json={
            "machineId": machine.id,
            "actionType": "EMAIL_OPENED",
            "channel": "EMAIL",
        })

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create action log"}


@pytest.mark.api
def test_list_action_logs_filters_and_orders(client, make_machine, test_db):
    first = make_machine()
    second = make_machine()
    now = utcnow()
    create_action_log(test_db, first.id, ActionType.WARRANTY_VIEWED, ActionChannel.WEB, created_at=now - timedelta(hours=2))
    create_action_log(test_db, first.id, ActionType.REMINDER_SENT, ActionChannel.EMAIL, created_at=now - timedelta(hours=1))
    create_action_log(test_db, second.id, ActionType.REMINDER_SENT, ActionChannel.EMAIL, created_at=now)

    data = client.get("/api/v1/actions/log").json()
    assert data["count"] == 3
    assert [log["machineId"] for log in data["actionLogs"]] == [second.id, first.id, first.id]

    data = client.get(f"/api/v1/actions/log?machineId={first.id}").json()
    assert data["count"] == 2
    assert data["actionLogs"][0]["actionType"] == "REMINDER_SENT"

    data = client.get("/api/v1/actions/log?actionType=REMINDER_SENT").json()
    assert data["count"] == 2
    assert {log["machineId"] for log in data["actionLogs"]} == {first.id, second.id}


@pytest.mark.api
def test_list_action_logs_date_range(client, make_machine, test_db):
    machine = make_machine()
    now = utcnow()
    for days_ago in (10, 5, 1):
        create_action_log(test_db, machine.id, ActionType.EMAIL_OPENED, ActionChannel.EMAIL, created_at=now - timedelta(days=days_ago))

    since = (now - timedelta(days=7)).isoformat()
    until = (now - timedelta(days=2)).isoformat()
    data = client.get("/api/v1/actions/log", params={"since": since, "until": until}).json()

    assert data["count"] == 1


@pytest.mark.api
def test_list_action_logs_limit_is_capped(client, make_machine, test_db):
    machine = make_machine()
    for _ in range(105):
        create_action_log(test_db, machine.id, ActionType.WARRANTY_VIEWED, ActionChannel.WEB)

    assert client.get("/api/v1/actions/log").json()["count"] == 50
    assert client.get("/api/v1/actions/log?limit=500").json()["count"] == 100
    assert client.get("/api/v1/actions/log?limit=5").json()["count"] == 5
    assert client.get("/api/v1/actions/log?limit=0").json()["count"] == 1


@pytest.mark.api
def test_list_action_logs_rejects_unknown_type(client):
    response = client.get("/api/v1/actions/log?actionType=BOGUS")

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid actionType")


@pytest.mark.api
def test_create_action_log_for_unknown_machine(client, make_machine, test_db):
    response = client.post("/api/v1/actions/log", json={
        "machineId": 9999,
        "actionType": "WARRANTY_VIEWED",
        "channel": "WEB",
    })

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create action log"}
    assert test_db.query(ActionLog).count() == 0

    machine = make_machine()
    response = client.post("/api/v1/actions/log", json={
        "machineId": machine.id,
        "actionType": "WARRANTY_VIEWED",
        "channel": "WEB",
    })
    assert response.status_code == 200
    assert test_db.query(ActionLog).count() == 1
