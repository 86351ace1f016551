"""Tests for device dashboard endpoints."""

from datetime import timedelta

from update_manager.core.time import utcnow
from update_manager.db.models import Device, DeviceHeartbeat, UpdateRecord
from update_manager.domain.devices import device_key


def add_device(db_session, hostname, *, status="compliant", last_seen=None, tenant_id=1, **counts):
    device = Device(
        device_key=device_key(tenant_id, None, hostname),
        hostname=hostname,
        os_name="Windows",
        os_version="10.0.19045",
        compliance_status=status,
        last_seen=last_seen,
        tenant_id=tenant_id,
        pending_critical_count=counts.get("critical", 0),
        pending_total_count=counts.get("pending", 0),
        failed_updates_count=counts.get("failed", 0),
    )
    db_session.add(device)
    db_session.commit()
    db_session.refresh(device)
    return device


def test_dashboard_requires_token(client):
    response = client.get("/api/v1/devices")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized: Missing API key"}


def test_agent_token_not_accepted_on_dashboard(client, agent_headers):
    response = client.get("/api/v1/devices", headers=agent_headers)
    assert response.status_code == 401


def test_list_devices_most_recent_first(client, db_session, dashboard_headers):
    now = utcnow()
    add_device(db_session, "WS-OLD", last_seen=now - timedelta(days=2))
    add_device(db_session, "WS-NEW", last_seen=now)
    add_device(db_session, "WS-NEVER")

    data = client.get("/api/v1/devices", headers=dashboard_headers).json()
    assert data["total"] == 3
    assert [device["hostname"] for device in data["devices"]] == ["WS-NEW", "WS-OLD", "WS-NEVER"]


def test_list_devices_filters(client, db_session, dashboard_headers):
    add_device(db_session, "LAB-01", status="non-compliant")
    add_device(db_session, "LAB-02")
    add_device(db_session, "FRONTDESK-01")
    add_device(db_session, "LAB-03", tenant_id=2)

    data = client.get(
        "/api/v1/devices",
        headers=dashboard_headers,
        params={"search": "lab", "tenant_id": 1},
    ).json()
    assert {device["hostname"] for device in data["devices"]} == {"LAB-01", "LAB-02"}

    data = client.get(
        "/api/v1/devices",
        headers=dashboard_headers,
        params={"compliance_status": "non-compliant"},
    ).json()
    assert [device["hostname"] for device in data["devices"]] == ["LAB-01"]


def test_list_devices_pagination(client, db_session, dashboard_headers):
    for n in range(5):
        add_device(db_session, f"WS-{n}")
    data = client.get(
        "/api/v1/devices", headers=dashboard_headers, params={"skip": 2, "limit": 2}
    ).json()
    assert data["total"] == 5
    assert len(data["devices"]) == 2


def test_compliance_summary(client, db_session, dashboard_headers):
    now = utcnow()
    add_device(db_session, "A", status="compliant", last_seen=now, pending=2)
    add_device(db_session, "B", status="compliant", last_seen=now)
    add_device(db_session, "C", status="non-compliant", last_seen=now, critical=1, pending=3, failed=1)
    add_device(db_session, "D", status="unknown", last_seen=now - timedelta(days=30))

    data = client.get("/api/v1/devices/summary", headers=dashboard_headers).json()
    assert data == {
        "total": 4,
        "compliant": 2,
        "non_compliant": 1,
        "unknown": 1,
        "offline": 1,
        "pending_critical": 1,
        "pending_total": 5,
        "failed_total": 1,
        "compliance_rate": 50,
    }


def test_compliance_summary_empty(client, dashboard_headers):
    data = client.get("/api/v1/devices/summary", headers=dashboard_headers).json()
    assert data["total"] == 0
    assert data["compliance_rate"] == 0


def test_get_device(client, dashboard_headers, test_device):
    response = client.get(f"/api/v1/devices/{test_device.id}", headers=dashboard_headers)
    assert response.status_code == 200
    assert response.json()["hostname"] == "WS-EXISTING"


def test_get_device_not_found(client, dashboard_headers):
    response = client.get("/api/v1/devices/missing", headers=dashboard_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Device not found"}


def test_device_updates_filtered_by_status(client, db_session, dashboard_headers, test_device):
    for kb, status in [("KB1", "pending"), ("KB2", "installed"), ("KB3", "failed")]:
        db_session.add(
            UpdateRecord(device_id=test_device.id, kb_number=kb, status=status, tenant_id=1)
        )
    db_session.commit()

    all_rows = client.get(
        f"/api/v1/devices/{test_device.id}/updates", headers=dashboard_headers
    ).json()
    assert {row["kb_number"] for row in all_rows} == {"KB1", "KB2", "KB3"}

    installed = client.get(
        f"/api/v1/devices/{test_device.id}/updates",
        headers=dashboard_headers,
        params={"status": "installed"},
    ).json()
    assert [row["kb_number"] for row in installed] == ["KB2"]


def test_device_heartbeats(client, db_session, dashboard_headers, test_device):
    now = utcnow()
    for minutes in (3, 2, 1):
        db_session.add(
            DeviceHeartbeat(
                device_id=test_device.id,
                heartbeat_at=now - timedelta(minutes=minutes),
                agent_version="1.0",
                tenant_id=1,
            )
        )
    db_session.commit()

    beats = client.get(
        f"/api/v1/devices/{test_device.id}/heartbeats",
        headers=dashboard_headers,
        params={"limit": 2},
    ).json()
    assert len(beats) == 2
    assert beats[0]["heartbeat_at"] > beats[1]["heartbeat_at"]
    assert beats[0]["status"] == "online"


def test_create_and_list_tasks(client, dashboard_headers, agent_headers, test_device):
    response = client.post(
        f"/api/v1/devices/{test_device.id}/tasks",
        headers=dashboard_headers,
        json={"task_type": "install_updates", "payload": {"kbs": ["KB1"]}},
    )
    assert response.status_code == 201
    task = response.json()
    assert task["status"] == "pending"
    assert task["claim_count"] == 0

    polled = client.post(
        "/api/v1/device-agent",
        headers=agent_headers,
        json={"type": "get_tasks", "device_id": test_device.id},
    ).json()
    assert [t["id"] for t in polled["tasks"]] == [task["id"]]
    assert polled["tasks"][0]["payload"] == {"kbs": ["KB1"]}

    listed = client.get(
        f"/api/v1/devices/{test_device.id}/tasks",
        headers=dashboard_headers,
        params={"status": "in_progress"},
    ).json()
    assert [t["id"] for t in listed] == [task["id"]]


def test_create_task_for_unknown_device(client, dashboard_headers):
    response = client.post(
        "/api/v1/devices/missing/tasks",
        headers=dashboard_headers,
        json={"task_type": "scan"},
    )
    assert response.status_code == 404


def test_list_devices_rejects_unknown_compliance_status(client, dashboard_headers):
    response = client.get(
        "/api/v1/devices",
        headers=dashboard_headers,
        params={"compliance_status": "mostly-fine"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid compliance_status: mostly-fine"}
