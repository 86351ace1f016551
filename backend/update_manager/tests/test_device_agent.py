"""Tests for the multiplexed device-agent endpoint."""

from datetime import timedelta

from prometheus_client import REGISTRY

from update_manager.core.time import utcnow
from update_manager.db.models import Device, DeviceHeartbeat, DeviceTask, UpdateRecord

AGENT_URL = "/api/v1/device-agent"


class TestHeartbeat:
    def test_heartbeat_creates_device_by_hostname(self, client, db_session, agent_headers):
        response = client.post(
            AGENT_URL,
            headers=agent_headers,
            json={
                "type": "heartbeat",
                "agent_version": "1.4.0",
                "device_info": {
                    "hostname": "WS-77",
                    "serial_number": "SN-77",
                    "os_version": "10.0.22631",
                    "os_build": "22631.3447",
                },
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Heartbeat received"

        device = db_session.get(Device, data["device_id"])
        assert device.hostname == "WS-77"
        assert device.serial_number == "SN-77"
        assert device.os_build == "22631.3447"
        assert device.agent_version == "1.4.0"
        assert device.compliance_status == "unknown"
        assert device.last_seen is not None

        (beat,) = db_session.query(DeviceHeartbeat).all()
        assert beat.device_id == device.id
        assert beat.status == "online"
        assert beat.agent_version == "1.4.0"

    def test_repeated_heartbeats_reuse_device(self, client, db_session, agent_headers):
        body = {"type": "heartbeat", "device_info": {"hostname": "WS-77"}}
        first = client.post(AGENT_URL, headers=agent_headers, json=body).json()
        second = client.post(AGENT_URL, headers=agent_headers, json=body).json()

        assert first["device_id"] == second["device_id"]
        assert db_session.query(Device).count() == 1
        assert db_session.query(DeviceHeartbeat).count() == 2

    def test_heartbeat_matches_ingested_device(self, client, db_session, agent_headers):
        ingested = client.post(
            "/api/v1/ingest-device-updates",
            headers=agent_headers,
            json={"hostname": "WS-01", "os_version": "10.0.19045"},
        ).json()
        beat = client.post(
            AGENT_URL,
            headers=agent_headers,
            json={"type": "heartbeat", "device_info": {"hostname": "WS-01"}},
        ).json()

        assert beat["device_id"] == ingested["device_id"]
        db_session.expire_all()
        assert db_session.get(Device, beat["device_id"]).os_version == "10.0.19045"

    def test_heartbeat_with_device_id(self, client, db_session, agent_headers, test_device):
        response = client.post(
            AGENT_URL,
            headers=agent_headers,
            json={
                "type": "heartbeat",
                "device_id": test_device.id,
                "agent_version": "2.0.0",
                "device_info": {"os_build": "19045.4291"},
            },
        )
        assert response.status_code == 200
        assert response.json()["device_id"] == test_device.id

        db_session.expire_all()
        device = db_session.get(Device, test_device.id)
        assert device.agent_version == "2.0.0"
        assert device.os_build == "19045.4291"
        assert device.os_version == "10.0.19045"

    def test_heartbeat_unknown_device_id(self, client, agent_headers):
        response = client.post(
            AGENT_URL, headers=agent_headers, json={"type": "heartbeat", "device_id": "nope"}
        )
        assert response.status_code == 404

    def test_heartbeat_requires_hostname_without_device_id(
        self, client, db_session, agent_headers
    ):
        response = client.post(AGENT_URL, headers=agent_headers, json={"type": "heartbeat"})
        assert response.status_code == 400
        assert db_session.query(DeviceHeartbeat).count() == 0


class TestUpdateData:
    def test_update_data_recomputes_compliance(
        self, client, db_session, agent_headers, test_device
    ):
        response = client.post(
            AGENT_URL,
            headers=agent_headers,
            json={
                "type": "update_data",
                "device_id": test_device.id,
                "pending_updates": [{"kb_number": "KB1", "title": "A", "severity": "Low"}],
                "failed_updates": [{"kb_number": "KB2", "title": "B"}],
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["compliance_status"] == "non-compliant"
        assert data["hostname"] == "WS-EXISTING"
        assert data["updates_processed"] == 2

        db_session.expire_all()
        device = db_session.get(Device, test_device.id)
        assert device.failed_updates_count == 1
        assert device.last_update_scan is not None
        statuses = {row.kb_number: row.status for row in db_session.query(UpdateRecord).all()}
        assert statuses == {"KB1": "pending", "KB2": "failed"}

    def test_update_data_requires_device_id(self, client, agent_headers):
        response = client.post(AGENT_URL, headers=agent_headers, json={"type": "update_data"})
        assert response.status_code == 400

    def test_update_data_unknown_device(self, client, agent_headers):
        response = client.post(
            AGENT_URL, headers=agent_headers, json={"type": "update_data", "device_id": "nope"}
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Device not found"}


class TestTasks:
    def test_get_tasks_twice_returns_n_then_zero(
        self, client, db_session, agent_headers, test_device, pending_tasks
    ):
        body = {"type": "get_tasks", "device_id": test_device.id}

        first = client.post(AGENT_URL, headers=agent_headers, json=body).json()
        assert first["success"] is True
        assert [task["id"] for task in first["tasks"]] == [task.id for task in pending_tasks]
        # Pre-claim snapshot
        assert all(task["status"] == "pending" for task in first["tasks"])

        db_session.expire_all()
        stored = db_session.query(DeviceTask).all()
        assert {task.status for task in stored} == {"in_progress"}
        assert all(task.started_at is not None for task in stored)
        assert all(task.claim_count == 1 for task in stored)

        second = client.post(AGENT_URL, headers=agent_headers, json=body).json()
        assert second["tasks"] == []

    def test_expired_lease_is_reclaimed(
        self, client, db_session, agent_headers, test_device, pending_tasks
    ):
        body = {"type": "get_tasks", "device_id": test_device.id}
        client.post(AGENT_URL, headers=agent_headers, json=body)

        stuck = db_session.get(DeviceTask, pending_tasks[0].id)
        stuck.claimed_at = utcnow() - timedelta(hours=2)
        db_session.commit()

        again = client.post(AGENT_URL, headers=agent_headers, json=body).json()
        assert [task["id"] for task in again["tasks"]] == [stuck.id]
        assert again["tasks"][0]["status"] == "in_progress"

        db_session.expire_all()
        assert db_session.get(DeviceTask, stuck.id).claim_count == 2

    def test_reclaim_disabled_with_zero_timeout(
        self, client, db_session, agent_headers, test_settings, test_device, pending_tasks
    ):
        test_settings.task_claim_timeout_seconds = 0
        body = {"type": "get_tasks", "device_id": test_device.id}
        client.post(AGENT_URL, headers=agent_headers, json=body)

        stuck = db_session.get(DeviceTask, pending_tasks[0].id)
        stuck.claimed_at = utcnow() - timedelta(days=3)
        db_session.commit()

        assert client.post(AGENT_URL, headers=agent_headers, json=body).json()["tasks"] == []

    def test_get_tasks_requires_device_id(self, client, agent_headers):
        response = client.post(AGENT_URL, headers=agent_headers, json={"type": "get_tasks"})
        assert response.status_code == 400

    def test_task_result_is_recorded_verbatim(
        self, client, db_session, agent_headers, test_device, pending_tasks
    ):
        task_id = pending_tasks[1].id
        response = client.post(
            AGENT_URL,
            headers=agent_headers,
            json={
                "type": "task_result",
                "task_id": task_id,
                "status": "completed_with_warnings",
                "result": {"installed": ["KB1"], "reboot_required": True},
                "error_message": None,
            },
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Task result recorded"}

        db_session.expire_all()
        task = db_session.get(DeviceTask, task_id)
        assert task.status == "completed_with_warnings"
        assert task.result == {"installed": ["KB1"], "reboot_required": True}
        assert task.completed_at is not None

    def test_unrecognised_result_status_is_labelled_other(
        self, client, agent_headers, pending_tasks
    ):
        def results(status):
            labels = {"status": status}
            return REGISTRY.get_sample_value("updmgr_task_results_total", labels) or 0.0

        other_before = results("other")
        completed_before = results("completed")
        for task, status in zip(pending_tasks, ["rebooting-0", "rebooting-1", "completed"]):
            client.post(
                AGENT_URL,
                headers=agent_headers,
                json={"type": "task_result", "task_id": task.id, "status": status},
            )

        assert results("other") == other_before + 2
        assert results("completed") == completed_before + 1
        raw = REGISTRY.get_sample_value("updmgr_task_results_total", {"status": "rebooting-0"})
        assert raw is None

    def test_task_result_unknown_task(self, client, agent_headers):
        response = client.post(
            AGENT_URL,
            headers=agent_headers,
            json={"type": "task_result", "task_id": "nope", "status": "completed"},
        )
        assert response.status_code == 404

    def test_task_result_for_other_device(
        self, client, agent_headers, test_device, pending_tasks
    ):
        response = client.post(
            AGENT_URL,
            headers=agent_headers,
            json={
                "type": "task_result",
                "task_id": pending_tasks[0].id,
                "device_id": "some-other-device",
                "status": "completed",
            },
        )
        assert response.status_code == 404

    def test_task_result_requires_status(self, client, agent_headers, pending_tasks):
        response = client.post(
            AGENT_URL,
            headers=agent_headers,
            json={"type": "task_result", "task_id": pending_tasks[0].id},
        )
        assert response.status_code == 400


class TestDispatch:
    def test_unknown_type(self, client, agent_headers):
        response = client.post(AGENT_URL, headers=agent_headers, json={"type": "reboot_now"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request type"}

    def test_missing_type(self, client, agent_headers):
        response = client.post(AGENT_URL, headers=agent_headers, json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request type"}

    def test_unauthorized_get_tasks_leaves_queue_untouched(
        self, client, db_session, test_device, pending_tasks
    ):
        response = client.post(
            AGENT_URL,
            headers={"Authorization": "Bearer wrong"},
            json={"type": "get_tasks", "device_id": test_device.id},
        )
        assert response.status_code == 401
        db_session.expire_all()
        assert {task.status for task in db_session.query(DeviceTask).all()} == {"pending"}

    def test_options_preflight(self, client):
        response = client.options(AGENT_URL)
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.content == b""

    def test_browser_preflight_gets_empty_body(self, client):
        response = client.options(
            AGENT_URL,
            headers={
                "Origin": "https://agent-console.example",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.content == b""

    def test_rejected_requests_carry_cors_headers(self, client, agent_headers):
        unauthorized = client.post(AGENT_URL, json={"type": "heartbeat"})
        unknown_type = client.post(AGENT_URL, headers=agent_headers, json={"type": "reboot_now"})

        assert unauthorized.status_code == 401
        assert unauthorized.headers["access-control-allow-origin"] == "*"
        assert unknown_type.status_code == 400
        assert unknown_type.headers["access-control-allow-origin"] == "*"
