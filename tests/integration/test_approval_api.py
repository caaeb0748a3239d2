"""End-to-end tests for the approval workflow over HTTP.

Covers:
1. Submit -> approve, with notifications to the owner
2. Submit -> reject -> resubmit for funding applications
3. Status codes for authorization, validation and state errors
4. Investor visibility and pledges
5. Audit log, notifications and role endpoints
6. Slow notification sinks do not stall other requests
"""

import threading
import time

import pytest

from portal.api.deps import get_dispatcher
from portal.api.main import app
from portal.db.models import AuditLog, Notification
from portal.services.notifications import NotificationDispatcher, NotificationSink

from tests.factories import create_notification, funding_payload, ip_record_payload, project_payload


pytestmark = pytest.mark.integration


class TestAuthentication:

    def test_missing_token(self, client):
        assert client.get("/api/projects").status_code == 401

    def test_invalid_token(self, client):
        response = client.get("/api/projects", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_inactive_user(self, client, db_session, users, auth_headers):
        users["innovator"].is_active = False
        db_session.commit()
        assert client.get("/api/projects", headers=auth_headers["innovator"]).status_code == 401


class TestProjectFlow:

    def test_submit_and_approve(self, client, db_session, users, auth_headers):
        response = client.post(
            "/api/projects",
            json=project_payload(title="X", funding_needed=100000),
            headers=auth_headers["innovator"],
        )
        assert response.status_code == 201
        project = response.json()
        assert project["approval_status"] == "pending"
        assert project["owner_id"] == users["innovator"].id
        assert project["owner_name"] == "Alice Innovator"

        response = client.put(f"/api/projects/{project['id']}/approve", headers=auth_headers["admin"])
        assert response.status_code == 200
        approved = response.json()
        assert approved["approval_status"] == "approved"
        assert approved["approved_by"] == users["admin"].id

        # Owner was told about the decision; reviewers about the submission
        owner_notes = db_session.query(Notification).filter(Notification.user_id == users["innovator"].id).all()
        assert [n.title for n in owner_notes] == ["Project Approved"]
        admin_notes = db_session.query(Notification).filter(Notification.user_id == users["admin"].id).all()
        assert [n.title for n in admin_notes] == ["New Project Submission"]

        actions = [row.action for row in db_session.query(AuditLog).order_by(AuditLog.id)]
        assert actions == ["submit", "approve"]

    def test_second_decision_conflicts(self, client, auth_headers):
        project = client.post("/api/projects", json=project_payload(), headers=auth_headers["innovator"]).json()
        client.put(f"/api/projects/{project['id']}/approve", headers=auth_headers["admin"])

        response = client.put(
            f"/api/projects/{project['id']}/reject",
            json={"reason": "late"},
            headers=auth_headers["superAdmin"],
        )
        assert response.status_code == 409
        assert "approved" in response.json()["detail"]

    def test_reject_requires_reason(self, client, auth_headers):
        project = client.post("/api/projects", json=project_payload(), headers=auth_headers["innovator"]).json()
        response = client.put(f"/api/projects/{project['id']}/reject", json={}, headers=auth_headers["admin"])
        assert response.status_code == 400
        assert response.json() == {"detail": "A reason is required to reject"}

    def test_innovator_cannot_approve(self, client, auth_headers):
        project = client.post("/api/projects", json=project_payload(), headers=auth_headers["other_innovator"]).json()
        response = client.put(f"/api/projects/{project['id']}/approve", headers=auth_headers["innovator"])
        assert response.status_code == 403

    def test_validation_error(self, client, auth_headers):
        response = client.post("/api/projects", json={"title": "X"}, headers=auth_headers["innovator"])
        assert response.status_code == 400
        assert "description" in response.json()["detail"]

    def test_not_found(self, client, auth_headers):
        response = client.get("/api/projects/999", headers=auth_headers["admin"])
        assert response.status_code == 404
        assert response.json()["detail"] == "Project 999 not found"

    def test_edit_and_status(self, client, auth_headers):
        project = client.post("/api/projects", json=project_payload(), headers=auth_headers["innovator"]).json()
        response = client.put(
            f"/api/projects/{project['id']}",
            json={"title": "Better title"},
            headers=auth_headers["innovator"],
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Better title"

        response = client.put(
            f"/api/projects/{project['id']}/status",
            json={"status": "on_progress"},
            headers=auth_headers["admin"],
        )
        assert response.status_code == 409

        client.put(f"/api/projects/{project['id']}/approve", headers=auth_headers["admin"])
        response = client.put(
            f"/api/projects/{project['id']}/status",
            json={"status": "on_progress"},
            headers=auth_headers["admin"],
        )
        assert response.status_code == 200
        assert response.json()["project_status"] == "on_progress"

        response = client.put(
            f"/api/projects/{project['id']}",
            json={"title": "Too late"},
            headers=auth_headers["innovator"],
        )
        assert response.status_code == 409

    def test_history_and_delete(self, client, auth_headers):
        project = client.post("/api/projects", json=project_payload(), headers=auth_headers["innovator"]).json()
        client.put(f"/api/projects/{project['id']}/reject", json={"reason": "x"}, headers=auth_headers["admin"])

        history = client.get(f"/api/projects/{project['id']}/history", headers=auth_headers["innovator"]).json()
        assert [h["transition"] for h in history] == ["submit", "reject"]
        assert history[1]["comment"] == "x"

        assert client.delete(f"/api/projects/{project['id']}", headers=auth_headers["innovator"]).status_code == 403
        assert client.delete(f"/api/projects/{project['id']}", headers=auth_headers["admin"]).status_code == 204
        assert client.get(f"/api/projects/{project['id']}", headers=auth_headers["admin"]).status_code == 404


class TestFundingFlow:

    def test_reject_and_resubmit(self, client, auth_headers):
        funding = client.post(
            "/api/funding", json=funding_payload(amount=500000), headers=auth_headers["innovator"],
        ).json()

        response = client.put(
            f"/api/funding/{funding['id']}/reject",
            json={"reason": "insufficient budget"},
            headers=auth_headers["ipManager"],
        )
        assert response.status_code == 200
        assert response.json()["rejection_reason"] == "insufficient budget"

        response = client.put(
            f"/api/funding/{funding['id']}/resubmit",
            json={"amount": 300000},
            headers=auth_headers["admin"],
        )
        assert response.status_code == 403

        response = client.put(
            f"/api/funding/{funding['id']}/resubmit",
            json={"amount": 300000},
            headers=auth_headers["innovator"],
        )
        assert response.status_code == 200
        body = response.json()
        assert body["approval_status"] == "pending"
        assert body["rejection_reason"] is None
        assert body["amount"] == 300000

        response = client.put(f"/api/funding/{funding['id']}/resubmit", headers=auth_headers["innovator"])
        assert response.status_code == 409

    def test_approve_with_amount_and_pledge(self, client, auth_headers):
        funding = client.post(
            "/api/funding", json=funding_payload(amount=500000), headers=auth_headers["innovator"],
        ).json()

        response = client.post(f"/api/funding/{funding['id']}/pledge", json={"amount": 1000}, headers=auth_headers["investor"])
        assert response.status_code == 409

        response = client.put(
            f"/api/funding/{funding['id']}/approve",
            json={"amount_approved": 400000, "comments": "Phase one"},
            headers=auth_headers["admin"],
        )
        assert response.status_code == 200
        assert response.json()["amount_approved"] == 400000
        assert response.json()["funding_status"] == "approved"

        response = client.post(
            f"/api/funding/{funding['id']}/pledge",
            json={"amount": 1000, "note": "Count me in"},
            headers=auth_headers["investor"],
        )
        assert response.status_code == 201
        assert response.json()["total_pledged"] == 1000
        assert response.json()["pledge"]["note"] == "Count me in"

        response = client.post(f"/api/funding/{funding['id']}/pledge", json={"amount": 5}, headers=auth_headers["innovator"])
        assert response.status_code == 403

    def test_investor_cannot_approve(self, client, auth_headers):
        funding = client.post("/api/funding", json=funding_payload(), headers=auth_headers["innovator"]).json()
        response = client.put(f"/api/funding/{funding['id']}/approve", headers=auth_headers["investor"])
        assert response.status_code == 403

    def test_investor_listing(self, client, auth_headers):
        pending = client.post("/api/funding", json=funding_payload(), headers=auth_headers["innovator"]).json()
        approved = client.post("/api/funding", json=funding_payload(), headers=auth_headers["innovator"]).json()
        client.put(f"/api/funding/{approved['id']}/approve", headers=auth_headers["admin"])

        page = client.get("/api/funding", headers=auth_headers["investor"]).json()
        assert page["total"] == 1
        assert page["items"][0]["id"] == approved["id"]
        assert client.get(f"/api/funding/{pending['id']}", headers=auth_headers["investor"]).status_code == 403

    def test_pending_queue_and_summary(self, client, auth_headers):
        client.post("/api/funding", json=funding_payload(), headers=auth_headers["innovator"])
        queue = client.get("/api/funding/pending", headers=auth_headers["ipManager"])
        assert queue.status_code == 200
        assert len(queue.json()) == 1

        summary = client.get("/api/funding/summary", headers=auth_headers["admin"]).json()
        assert summary["by_approval_status"]["pending"] == 1
        assert client.get("/api/funding/pending", headers=auth_headers["innovator"]).status_code == 403


class TestIPRecords:

    def test_ip_manager_reviews(self, client, auth_headers):
        record = client.post("/api/ip-records", json=ip_record_payload(), headers=auth_headers["innovator"])
        assert record.status_code == 201
        record = record.json()
        assert record["status"] == "Submitted"

        response = client.put(f"/api/ip-records/{record['id']}/approve", headers=auth_headers["ipManager"])
        assert response.status_code == 200

        response = client.put(
            f"/api/ip-records/{record['id']}/status",
            json={"status": "Patent Granted"},
            headers=auth_headers["ipManager"],
        )
        assert response.json()["status"] == "Patent Granted"

    def test_list_filters(self, client, auth_headers):
        client.post("/api/ip-records", json=ip_record_payload(title="Beehive frame"), headers=auth_headers["innovator"])
        client.post("/api/ip-records", json=ip_record_payload(title="Water filter"), headers=auth_headers["innovator"])
        page = client.get("/api/ip-records", params={"search": "beehive"}, headers=auth_headers["admin"]).json()
        assert [i["title"] for i in page["items"]] == ["Beehive frame"]
        page = client.get("/api/ip-records", params={"status": "Granted"}, headers=auth_headers["admin"]).json()
        assert page["total"] == 0


class TestNotifications:

    def test_list_and_mark_read(self, client, db_session, users, auth_headers):
        owner = users["innovator"]
        first = create_notification(db_session, user=owner)
        create_notification(db_session, user=owner, title="Project Rejected", type="warning")
        other = create_notification(db_session, user=users["admin"])
        db_session.commit()

        body = client.get("/api/notifications", headers=auth_headers["innovator"]).json()
        assert body["unread"] == 2
        assert len(body["items"]) == 2

        response = client.put(f"/api/notifications/{first.id}/read", headers=auth_headers["innovator"])
        assert response.status_code == 200
        assert response.json()["read"] is True

        response = client.put(f"/api/notifications/{other.id}/read", headers=auth_headers["innovator"])
        assert response.status_code == 404

        response = client.put("/api/notifications/mark-all-read", headers=auth_headers["innovator"])
        assert response.json()["data"] == {"updated": 1}
        assert client.get("/api/notifications", headers=auth_headers["innovator"]).json()["unread"] == 0

        assert client.delete(f"/api/notifications/{first.id}", headers=auth_headers["innovator"]).status_code == 204


class TestAuditAndRoles:

    def test_audit_logs_admin_only(self, client, auth_headers):
        client.post("/api/projects", json=project_payload(), headers=auth_headers["innovator"])

        assert client.get("/api/audit-logs", headers=auth_headers["ipManager"]).status_code == 403

        page = client.get("/api/audit-logs", params={"action": "submit"}, headers=auth_headers["admin"]).json()
        assert page["total"] == 1
        entry = page["items"][0]
        assert entry["resource_type"] == "project"

        response = client.get(f"/api/audit-logs/{entry['id']}", headers=auth_headers["superAdmin"])
        assert response.status_code == 200

    def test_search_matches_wildcards_literally(self, client, auth_headers):
        client.post("/api/projects", json=project_payload(), headers=auth_headers["innovator"])
        client.post("/api/funding", json=funding_payload(), headers=auth_headers["innovator"])

        page = client.get("/api/audit-logs", params={"search": "_"}, headers=auth_headers["admin"]).json()
        assert [e["resource_type"] for e in page["items"]] == ["funding_application"]

        page = client.get("/api/audit-logs", params={"search": "%"}, headers=auth_headers["admin"]).json()
        assert page["total"] == 0

    def test_roles(self, client, auth_headers):
        roles = client.get("/api/roles", headers=auth_headers["innovator"]).json()
        assert [r["key"] for r in roles][0] == "superAdmin"

        me = client.get("/api/roles/me", headers=auth_headers["ipManager"]).json()
        assert me["role"] == "ipManager"
        assert "approve" in me["capabilities"]["ip_record"]
        assert "approve" not in me["capabilities"]["project"]


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["checks"]["database"]["status"] == "healthy"


class BlockingSink(NotificationSink):
    """Holds up delivery until released, like a slow webhook."""

    name = "blocking"

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()

    def emit(self, event):
        self.started.set()
        self.release.wait(5)


class TestSlowSinks:

    def test_other_requests_are_served_while_a_sink_blocks(self, client, auth_headers):
        sink = BlockingSink()
        app.dependency_overrides[get_dispatcher] = lambda: NotificationDispatcher([sink])
        responses = {}

        def submit():
            responses["submit"] = client.post(
                "/api/projects", json=project_payload(), headers=auth_headers["innovator"],
            )

        worker = threading.Thread(target=submit)
        worker.start()
        try:
            assert sink.started.wait(5)
            started = time.monotonic()
            health = client.get("/health")
            elapsed = time.monotonic() - started
        finally:
            sink.release.set()
            worker.join(5)
            app.dependency_overrides.pop(get_dispatcher, None)

        assert health.status_code == 200
        assert elapsed < 1
        assert responses["submit"].status_code == 201
