"""
Integration Tests for API Endpoints
Tests the HTTP surface: programs, resources, downloads, dashboard, contact and health
"""
import pytest
from faker import Faker
from fastapi.testclient import TestClient

from catalog.core.exceptions import StorageError
from catalog.models.download import Download
from catalog.models.resource import Resource
from catalog.utils import db_utils

fake = Faker()

PDF_BYTES = b"%PDF-1.4" + b"0" * 1016


def _upload(client: TestClient, headers, program_id, semester=2, title="X",
            resource_type="previous_year_papers", filename="paper.pdf", content=PDF_BYTES):
    data = {"semester": str(semester), "title": title, "type": resource_type}
    if program_id is not None:
        data["program_id"] = str(program_id)
    return client.post(
        "/api/resources/upload",
        files={"file": (filename, content, "application/pdf")},
        data=data,
        headers=headers,
    )


class TestProgramEndpoints:
    """Integration tests for program listing"""

    def test_list_programs_public(self, client, make_program):
        """Test programs are listed without authentication, undergraduate first"""
        make_program(name="MBA", program_type="postgraduate")
        make_program(name="BCA", semesters=6, specializations=[])

        response = client.get("/api/programs")

        assert response.status_code == 200
        data = response.json()
        assert [p["name"] for p in data] == ["BCA", "MBA"]
        assert data[0]["type"] == "undergraduate"
        assert data[0]["semesters"] == 6
        assert data[0]["specializations"] == []

    def test_empty_catalog(self, client):
        response = client.get("/api/programs")

        assert response.status_code == 200
        assert response.json() == []


class TestUploadEndpoint:
    """Integration tests for resource upload"""

    def test_upload_requires_auth(self, client, program, object_store):
        response = _upload(client, {}, program.id)

        assert response.status_code == 401
        assert object_store.store_calls == 0

    def test_upload_requires_admin(self, client, program, student_headers, object_store):
        response = _upload(client, student_headers, program.id)

        assert response.status_code == 403
        assert object_store.store_calls == 0

    def test_upload_success(self, client, program, admin_headers, object_store):
        response = _upload(client, admin_headers, program.id, semester=2, title="Maths 2023")

        assert response.status_code == 201
        data = response.json()
        assert data["semester"] == 2
        assert data["title"] == "Maths 2023"
        assert data["type"] == "previous_year_papers"
        assert data["file_size"] == "0.00 MB"
        assert data["program"]["id"] == program.id
        assert data["file_url"].startswith("https://blobs.test/resources/")
        assert len(object_store.blobs) == 1

    def test_semester_out_of_range(self, client, db_session, program, admin_headers):
        response = _upload(client, admin_headers, program.id, semester=5)

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "semester out of range"
        assert body["code"] == "VALIDATION_ERROR"
        assert db_session.query(Resource).count() == 0

    def test_missing_program_id(self, client, admin_headers):
        response = _upload(client, admin_headers, None)

        assert response.status_code == 400
        assert response.json()["detail"] == "missing required field"

    def test_unknown_program(self, client, admin_headers):
        response = _upload(client, admin_headers, 999)

        assert response.status_code == 400
        assert response.json()["detail"] == "unknown program"

    def test_invalid_type(self, client, program, admin_headers):
        response = _upload(client, admin_headers, program.id, resource_type="video")

        assert response.status_code == 400
        assert response.json()["detail"] == "invalid resource type"

    def test_storage_failure_is_502(self, client, db_session, program, admin_headers, object_store):
        object_store.fail_store = StorageError("bucket unavailable")

        response = _upload(client, admin_headers, program.id)

        assert response.status_code == 502
        assert response.json()["code"] == "STORAGE_ERROR"
        assert db_session.query(Resource).count() == 0


class TestListResourcesEndpoint:
    """Integration tests for resource listing"""

    @pytest.fixture
    def catalog(self, client, make_program, admin_headers):
        btech = make_program(name="B.Tech", semesters=8)
        mba = make_program(name="MBA", program_type="postgraduate")
        ids = {
            "btech_1": _upload(client, admin_headers, btech.id, semester=1).json()["id"],
            "btech_2": _upload(client, admin_headers, btech.id, semester=2).json()["id"],
            "mba_2": _upload(client, admin_headers, mba.id, semester=2).json()["id"],
        }
        return btech, mba, ids

    def test_list_all_newest_first(self, client, catalog):
        _, _, ids = catalog

        response = client.get("/api/resources")

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [ids["mba_2"], ids["btech_2"], ids["btech_1"]]

    def test_filter_by_program(self, client, catalog):
        btech, _, ids = catalog

        response = client.get("/api/resources", params={"program_id": btech.id})

        assert [r["id"] for r in response.json()] == [ids["btech_2"], ids["btech_1"]]

    def test_filter_by_program_and_semester(self, client, catalog):
        btech, _, ids = catalog

        response = client.get("/api/resources", params={"program_id": btech.id, "semester": 2})

        assert [r["id"] for r in response.json()] == [ids["btech_2"]]

    def test_semester_without_program_ignored(self, client, catalog):
        """Test a bare semester parameter returns the unfiltered list"""
        response = client.get("/api/resources", params={"semester": 2})

        assert len(response.json()) == 3

    def test_unknown_program_empty(self, client, catalog):
        response = client.get("/api/resources", params={"program_id": 999})

        assert response.status_code == 200
        assert response.json() == []

    def test_semester_zero_means_whole_program(self, client, catalog):
        btech, _, ids = catalog

        response = client.get("/api/resources", params={"program_id": btech.id, "semester": 0})

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [ids["btech_2"], ids["btech_1"]]

    @pytest.mark.parametrize("params", [
        {"program_id": 2 ** 70},
        {"program_id": 1, "semester": 2 ** 70},
        {"program_id": -1},
    ])
    def test_out_of_range_filter_rejected(self, client, params):
        """Test filter values no column can hold fail validation instead of reaching the database"""
        response = client.get("/api/resources", params=params)

        assert response.status_code == 422


class TestDeleteResourceEndpoint:
    """Integration tests for resource deletion"""

    def test_delete(self, client, program, admin_headers, object_store):
        resource_id = _upload(client, admin_headers, program.id).json()["id"]

        response = client.delete(f"/api/resources/{resource_id}", headers=admin_headers)

        assert response.status_code == 204
        assert object_store.blobs == {}
        assert client.get("/api/resources").json() == []

    def test_delete_twice_is_404(self, client, program, admin_headers):
        resource_id = _upload(client, admin_headers, program.id).json()["id"]
        client.delete(f"/api/resources/{resource_id}", headers=admin_headers)

        response = client.delete(f"/api/resources/{resource_id}", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_delete_huge_id_is_404(self, client, admin_headers):
        """Test an id larger than any row id is simply not found"""
        response = client.delete(f"/api/resources/{2 ** 70}", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_delete_requires_admin(self, client, program, admin_headers, student_headers):
        resource_id = _upload(client, admin_headers, program.id).json()["id"]

        assert client.delete(f"/api/resources/{resource_id}").status_code == 401
        assert client.delete(f"/api/resources/{resource_id}", headers=student_headers).status_code == 403


class TestDownloadEndpoints:
    """Integration tests for download recording"""

    def test_download_redirects_and_records(self, client, db_session, program, admin_headers):
        uploaded = _upload(client, admin_headers, program.id).json()

        response = client.get(
            f"/api/resources/{uploaded['id']}/download",
            headers={"X-Forwarded-For": "203.0.113.5, 10.0.0.1"},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"] == uploaded["file_url"]
        downloads = db_session.query(Download).all()
        assert [(d.resource_id, d.ip_address) for d in downloads] == [(uploaded["id"], "203.0.113.5")]

    def test_download_missing_resource(self, client, db_session):
        response = client.get("/api/resources/999/download", follow_redirects=False)

        assert response.status_code == 404
        assert db_session.query(Download).count() == 0

    def test_record_download_public(self, client, db_session):
        """Test events are accepted for resources that do not exist"""
        response = client.post("/api/downloads", json={"resource_id": 999})

        assert response.status_code == 201
        data = response.json()
        assert data["resource_id"] == 999
        assert data["ip_address"] == "testclient"
        assert db_session.query(Download).count() == 1

    def test_record_download_invalid_body(self, client):
        response = client.post("/api/downloads", json={})

        assert response.status_code == 422

    @pytest.mark.parametrize("resource_id", [0, -3, 2 ** 70])
    def test_record_download_out_of_range_id(self, client, db_session, resource_id):
        response = client.post("/api/downloads", json={"resource_id": resource_id})

        assert response.status_code == 422
        assert db_session.query(Download).count() == 0

    def test_download_huge_id_is_404(self, client, db_session):
        response = client.get(f"/api/resources/{2 ** 70}/download", follow_redirects=False)

        assert response.status_code == 404
        assert db_session.query(Download).count() == 0

    def test_upload_huge_program_id_is_unknown_program(self, client, admin_headers):
        response = _upload(client, admin_headers, 2 ** 70)

        assert response.status_code == 400
        assert response.json()["detail"] == "unknown program"

    def test_recent_downloads(self, client, program, admin_headers):
        uploaded = _upload(client, admin_headers, program.id, title="Physics notes").json()
        client.post("/api/downloads", json={"resource_id": uploaded["id"]})
        client.post("/api/downloads", json={"resource_id": 4242})

        response = client.get("/api/downloads/recent", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert [d["resource_id"] for d in data] == [4242, uploaded["id"]]
        assert data[0]["resource"] == {"title": "Unknown resource", "type": "unknown", "available": False}
        assert data[1]["resource"]["title"] == "Physics notes"

    def test_recent_downloads_limit(self, client, admin_headers):
        for resource_id in range(1, 6):
            client.post("/api/downloads", json={"resource_id": resource_id})

        response = client.get("/api/downloads/recent", params={"limit": 2}, headers=admin_headers)

        assert len(response.json()) == 2

    def test_recent_downloads_invalid_limit(self, client, admin_headers):
        response = client.get("/api/downloads/recent", params={"limit": 0}, headers=admin_headers)

        assert response.status_code == 422

    def test_recent_downloads_requires_admin(self, client, student_headers):
        assert client.get("/api/downloads/recent").status_code == 401
        assert client.get("/api/downloads/recent", headers=student_headers).status_code == 403


class TestDashboardEndpoints:
    """Integration tests for the admin dashboard"""

    def test_stats(self, client, program, admin_headers):
        resource_id = _upload(client, admin_headers, program.id).json()["id"]
        client.post("/api/downloads", json={"resource_id": resource_id})
        client.post("/api/contact", json={
            "name": fake.name(), "email": fake.email(), "subject": "Hi", "message": "Hello"
        })

        response = client.get("/api/dashboard/stats", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"programs": 1, "resources": 1, "downloads": 1, "messages": 1}

    def test_summary(self, client, program, admin_headers):
        resource_id = _upload(client, admin_headers, program.id).json()["id"]
        client.post("/api/downloads", json={"resource_id": resource_id})

        response = client.get("/api/dashboard/summary", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["stats"]["resources"] == 1
        assert len(data["recentDownloads"]) == 1

    def test_stats_requires_admin(self, client, student_headers):
        assert client.get("/api/dashboard/stats").status_code == 401
        assert client.get("/api/dashboard/stats", headers=student_headers).status_code == 403


class TestContactEndpoints:
    """Integration tests for the contact form"""

    def test_submit_and_list(self, client, admin_headers):
        payload = {
            "name": fake.name(),
            "email": fake.email(),
            "subject": "Missing syllabus",
            "message": fake.paragraph(),
        }

        created = client.post("/api/contact", json=payload)
        listed = client.get("/api/contact/messages", headers=admin_headers)

        assert created.status_code == 201
        assert listed.status_code == 200
        assert [m["subject"] for m in listed.json()] == ["Missing syllabus"]

    def test_invalid_email(self, client):
        response = client.post("/api/contact", json={
            "name": "A", "email": "nobody", "subject": "Hi", "message": "Hello"
        })

        assert response.status_code == 400

    def test_list_requires_admin(self, client, db_session):
        db_utils.create_contact_message(db_session, "A", "a@example.com", "Hi", "Hello")

        assert client.get("/api/contact/messages").status_code == 401


class TestHealthEndpoint:
    """Integration tests for health and root"""

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == {"status": "healthy"}
        assert "memory" in data

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "X-Process-Time" in response.headers
