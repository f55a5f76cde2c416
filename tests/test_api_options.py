"""Tests for the option and contact endpoints.

Run: pytest tests/test_api_options.py -v
"""

import asyncio

from campus_chatbot.engines.db_engine_async import OPTIONS_COLLECTION, SETTINGS_COLLECTION


class TestMainOptions:
    """GET /api/main-options"""

    def test_returns_envelope_with_sorted_options(self, api_client):
        resp = api_client.get("/api/main-options")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "success"
        assert body["count"] == 3
        assert [o["id"] for o in body["data"]] == ["courses", "internships", "contact"]
        assert set(body["data"][0]) == {"id", "text", "response_text", "sort_order"}
        assert [o["sort_order"] for o in body["data"]] == [1, 2, 3]
        assert body["timestamp"]
        assert body["request_id"].startswith("req_")

    def test_empty_store_returns_empty_list(self, empty_api_client):
        resp = empty_api_client.get("/api/main-options")
        assert resp.status_code == 200
        assert resp.json()["data"] == []
        assert resp.json()["count"] == 0

    def test_store_unavailable_maps_to_generic_500(self, offline_api_client):
        resp = offline_api_client.get("/api/main-options")
        assert resp.status_code == 500
        body = resp.json()
        assert body["status"] == "error"
        assert body["error_code"] == "DATABASE_ERROR"
        assert body["message"] == "Database error occurred"
        assert "get_options" not in resp.text

    def test_post_is_rejected(self, api_client):
        resp = api_client.post("/api/main-options")
        assert resp.status_code == 405
        assert resp.json()["error_code"] == "METHOD_NOT_ALLOWED"


class TestCategoryOptions:
    """GET /api/courses and /api/internships"""

    def test_courses_include_links_and_statistics(self, api_client):
        body = api_client.get("/api/courses").json()
        assert body["status"] == "success"
        first = body["data"][0]
        assert first["id"] == "bsc-computer-science"
        assert first["has_link"] is True
        assert first["link"].startswith("https://")
        assert body["statistics"] == {
            "total_courses": 4,
            "courses_with_links": 4,
            "returned_count": 4,
        }

    def test_internships_statistics_keys(self, api_client):
        body = api_client.get("/api/internships").json()
        assert body["statistics"]["total_internships"] == 3
        assert body["statistics"]["internships_with_links"] == 3

    def test_ties_broken_by_text_and_inactive_hidden(self, empty_db_engine, empty_api_client):
        rows = [
            {"option_id": "z", "option_text": "Zoology", "category": "courses",
             "sort_order": 1, "is_active": True, "link_url": None},
            {"option_id": "a", "option_text": "Anatomy", "category": "courses",
             "sort_order": 1, "is_active": True, "link_url": "http://x/anatomy"},
            {"option_id": "first", "option_text": "Maths", "category": "courses",
             "sort_order": 0, "is_active": True, "link_url": None},
            {"option_id": "gone", "option_text": "Archived", "category": "courses",
             "sort_order": 0, "is_active": False, "link_url": None},
        ]
        asyncio.run(empty_db_engine.db[OPTIONS_COLLECTION].insert_many(rows))

        body = empty_api_client.get("/api/courses").json()
        assert [o["id"] for o in body["data"]] == ["first", "a", "z"]
        assert [o["has_link"] for o in body["data"]] == [False, True, False]
        assert body["statistics"]["courses_with_links"] == 1


class TestContact:
    """GET /api/contact"""

    def test_defaults_when_no_settings(self, empty_api_client):
        data = empty_api_client.get("/api/contact").json()["data"]
        assert data["primary_contact"]["phone"] == "+44 20 7123 4567"
        assert data["primary_contact"]["email"] == "info@lsdb.edu"
        assert data["settings_loaded"] == []
        assert data["additional_contact"] == {}

    def test_settings_override_defaults(self, empty_db_engine, empty_api_client):
        rows = [
            {"setting_key": "contact_phone", "setting_value": "+1 555 0100", "is_active": True},
            {"setting_key": "contact_whatsapp", "setting_value": "+1 555 0199", "is_active": True},
            {"setting_key": "contact_email", "setting_value": "old@x.com", "is_active": False},
            {"setting_key": "site_name", "setting_value": "LSDB", "is_active": True},
        ]
        asyncio.run(empty_db_engine.db[SETTINGS_COLLECTION].insert_many(rows))

        data = empty_api_client.get("/api/contact").json()["data"]
        assert data["primary_contact"]["phone"] == "+1 555 0100"
        assert data["primary_contact"]["email"] == "info@lsdb.edu"
        assert data["additional_contact"] == {"whatsapp": "+1 555 0199"}
        assert data["settings_loaded"] == ["contact_phone"]


class TestHttpPlumbing:
    """Security headers, CORS allow-list and health."""

    def test_security_headers_present(self, api_client):
        resp = api_client.get("/api/main-options")
        assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert resp.headers["X-Content-Type-Options"] == "nosniff"

    def test_allowed_origin_is_echoed(self, api_client):
        resp = api_client.get("/api/main-options", headers={"Origin": "http://localhost:4200"})
        assert resp.headers["access-control-allow-origin"] == "http://localhost:4200"

    def test_disallowed_origin_is_not_echoed(self, api_client):
        resp = api_client.get("/api/main-options", headers={"Origin": "http://evil.example"})
        assert "access-control-allow-origin" not in resp.headers

    def test_unknown_route_is_enveloped(self, api_client):
        resp = api_client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "NOT_FOUND"

    def test_health_degraded_without_database(self, offline_api_client):
        body = offline_api_client.get("/api/health").json()
        assert body["status"] == "success"
        assert body["data"] == {"status": "degraded", "db_connected": False}
        assert body["request_id"].startswith("req_")

    def test_health_enveloped_when_connected(self, api_client):
        body = api_client.get("/api/health").json()
        assert body["status"] == "success"
        assert body["data"]["status"] == "healthy"
        assert body["data"]["db_connected"] is True
