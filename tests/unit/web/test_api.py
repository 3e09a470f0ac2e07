#!/usr/bin/env python3
"""
API tests for the recruitment backend.

Every request runs against the real routers with in-memory providers
swapped in through the get_app_context dependency.
"""

import unittest

from fastapi.testclient import TestClient

from core.app_context import AppContext
from database.database import init_database
from tests import TEST_TOKEN, memory_config
from web.backend.app import app
from web.backend.dependencies import get_app_context
from web.backend.rate_limit import limiter

RESUME_TEXT = (
    "Jane Doe\n"
    "Senior Data Engineer\n"
    "jane.doe@example.com\n"
    "Eight years building streaming pipelines in Python and Spark.\n"
)

AUTH = {"Authorization": f"Bearer {TEST_TOKEN}"}


class ApiTestCase(unittest.TestCase):

    def setUp(self):
        self.app_context = AppContext.build(
            memory_config(),
            session_factory=init_database("sqlite://", create_tables=True)
        )
        app.dependency_overrides[get_app_context] = lambda: self.app_context
        limiter.enabled = False
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        limiter.enabled = True

    def create_candidate(self, email="jane.doe@example.com", full_name="Jane Doe"):
        response = self.client.post("/api/candidates", headers=AUTH, json={
            "fullName": full_name,
            "currentTitle": "Senior Data Engineer",
            "email": email,
            "location": "Zurich",
            "skills": ["Python", "Spark"],
        })
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["data"]


class TestAuthAndHealth(ApiTestCase):

    def test_missing_token_is_rejected(self):
        response = self.client.get("/api/candidates")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {
            "success": False,
            "error": "Authentication required",
            "type": "AuthError",
        })

    def test_unknown_token_is_rejected(self):
        response = self.client.get("/api/candidates", headers={"Authorization": "Bearer nope"})

        self.assertEqual(response.status_code, 401)

    def test_health(self):
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_daily_quote_is_public(self):
        response = self.client.get("/api/daily-quote")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertIn("text", body["data"]["quote"])


class TestCandidateEndpoints(ApiTestCase):

    def test_parse_resume_from_upload(self):
        response = self.client.post(
            "/api/candidates/parse-resume",
            headers=AUTH,
            files={"file": ("jane.txt", RESUME_TEXT.encode(), "text/plain")}
        )

        self.assertEqual(response.status_code, 200, response.text)
        data = response.json()["data"]
        self.assertEqual(data["fullName"], "Jane Doe")
        self.assertEqual(data["email"], "jane.doe@example.com")
        self.assertEqual(self.app_context.llm.files, {})

    def test_parse_resume_from_text(self):
        response = self.client.post("/api/candidates/parse-resume", headers=AUTH, json={"text": RESUME_TEXT})

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["data"]["currentTitle"], "Senior Data Engineer")

    def test_parse_resume_rejects_unsupported_type(self):
        response = self.client.post(
            "/api/candidates/parse-resume",
            headers=AUTH,
            files={"file": ("photo.gif", b"GIF89a", "image/gif")}
        )

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["type"], "UnsupportedFormat")
        self.assertIn("image/gif", body["error"])

    def test_parse_resume_short_text(self):
        response = self.client.post("/api/candidates/parse-resume", headers=AUTH, json={"text": "too short"})

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])

    def test_duplicate_email_conflict(self):
        self.create_candidate()

        response = self.client.post("/api/candidates", headers=AUTH, json={
            "fullName": "Janet Doe",
            "email": "jane.doe@example.com",
        })

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["type"], "ConflictError")

    def test_update_rejects_null_full_name(self):
        candidate = self.create_candidate()

        response = self.client.put(f"/api/candidates/{candidate['id']}", headers=AUTH, json={"fullName": None})

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["type"], "ValidationError")
        self.assertEqual(body["details"]["errors"][0]["field"], "fullName")

        unchanged = self.client.get(f"/api/candidates/{candidate['id']}", headers=AUTH)
        self.assertEqual(unchanged.json()["data"]["fullName"], "Jane Doe")

    def test_update_without_full_name_keeps_it(self):
        candidate = self.create_candidate()

        response = self.client.put(f"/api/candidates/{candidate['id']}", headers=AUTH, json={"location": "Basel"})

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["data"]["fullName"], "Jane Doe")
        self.assertEqual(response.json()["data"]["location"], "Basel")

    def test_archive_then_get(self):
        candidate = self.create_candidate()

        response = self.client.delete(f"/api/candidates/{candidate['id']}", headers=AUTH)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["status"], "archived")

        missing = self.client.get("/api/candidates/unknown-id", headers=AUTH)
        self.assertEqual(missing.status_code, 404)


class TestJobAndFileEndpoints(ApiTestCase):

    def test_job_lifecycle(self):
        created = self.client.post("/api/jobs", headers=AUTH, json={
            "title": "Platform Engineer",
            "company": "Acme Analytics",
            "isRemote": True,
            "employmentType": "full-time",
        })
        self.assertEqual(created.status_code, 201, created.text)
        job_id = created.json()["data"]["id"]

        updated = self.client.put(f"/api/jobs/{job_id}", headers=AUTH, json={"title": "Staff Engineer"})
        self.assertEqual(updated.json()["data"]["title"], "Staff Engineer")

        archived = self.client.delete(f"/api/jobs/{job_id}", headers=AUTH)
        self.assertEqual(archived.json()["data"]["status"], "archived")

    def test_job_rejects_unknown_employment_type(self):
        response = self.client.post("/api/jobs", headers=AUTH, json={
            "title": "Analyst",
            "company": "Acme",
            "employmentType": "gig",
        })

        self.assertEqual(response.status_code, 400)
        self.assertIn("errors", response.json()["details"])

    def test_extract_text_from_txt(self):
        response = self.client.post(
            "/api/files/extract-text",
            headers=AUTH,
            files={"file": ("jane.txt", RESUME_TEXT.encode(), "text/plain")}
        )

        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["format"], "txt")
        self.assertGreater(body["wordCount"], 10)
        self.assertEqual(self.app_context.llm.calls, [])


class TestCompetenceFileEndpoints(ApiTestCase):

    def create_document(self):
        candidate = self.create_candidate()
        response = self.client.post("/api/competence-files", headers=AUTH, json={
            "candidateId": candidate["id"],
            "template": "professional",
            "sections": [
                {"type": "header", "content": "Jane Doe"},
                {"type": "summary", "content": "Data engineer with **8 years** of experience."},
            ],
        })
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["data"]

    def test_create_starts_as_draft(self):
        document = self.create_document()

        self.assertEqual(document["status"], "Draft")
        self.assertEqual(document["version"], 1)
        self.assertEqual(len(document["sections"]), 2)

    def test_render_marks_generated(self):
        document = self.create_document()

        response = self.client.post(
            f"/api/competence-files/{document['id']}/render",
            headers=AUTH,
            json={"format": "html"}
        )

        self.assertEqual(response.status_code, 200, response.text)
        rendered = response.json()["data"]
        self.assertEqual(rendered["status"], "Generated")
        self.assertTrue(rendered["artifact"]["url"].startswith("memory://storage/"))

    def test_preview_returns_html(self):
        document = self.create_document()

        response = self.client.get(f"/api/competence-files/{document['id']}/preview", headers=AUTH)

        self.assertEqual(response.status_code, 200)
        self.assertIn("text/html", response.headers["content-type"])
        self.assertIn(">8 years</strong>", response.text)

    def test_generate_inline_html(self):
        response = self.client.post("/api/competence-files/generate", headers=AUTH, json={
            "candidateData": {"fullName": "Jane Doe", "currentTitle": "Data Engineer"},
            "template": "professional",
            "format": "html",
            "sections": [{"type": "summary", "content": "Builds pipelines."}],
        })

        self.assertEqual(response.status_code, 200, response.text)
        self.assertIn("text/html", response.headers["content-type"])
        self.assertIn("attachment;", response.headers["content-disposition"])
        self.assertIn(b"Builds pipelines.", response.content)

    def test_generate_inline_tailored_to_job(self):
        response = self.client.post("/api/competence-files/generate", headers=AUTH, json={
            "candidateData": {"fullName": "Jane Doe", "skills": ["Python", "Spark"]},
            "format": "html",
            "sections": [{"type": "skills"}],
            "generateMissing": True,
            "jobDescription": {"title": "Spark Engineer", "skills": ["Spark"]},
            "clientName": "Helvetia Partners",
        })

        self.assertEqual(response.status_code, 200, response.text)
        html = response.text
        self.assertLess(html.index("Spark"), html.index("Python"))

    def test_section_generation_accepts_target_role(self):
        document = self.create_document()
        summary_id = document["sections"][1]["id"]

        response = self.client.post(
            f"/api/competence-files/{document['id']}/sections/{summary_id}/generate",
            headers=AUTH,
            json={"jobDescription": {"title": "Head of Data"}, "clientName": "Helvetia Partners"}
        )

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["data"]["version"], 2)
        self.assertIn('"client": "Helvetia Partners"', self.app_context.llm.prompts[-1])

    def test_section_generation_without_body(self):
        document = self.create_document()
        summary_id = document["sections"][1]["id"]

        response = self.client.post(
            f"/api/competence-files/{document['id']}/sections/{summary_id}/generate",
            headers=AUTH
        )

        self.assertEqual(response.status_code, 200, response.text)
        self.assertNotIn("Target role:", self.app_context.llm.prompts[-1])

    def test_upload_logo_rejects_gif(self):
        response = self.client.post(
            "/api/competence-files/upload-logo",
            headers=AUTH,
            files={"file": ("logo.gif", b"GIF89a" + b"\x00" * 64, "image/gif")}
        )

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertIn("image/png", body["error"])
        self.assertEqual(self.app_context.object_store.objects, {})


class TestSearchEndpoints(ApiTestCase):

    def test_sync_and_search(self):
        self.create_candidate()
        self.create_candidate(email="john.roe@example.com", full_name="John Roe")

        clear = self.client.post("/api/search/sync", headers=AUTH, json={"action": "clear", "type": "candidates"})
        self.assertEqual(clear.status_code, 200)

        reindex = self.client.post("/api/search/sync", headers=AUTH, json={"action": "index_all", "type": "candidates"})
        self.assertEqual(reindex.json()["data"]["indexed"], {"candidate": 2})

        response = self.client.get("/api/search/candidates?q=jane&limit=10", headers=AUTH)

        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["meta"]["total"], 1)
        self.assertEqual(body["meta"]["limit"], 10)
        self.assertEqual(body["hits"][0]["email"], "jane.doe@example.com")

    def test_stats(self):
        self.create_candidate()

        response = self.client.post("/api/search/sync", headers=AUTH, json={"action": "stats"})

        self.assertEqual(response.status_code, 200)
        self.assertIn("recentFailures", response.json()["data"])

    def test_index_single_needs_id(self):
        response = self.client.post(
            "/api/search/sync", headers=AUTH, json={"action": "index_single", "type": "candidates"}
        )

        self.assertEqual(response.status_code, 400)

    def test_unknown_index_type(self):
        response = self.client.get("/api/search/planets", headers=AUTH)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["type"], "ValidationError")


if __name__ == '__main__':
    unittest.main()
