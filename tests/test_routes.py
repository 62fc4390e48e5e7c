"""Tests for butterfly_survey.views.routes: HTML pages and app-level behaviour."""

from unittest.mock import MagicMock

import pytest

from butterfly_survey.controllers import SurveyController
from butterfly_survey.domain.errors import StorageError
from butterfly_survey.views.routes import SECURITY_HEADERS, create_app


class TestIndexEndpoint:
    def test_index_returns_form(self, app_client):
        resp = app_client.get("/")
        assert resp.status_code == 200
        assert b"dKin Butterfly Club" in resp.data
        assert b'action="/submitsurvey"' in resp.data

    def test_security_headers(self, app_client):
        resp = app_client.get("/")
        for header, value in SECURITY_HEADERS.items():
            assert resp.headers[header] == value

    def test_maintenance_mode(self, settings, survey_repository, response_repository):
        settings.maintenance_mode = True
        controller = SurveyController(
            surveys=survey_repository, responses=response_repository, settings=settings
        )
        client = create_app(controller).test_client()
        resp = client.get("/")
        assert resp.status_code == 503
        assert b"Maintenance Mode" in resp.data


class TestSubmitSurvey:
    def test_success_shows_averages(self, app_client, form_data):
        resp = app_client.post("/submitsurvey", data=form_data)
        assert resp.status_code == 200
        assert b"Survey Submitted" in resp.data
        assert b"5.00" in resp.data
        assert b"4.00" in resp.data
        assert b"Responses so far: 1" in resp.data

    def test_averages_accumulate(self, app_client, form_data):
        app_client.post("/submitsurvey", data=form_data)
        form_data["q1radio"] = "1"
        resp = app_client.post("/submitsurvey", data=form_data)
        assert b"3.00" in resp.data
        assert b"Responses so far: 2" in resp.data

    def test_invalid_email_rendered(self, app_client, form_data):
        form_data["email"] = "john@gmail.com"
        resp = app_client.post("/submitsurvey", data=form_data)
        assert resp.status_code == 400
        assert b"Incorrect Input" in resp.data
        assert b"EMAIL" in resp.data
        assert b"Email must be a @deakin.edu.au address" in resp.data

    def test_every_failure_listed(self, app_client, form_data):
        form_data.update(firstname="", q3radio="7")
        resp = app_client.post("/submitsurvey", data=form_data)
        assert resp.status_code == 400
        assert b"FIRST NAME" in resp.data
        assert b"SURVEY QUESTION #3" in resp.data

    def test_unknown_field_rejected(self, app_client, form_data):
        form_data["q4radio"] = "5"
        resp = app_client.post("/submitsurvey", data=form_data)
        assert resp.status_code == 400
        assert b"Unrecognized field" in resp.data

    def test_failed_submission_not_stored(self, app_client, response_repository, form_data):
        form_data["q2radio"] = "0"
        app_client.post("/submitsurvey", data=form_data)
        assert response_repository.count() == 0

    def test_get_not_allowed(self, app_client):
        resp = app_client.get("/submitsurvey")
        assert resp.status_code == 405


class TestSurveyList:
    def test_empty_list(self, app_client):
        resp = app_client.get("/surveys")
        assert resp.status_code == 200
        assert b"No responses yet." in resp.data

    def test_lists_submissions(self, app_client, form_data):
        app_client.post("/submitsurvey", data=form_data)
        resp = app_client.get("/surveys")
        assert b"john.doe@deakin.edu.au" in resp.data
        assert b"1 response(s)" in resp.data

    @pytest.mark.parametrize(
        "query",
        [
            "page=0",
            "page=abc",
            "page=99999999999999999999",
            "limit=5000",
            "sortBy=colour",
            "order=sideways",
        ],
    )
    def test_bad_query_values_are_clamped(self, app_client, query):
        resp = app_client.get(f"/surveys?{query}")
        assert resp.status_code == 200

    def test_pagination_links(self, app_client, form_data):
        for _ in range(3):
            app_client.post("/submitsurvey", data=form_data)
        resp = app_client.get("/surveys?limit=2")
        assert b"page 1 of 2" in resp.data
        assert b"Next" in resp.data


class TestHealthEndpoint:
    def test_health_returns_200(self, app_client):
        resp = app_client.get("/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "healthy"
        assert data["database"] == "ok"
        assert data["app_name"] == "dKin Butterfly Club"


class TestErrorPages:
    def test_unknown_page_is_html(self, app_client):
        resp = app_client.get("/no-such-page")
        assert resp.status_code == 404
        assert b"Page Not Found" in resp.data

    def test_unknown_api_path_is_json(self, app_client):
        resp = app_client.get("/api/unknown")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Not found", "status": 404}

    def test_storage_failure_on_page(self, settings):
        controller = MagicMock()
        controller.settings = settings
        controller.list_responses.side_effect = StorageError("Failed to retrieve surveys: disk I/O")
        client = create_app(controller).test_client()
        resp = client.get("/surveys")
        assert resp.status_code == 500
        assert b"A database error occurred" in resp.data
        assert b"disk I/O" not in resp.data


class TestRateLimit:
    def _client(self, settings, survey_repository, response_repository):
        controller = SurveyController(
            surveys=survey_repository, responses=response_repository, settings=settings
        )
        return create_app(controller).test_client()

    def test_submissions_limited(self, settings, survey_repository, response_repository, form_data):
        settings.submit_rate_limit_max = 2
        client = self._client(settings, survey_repository, response_repository)
        assert client.post("/submitsurvey", data=form_data).status_code == 200
        assert client.post("/submitsurvey", data=form_data).status_code == 200
        resp = client.post("/submitsurvey", data=form_data)
        assert resp.status_code == 429
        assert b"Too many form submissions" in resp.data
        assert response_repository.count() == 2

    def test_submission_limit_leaves_pages_alone(
        self, settings, survey_repository, response_repository, form_data
    ):
        settings.submit_rate_limit_max = 1
        client = self._client(settings, survey_repository, response_repository)
        client.post("/submitsurvey", data=form_data)
        assert client.post("/submitsurvey", data=form_data).status_code == 429
        assert client.get("/surveys").status_code == 200

    def test_static_files_exempt(self, settings, survey_repository, response_repository):
        settings.rate_limit_max_requests = 1
        client = self._client(settings, survey_repository, response_repository)
        for _ in range(3):
            assert client.get("/static/style.css").status_code == 200
        assert client.get("/").status_code == 200
        assert client.get("/").status_code == 429

    def test_disabled(self, settings, survey_repository, response_repository):
        settings.rate_limit_enabled = False
        settings.rate_limit_max_requests = 1
        client = self._client(settings, survey_repository, response_repository)
        for _ in range(3):
            assert client.get("/").status_code == 200
