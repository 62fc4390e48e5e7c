"""Pytest configuration & shared fixtures."""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment variables before any imports
os.environ.setdefault("HOST", "127.0.0.1")
os.environ.setdefault("PORT", "3000")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ENVIRONMENT", "test")


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file."""
    from config import Settings

    return Settings(
        database_url=f"sqlite:///{tmp_path / 'surveys.db'}",
        environment="test",
        secret_key="test-secret",
    )


@pytest.fixture
def survey_repository(settings):
    from butterfly_survey.services import SurveyRepository

    repository = SurveyRepository(settings.database_url)
    yield repository
    repository.close()


@pytest.fixture
def response_repository(settings):
    from butterfly_survey.services import SurveyResponseRepository

    repository = SurveyResponseRepository(settings.database_url)
    yield repository
    repository.close()


@pytest.fixture
def controller(settings, survey_repository, response_repository):
    from butterfly_survey.controllers import SurveyController

    return SurveyController(
        surveys=survey_repository,
        responses=response_repository,
        settings=settings,
    )


@pytest.fixture
def app_client(controller):
    """Flask test client backed by real repositories on a temp database."""
    from butterfly_survey.views.routes import create_app

    app = create_app(controller)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def form_data():
    """A valid public form submission."""
    return {
        "firstname": "John",
        "surname": "Doe",
        "email": "john.doe@deakin.edu.au",
        "q1radio": "5",
        "q2radio": "4",
        "q3radio": "3",
        "butterflyColour": "blue",
        "comments": "nice",
    }


@pytest.fixture
def api_payload():
    """A valid ``POST /api/surveys`` body."""
    return {
        "firstname": "Jane",
        "surname": "O'Neil",
        "email": "jane.oneil@deakin.edu.au",
        "address": "221 Burwood Highway",
        "suburb": "Burwood",
        "postcode": "3125",
        "phone": "+61 (03) 9244-6100",
        "q1radio": "5",
        "q2radio": "4",
        "q3radio": "2",
        "comments": "Saw a Blue Triangle today",
    }


@pytest.fixture
def make_payload(api_payload):
    """Build API payloads with unique e-mails."""

    def _make(index: int, **overrides):
        payload = dict(api_payload)
        payload["email"] = f"member{index}@deakin.edu.au"
        payload.update(overrides)
        return payload

    return _make
