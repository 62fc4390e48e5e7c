"""Services package: database tables and repositories."""

from butterfly_survey.services.response_repository import SurveyResponseRepository
from butterfly_survey.services.survey_repository import SurveyRepository

__all__ = [
    "SurveyRepository",
    "SurveyResponseRepository",
]
