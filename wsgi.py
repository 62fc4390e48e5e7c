"""WSGI entrypoint for Gunicorn."""

import logging

from butterfly_survey.controllers.survey_controller import SurveyController
from butterfly_survey.views.routes import create_app
from config import get_settings

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
controller = SurveyController(settings=settings)
app = create_app(controller)
