"""Controllers package."""

from butterfly_survey.controllers.survey_controller import SurveyController, clamp_list_query

__all__ = ["SurveyController", "clamp_list_query"]
