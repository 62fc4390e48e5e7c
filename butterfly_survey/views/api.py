"""JSON survey API (``/api/surveys``)."""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, jsonify

from butterfly_survey.domain.enums import RequestSource
from butterfly_survey.models.schemas import (
    ApiSurveyCreate,
    ApiSurveyListQuery,
    ApiSurveyUpdate,
    SurveyIdParam,
)
from butterfly_survey.views.validation import (
    validate_body,
    validate_params,
    validate_query,
    validated,
)

logger = logging.getLogger(__name__)


def create_api_blueprint(controller: Any) -> Blueprint:
    """Build the survey API blueprint bound to ``controller``."""
    bp = Blueprint("survey_api", __name__)

    @bp.route("/", methods=["GET"], strict_slashes=False)
    @validate_query(ApiSurveyListQuery)
    def list_surveys():
        listing = controller.list_surveys(validated(RequestSource.QUERY))
        return jsonify(
            {
                "success": True,
                "data": [survey.model_dump(mode="json") for survey in listing.data],
                "pagination": listing.pagination.model_dump(by_alias=True),
            }
        )

    @bp.route("/stats", methods=["GET"])
    def survey_stats():
        stats = controller.survey_stats()
        return jsonify({"success": True, "data": stats.model_dump(mode="json", by_alias=True)})

    @bp.route("/<id>", methods=["GET"])
    @validate_params(SurveyIdParam)
    def get_survey(id: int):
        survey = controller.get_survey(id)
        return jsonify({"success": True, "data": survey.model_dump(mode="json")})

    @bp.route("/", methods=["POST"], strict_slashes=False)
    @validate_body(ApiSurveyCreate)
    def create_survey():
        survey = controller.create_survey(validated(RequestSource.BODY))
        return (
            jsonify(
                {
                    "success": True,
                    "message": "Survey created successfully",
                    "data": survey.model_dump(mode="json"),
                }
            ),
            201,
        )

    @bp.route("/<id>", methods=["PUT"])
    @validate_params(SurveyIdParam)
    @validate_body(ApiSurveyUpdate)
    def update_survey(id: int):
        survey = controller.update_survey(id, validated(RequestSource.BODY))
        return jsonify(
            {
                "success": True,
                "message": "Survey updated successfully",
                "data": survey.model_dump(mode="json"),
            }
        )

    @bp.route("/<id>", methods=["DELETE"])
    @validate_params(SurveyIdParam)
    def delete_survey(id: int):
        controller.delete_survey(id)
        return jsonify({"success": True, "message": "Survey deleted successfully"})

    return bp
