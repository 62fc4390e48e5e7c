"""Models package: request schemas, records and controller results."""

from butterfly_survey.models.schemas import (
    ApiSurveyCreate,
    ApiSurveyListQuery,
    ApiSurveyUpdate,
    FieldError,
    HealthResponse,
    PaginationInfo,
    ResponseListing,
    ResponsePage,
    RunningAverages,
    SubmissionResult,
    SurveyFormSubmission,
    SurveyIdParam,
    SurveyListing,
    SurveyListQuery,
    SurveyPage,
    SurveyRecord,
    SurveyResponseRecord,
    SurveyStats,
)

__all__ = [
    "ApiSurveyCreate",
    "ApiSurveyListQuery",
    "ApiSurveyUpdate",
    "FieldError",
    "HealthResponse",
    "PaginationInfo",
    "ResponseListing",
    "ResponsePage",
    "RunningAverages",
    "SubmissionResult",
    "SurveyFormSubmission",
    "SurveyIdParam",
    "SurveyListing",
    "SurveyListQuery",
    "SurveyPage",
    "SurveyRecord",
    "SurveyResponseRecord",
    "SurveyStats",
]
