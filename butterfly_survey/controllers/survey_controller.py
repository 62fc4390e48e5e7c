"""Survey Controller (Controller Layer)."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

from butterfly_survey.domain.enums import ResponseSortField, SortOrder
from butterfly_survey.domain.errors import DuplicateEmailError, NotFoundError
from butterfly_survey.domain.validators import MAX_PAGE
from butterfly_survey.models.schemas import (
    ApiSurveyCreate,
    ApiSurveyListQuery,
    ApiSurveyUpdate,
    HealthResponse,
    PaginationInfo,
    ResponseListing,
    SubmissionResult,
    SurveyFormSubmission,
    SurveyListing,
    SurveyListQuery,
    SurveyRecord,
    SurveyStats,
)
from butterfly_survey.services import SurveyRepository, SurveyResponseRepository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _leading_int(value: Any) -> Optional[int]:
    """Parse the integer prefix of ``value`` ("3abc" -> 3), else ``None``."""
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def clamp_list_query(args: Mapping[str, Any]) -> SurveyListQuery:
    """Lenient reading of the listing query string; never raises.

    Unparseable or zero page/limit fall back to defaults, page is capped at
    ``MAX_PAGE``, limit is clamped to 1..100 and unknown sort keys or orders
    fall back to date / desc.
    """
    page = _leading_int(args.get("page")) or 1
    limit = _leading_int(args.get("limit")) or DEFAULT_PAGE_LIMIT
    page = min(MAX_PAGE, max(1, page))
    limit = min(MAX_PAGE_LIMIT, max(1, limit))

    sort_by = args.get("sortBy") or ResponseSortField.DATE.value
    if sort_by not in {field.value for field in ResponseSortField}:
        sort_by = ResponseSortField.DATE.value
    try:
        order = SortOrder.from_string(args.get("order") or SortOrder.DESC.value)
    except ValueError:
        order = SortOrder.DESC

    return SurveyListQuery.model_construct(
        page=page,
        limit=limit,
        sort_by=ResponseSortField(sort_by),
        order=order,
    )


class SurveyController:
    """Orchestrates the form flow and the survey API over injected repositories."""

    def __init__(
        self,
        surveys: Optional[SurveyRepository] = None,
        responses: Optional[SurveyResponseRepository] = None,
        settings: Any = None,
    ) -> None:
        if settings is None:
            from config import get_settings

            settings = get_settings()

        self._settings = settings
        self._surveys = surveys or SurveyRepository(settings.database_url)
        self._responses = responses or SurveyResponseRepository(settings.database_url)

    @property
    def settings(self) -> Any:
        return self._settings

    # ── Public form ──────────────────────────────────────

    def submit_response(self, form: SurveyFormSubmission) -> SubmissionResult:
        """Store a form response and recompute the running averages."""
        record = self._responses.add(form)
        averages = self._responses.running_averages()
        logger.info("Stored survey response %s (%d total)", record.id, averages.survey_count)
        return SubmissionResult(response=record, averages=averages)

    def list_responses(self, args: Mapping[str, Any]) -> ResponseListing:
        query = clamp_list_query(args)
        page = self._responses.get_page(
            page=query.page,
            limit=query.limit,
            sort_by=query.sort_by.value,
            order=query.order.value,
        )
        return ResponseListing(
            items=page.items,
            current_page=query.page,
            total_pages=-(-page.total // query.limit),
            total_surveys=page.total,
            limit=query.limit,
            sort_by=query.sort_by.value,
            order=query.order.value,
        )

    # ── JSON API ─────────────────────────────────────────

    def list_surveys(self, query: ApiSurveyListQuery) -> SurveyListing:
        page = self._surveys.get_page(
            page=query.page,
            limit=query.limit,
            sort_by=query.sort_by.value,
            order=query.order.value,
        )
        return SurveyListing(
            data=page.items,
            pagination=PaginationInfo.build(query.page, query.limit, page.total),
        )

    def get_survey(self, survey_id: int) -> SurveyRecord:
        survey = self._surveys.get_by_id(survey_id)
        if survey is None:
            raise NotFoundError("Survey", survey_id)
        return survey

    def create_survey(self, payload: ApiSurveyCreate) -> SurveyRecord:
        try:
            return self._surveys.create(payload)
        except DuplicateEmailError:
            logger.info("Rejected duplicate survey for %s", payload.email)
            raise

    def update_survey(self, survey_id: int, payload: ApiSurveyUpdate) -> SurveyRecord:
        survey = self._surveys.update(survey_id, payload.changes())
        if survey is None:
            raise NotFoundError("Survey", survey_id)
        return survey

    def delete_survey(self, survey_id: int) -> None:
        if not self._surveys.delete(survey_id):
            raise NotFoundError("Survey", survey_id)
        logger.info("Deleted survey %s", survey_id)

    def survey_stats(self) -> SurveyStats:
        return self._surveys.stats()

    def health(self) -> HealthResponse:
        database_ok = self._surveys.ping() and self._responses.ping()
        return HealthResponse(
            status="healthy" if database_ok else "degraded",
            app_name=self._settings.app_name,
            environment=self._settings.environment,
            database="ok" if database_ok else "unavailable",
            version=self._settings.app_version,
        )

    def close(self) -> None:
        self._surveys.close()
        self._responses.close()
