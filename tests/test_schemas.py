"""Tests for butterfly_survey.models.schemas."""

import pytest
from pydantic import ValidationError

from butterfly_survey.domain.enums import ResponseSortField, SortOrder, SurveySortField
from butterfly_survey.models.schemas import (
    ApiSurveyCreate,
    ApiSurveyListQuery,
    ApiSurveyUpdate,
    PaginationInfo,
    SurveyFormSubmission,
    SurveyIdParam,
    SurveyListQuery,
    SurveyStats,
)


def _error_fields(exc_info):
    return [".".join(str(part) for part in error["loc"]) for error in exc_info.value.errors()]


class TestSurveyFormSubmission:
    def test_valid(self, form_data):
        form = SurveyFormSubmission.model_validate(form_data)
        assert form.firstname == "John"
        assert form.q1radio == 5
        assert form.q3radio == 3
        assert form.butterfly_colour == "blue"

    def test_colour_optional(self, form_data):
        del form_data["butterflyColour"]
        form = SurveyFormSubmission.model_validate(form_data)
        assert form.butterfly_colour == ""

    def test_unknown_field_rejected(self, form_data):
        form_data["favourite"] = "monarch"
        with pytest.raises(ValidationError) as exc_info:
            SurveyFormSubmission.model_validate(form_data)
        assert _error_fields(exc_info) == ["favourite"]
        assert exc_info.value.errors()[0]["type"] == "extra_forbidden"

    def test_rating_out_of_range(self, form_data):
        form_data["q1radio"] = "6"
        with pytest.raises(ValidationError) as exc_info:
            SurveyFormSubmission.model_validate(form_data)
        assert _error_fields(exc_info) == ["q1radio"]

    def test_all_failures_collected(self, form_data):
        form_data.update(firstname="", email="john.doe@gmail.com", q2radio="0")
        with pytest.raises(ValidationError) as exc_info:
            SurveyFormSubmission.model_validate(form_data)
        assert set(_error_fields(exc_info)) == {"firstname", "email", "q2radio"}

    def test_missing_comment(self, form_data):
        del form_data["comments"]
        with pytest.raises(ValidationError) as exc_info:
            SurveyFormSubmission.model_validate(form_data)
        assert _error_fields(exc_info) == ["comments"]


class TestSurveyListQuery:
    def test_defaults(self):
        query = SurveyListQuery.model_validate({})
        assert query.page == 1
        assert query.limit == 20
        assert query.sort_by == ResponseSortField.DATE
        assert query.order == SortOrder.DESC

    def test_empty_values_take_defaults(self):
        query = SurveyListQuery.model_validate({"page": "", "limit": "", "sortBy": "", "order": ""})
        assert (query.page, query.limit) == (1, 20)

    def test_explicit_values(self):
        query = SurveyListQuery.model_validate(
            {"page": "3", "limit": "50", "sortBy": "email", "order": "asc"}
        )
        assert query.page == 3
        assert query.limit == 50
        assert query.sort_by == ResponseSortField.EMAIL
        assert query.order == SortOrder.ASC

    @pytest.mark.parametrize(
        "params, message",
        [
            ({"page": "0"}, "Page must be greater than 0"),
            ({"page": "abc"}, "Page must be a positive number"),
            ({"limit": "101"}, "Limit must be between 1 and 100"),
            ({"limit": "-1"}, "Limit must be a positive number"),
            ({"sortBy": "colour"}, "Sort field must be one of: date, firstname, surname, email"),
            ({"order": "up"}, "Order must be 'asc' or 'desc'"),
            ({"page": "99999999999999999999"}, "Page must be at most 2147483647"),
        ],
    )
    def test_invalid_values_rejected(self, params, message):
        with pytest.raises(ValidationError, match=message):
            SurveyListQuery.model_validate(params)


class TestApiSurveyCreate:
    def test_ratings_stay_strings(self, api_payload):
        survey = ApiSurveyCreate.model_validate(api_payload)
        assert survey.q1radio == "5"
        assert survey.surname == "O'Neil"

    def test_rating_message_names_question(self, api_payload):
        api_payload["q3radio"] = "7"
        with pytest.raises(ValidationError, match="Q3 rating must be 1-5"):
            ApiSurveyCreate.model_validate(api_payload)

    def test_numeric_rating_rejected(self, api_payload):
        api_payload["q1radio"] = 5
        with pytest.raises(ValidationError, match="Q1 rating must be 1-5"):
            ApiSurveyCreate.model_validate(api_payload)

    def test_contact_fields_required(self, api_payload):
        del api_payload["address"]
        del api_payload["phone"]
        with pytest.raises(ValidationError) as exc_info:
            ApiSurveyCreate.model_validate(api_payload)
        assert set(_error_fields(exc_info)) == {"address", "phone"}


class TestApiSurveyUpdate:
    def test_partial(self):
        update = ApiSurveyUpdate.model_validate({"postcode": "3000"})
        assert update.changes() == {"postcode": "3000"}

    def test_empty_rejected(self):
        with pytest.raises(ValidationError, match="At least one field must be provided"):
            ApiSurveyUpdate.model_validate({})

    def test_unknown_keys_ignored(self):
        with pytest.raises(ValidationError, match="At least one field must be provided"):
            ApiSurveyUpdate.model_validate({"favourite": "monarch"})

    def test_null_rejected(self):
        with pytest.raises(ValidationError, match="Field cannot be null"):
            ApiSurveyUpdate.model_validate({"firstname": None})

    def test_fields_validated(self):
        with pytest.raises(ValidationError, match="@deakin.edu.au address"):
            ApiSurveyUpdate.model_validate({"email": "someone@example.org"})


class TestSurveyIdParam:
    def test_coerced(self):
        assert SurveyIdParam.model_validate({"id": "42"}).id == 42

    @pytest.mark.parametrize("value", ["abc", "-1", "1.5", ""])
    def test_rejected(self, value):
        with pytest.raises(ValidationError, match="Survey ID must be a positive number"):
            SurveyIdParam.model_validate({"id": value})

    def test_beyond_integer_column_rejected(self):
        with pytest.raises(ValidationError, match="Survey ID is out of range"):
            SurveyIdParam.model_validate({"id": "99999999999999999999"})

    def test_largest_row_id_accepted(self):
        assert SurveyIdParam.model_validate({"id": str(2**63 - 1)}).id == 2**63 - 1


class TestApiSurveyListQuery:
    def test_defaults(self):
        query = ApiSurveyListQuery.model_validate({})
        assert query.page == 1
        assert query.limit == 10
        assert query.sort_by == SurveySortField.CREATED_AT
        assert query.order == SortOrder.DESC

    def test_coerced(self):
        query = ApiSurveyListQuery.model_validate({"page": "2", "limit": "50", "sortBy": "id"})
        assert (query.page, query.limit, query.sort_by) == (2, 50, SurveySortField.ID)

    @pytest.mark.parametrize(
        "params",
        [
            {"page": "0"},
            {"page": "99999999999999999999"},
            {"limit": "0"},
            {"limit": "101"},
            {"sortBy": "date"},
            {"order": "sideways"},
        ],
    )
    def test_rejected(self, params):
        with pytest.raises(ValidationError):
            ApiSurveyListQuery.model_validate(params)


class TestResultModels:
    def test_pagination_build(self):
        info = PaginationInfo.build(page=2, limit=10, total=25)
        assert info.total_pages == 3
        assert info.has_next_page is True
        assert info.has_prev_page is True
        dumped = info.model_dump(by_alias=True)
        assert dumped["currentPage"] == 2
        assert dumped["totalRecords"] == 25

    def test_pagination_empty(self):
        info = PaginationInfo.build(page=1, limit=10, total=0)
        assert info.total_pages == 0
        assert info.has_next_page is False

    def test_stats_camel_case(self):
        dumped = SurveyStats(total_surveys=3, recent_surveys=1).model_dump(by_alias=True)
        assert dumped["totalSurveys"] == 3
        assert dumped["recentSurveys"] == 1
        assert dumped["averageRatings"]["question1"] is None
