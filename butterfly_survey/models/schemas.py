"""Pydantic request/response schemas (Model Layer).

Request schemas are composed from the field validators in
``butterfly_survey.domain.validators``. Every field stops at its first
failure; the model reports the failures of all fields together.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from butterfly_survey.domain import validators
from butterfly_survey.domain.enums import ResponseSortField, SortOrder, SurveySortField

# ── Field types ───────────────────────────────────────────

Name = Annotated[str, BeforeValidator(validators.validate_name)]
Email = Annotated[str, BeforeValidator(validators.validate_email)]
Comment = Annotated[str, BeforeValidator(validators.validate_comment)]
Colour = Annotated[str, BeforeValidator(validators.validate_colour)]
FormRating = Annotated[int, BeforeValidator(validators.parse_rating)]
Address = Annotated[str, BeforeValidator(validators.validate_address)]
Suburb = Annotated[str, BeforeValidator(validators.validate_suburb)]
Postcode = Annotated[str, BeforeValidator(validators.validate_postcode)]
Phone = Annotated[str, BeforeValidator(validators.validate_phone)]
Q1Rating = Annotated[str, BeforeValidator(validators.question_rating(1))]
Q2Rating = Annotated[str, BeforeValidator(validators.question_rating(2))]
Q3Rating = Annotated[str, BeforeValidator(validators.question_rating(3))]

_DIGITS = re.compile(r"[0-9]+")


def _blank_to(value: Any, default: str) -> Any:
    if value is None or value == "":
        return default
    return value


# ── Value objects ─────────────────────────────────────────


class FieldError(BaseModel):
    """A single field-level validation failure."""

    field: str
    message: str


# ── Requests: public form ─────────────────────────────────


class SurveyFormSubmission(BaseModel):
    """Public survey form. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    firstname: Name
    surname: Name
    email: Email
    q1radio: FormRating
    q2radio: FormRating
    q3radio: FormRating
    butterfly_colour: Colour = Field(default="", alias="butterflyColour")
    comments: Comment


class SurveyListQuery(BaseModel):
    """Strict query schema for the page-rendered response listing."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = 1
    limit: int = 20
    sort_by: ResponseSortField = Field(default=ResponseSortField.DATE, alias="sortBy")
    order: SortOrder = SortOrder.DESC

    @field_validator("page", mode="before")
    @classmethod
    def page_must_be_positive(cls, value: Any) -> int:
        value = _blank_to(value, "1")
        if not isinstance(value, str) or not _DIGITS.fullmatch(value):
            raise ValueError("Page must be a positive number")
        page = int(value)
        if page <= 0:
            raise ValueError("Page must be greater than 0")
        if page > validators.MAX_PAGE:
            raise ValueError(f"Page must be at most {validators.MAX_PAGE}")
        return page

    @field_validator("limit", mode="before")
    @classmethod
    def limit_must_be_in_range(cls, value: Any) -> int:
        value = _blank_to(value, "20")
        if not isinstance(value, str) or not _DIGITS.fullmatch(value):
            raise ValueError("Limit must be a positive number")
        limit = int(value)
        if not 0 < limit <= 100:
            raise ValueError("Limit must be between 1 and 100")
        return limit

    @field_validator("sort_by", mode="before")
    @classmethod
    def sort_by_must_be_known(cls, value: Any) -> ResponseSortField:
        try:
            return ResponseSortField(_blank_to(value, "date"))
        except ValueError:
            allowed = ", ".join(field.value for field in ResponseSortField)
            raise ValueError(f"Sort field must be one of: {allowed}")

    @field_validator("order", mode="before")
    @classmethod
    def order_must_be_known(cls, value: Any) -> SortOrder:
        try:
            return SortOrder(_blank_to(value, "desc"))
        except ValueError:
            raise ValueError("Order must be 'asc' or 'desc'")


# ── Requests: JSON API ────────────────────────────────────


class ApiSurveyCreate(BaseModel):
    """Payload for ``POST /api/surveys``."""

    model_config = ConfigDict(populate_by_name=True)

    firstname: Name
    surname: Name
    email: Email
    address: Address
    suburb: Suburb
    postcode: Postcode
    phone: Phone
    q1radio: Q1Rating
    q2radio: Q2Rating
    q3radio: Q3Rating
    butterfly_colour: Colour = Field(default="", alias="butterflyColour")
    comments: Comment


class ApiSurveyUpdate(BaseModel):
    """Partial payload for ``PUT /api/surveys/<id>``."""

    model_config = ConfigDict(populate_by_name=True)

    firstname: Optional[Name] = None
    surname: Optional[Name] = None
    email: Optional[Email] = None
    address: Optional[Address] = None
    suburb: Optional[Suburb] = None
    postcode: Optional[Postcode] = None
    phone: Optional[Phone] = None
    q1radio: Optional[Q1Rating] = None
    q2radio: Optional[Q2Rating] = None
    q3radio: Optional[Q3Rating] = None
    butterfly_colour: Optional[Colour] = Field(default=None, alias="butterflyColour")
    comments: Optional[Comment] = None

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @model_validator(mode="after")
    def require_any_field(self) -> "ApiSurveyUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self

    def changes(self) -> dict:
        """Only the fields the client supplied, keyed by column name."""
        return self.model_dump(exclude_unset=True)


class SurveyIdParam(BaseModel):
    """``<id>`` route parameter."""

    id: int

    @field_validator("id", mode="before")
    @classmethod
    def id_must_be_digits(cls, value: Any) -> int:
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            survey_id = value
        elif isinstance(value, str) and _DIGITS.fullmatch(value):
            survey_id = int(value)
        else:
            raise ValueError("Survey ID must be a positive number")
        if survey_id > validators.MAX_ROW_ID:
            raise ValueError("Survey ID is out of range")
        return survey_id


class ApiSurveyListQuery(BaseModel):
    """Query string for ``GET /api/surveys``; values are coerced."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(default=1, ge=1, le=validators.MAX_PAGE)
    limit: int = Field(default=10, ge=1, le=100)
    sort_by: SurveySortField = Field(default=SurveySortField.CREATED_AT, alias="sortBy")
    order: SortOrder = SortOrder.DESC


# ── Records ───────────────────────────────────────────────


class SurveyRecord(BaseModel):
    """A row of the ``surveys`` table."""

    id: int
    firstname: str
    surname: str
    email: str
    address: str
    suburb: str
    postcode: str
    phone: str
    q1radio: str
    q2radio: str
    q3radio: str
    comments: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SurveyResponseRecord(BaseModel):
    """A row of the legacy ``survey`` table."""

    id: int
    fname: str
    sname: str
    email: str
    date: datetime
    q1: int
    q2: int
    q3: int
    colour: Optional[str] = ""
    comment: str


class SurveyPage(BaseModel):
    items: List[SurveyRecord] = Field(default_factory=list)
    total: int = 0


class ResponsePage(BaseModel):
    items: List[SurveyResponseRecord] = Field(default_factory=list)
    total: int = 0


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginationInfo(_CamelModel):
    """Pagination block of the API listing (dumped in camelCase)."""

    current_page: int
    total_pages: int
    total_records: int
    page_size: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationInfo":
        total_pages = -(-total // limit)
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_records=total,
            page_size=limit,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


class AverageRatings(BaseModel):
    question1: Optional[float] = None
    question2: Optional[float] = None
    question3: Optional[float] = None


class SurveyStats(_CamelModel):
    """Aggregates over the ``surveys`` table."""

    total_surveys: int = 0
    average_ratings: AverageRatings = Field(default_factory=AverageRatings)
    recent_surveys: int = 0


class RunningAverages(BaseModel):
    """Averages across every stored form response."""

    survey_count: int = 0
    avg_q1: float = 0.0
    avg_q2: float = 0.0
    avg_q3: float = 0.0
    avg_total: float = 0.0


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    app_name: str
    environment: str
    database: str = "unknown"
    version: str = "1.0.0"


# ── Controller results ────────────────────────────────────


class SubmissionResult(BaseModel):
    """Stored form response plus the refreshed running averages."""

    response: SurveyResponseRecord
    averages: RunningAverages


class ResponseListing(BaseModel):
    """One rendered page of form responses."""

    items: List[SurveyResponseRecord] = Field(default_factory=list)
    current_page: int = 1
    total_pages: int = 0
    total_surveys: int = 0
    limit: int = 20
    sort_by: str = ResponseSortField.DATE.value
    order: str = SortOrder.DESC.value

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.current_page > 1


class SurveyListing(BaseModel):
    """API listing payload: records plus pagination."""

    data: List[SurveyRecord] = Field(default_factory=list)
    pagination: PaginationInfo
