"""Domain layer: enums, field validators, and custom exceptions."""

from butterfly_survey.domain.enums import (
    RequestSource,
    ResponseSortField,
    SortOrder,
    SurveySortField,
)
from butterfly_survey.domain.errors import (
    ConfigurationError,
    DuplicateEmailError,
    NotFoundError,
    StorageError,
    ValidationError,
)

__all__ = [
    "ConfigurationError",
    "DuplicateEmailError",
    "NotFoundError",
    "RequestSource",
    "ResponseSortField",
    "SortOrder",
    "StorageError",
    "SurveySortField",
    "ValidationError",
]
