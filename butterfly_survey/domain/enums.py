"""Domain enums used across all layers."""

from enum import Enum


class SortOrder(str, Enum):
    """Sort direction for listings."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def from_string(cls, value: str) -> "SortOrder":
        try:
            return cls(value.lower().strip())
        except ValueError:
            raise ValueError("Order must be 'asc' or 'desc'")


class SurveySortField(str, Enum):
    """Sortable columns of the ``surveys`` table (API listing)."""

    ID = "id"
    CREATED_AT = "created_at"
    FIRSTNAME = "firstname"
    SURNAME = "surname"
    EMAIL = "email"


class ResponseSortField(str, Enum):
    """Sort keys accepted by the page-rendered response listing."""

    DATE = "date"
    FIRSTNAME = "firstname"
    SURNAME = "surname"
    EMAIL = "email"


class RequestSource(str, Enum):
    """Request sections the validation middleware can read."""

    BODY = "body"
    QUERY = "query"
    PARAMS = "params"
