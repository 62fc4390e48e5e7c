"""Survey repository: all storage access for the ``surveys`` table."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import timedelta
from threading import RLock
from typing import Any, Iterator, Mapping, Optional

from sqlalchemy import Float, cast, delete, func, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from butterfly_survey.domain.errors import DuplicateEmailError, StorageError, ValidationError
from butterfly_survey.models.schemas import (
    ApiSurveyCreate,
    AverageRatings,
    SurveyPage,
    SurveyRecord,
    SurveyStats,
)
from butterfly_survey.services.database import (
    build_engine,
    is_unique_violation,
    surveys_table,
    utcnow,
)

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = ("id", "created_at", "firstname", "surname", "email")
DEFAULT_SORT_COLUMN = "created_at"
UPDATABLE_COLUMNS = (
    "firstname",
    "surname",
    "email",
    "address",
    "suburb",
    "postcode",
    "phone",
    "q1radio",
    "q2radio",
    "q3radio",
    "comments",
)
RECENT_WINDOW = timedelta(days=30)


class SurveyRepository:
    """CRUD, pagination and aggregates over ``surveys``.

    The engine (one shared connection for SQLite) is opened on first use and
    the table is created if missing at that point.
    """

    def __init__(self, database_url: str, engine: Optional[Engine] = None) -> None:
        self._database_url = database_url
        self._engine = engine
        self._schema_ready = False
        self._lock = RLock()

    def _get_engine(self) -> Engine:
        if self._engine is None:
            self._engine = build_engine(self._database_url)
        if not self._schema_ready:
            surveys_table.create(self._engine, checkfirst=True)
            self._schema_ready = True
            logger.info("Surveys table initialized")
        return self._engine

    @contextmanager
    def _transaction(self, action: str, email: str = "") -> Iterator[Connection]:
        # The SQLite engine shares one connection; transactions must not interleave on it.
        with self._lock:
            try:
                with self._get_engine().begin() as conn:
                    yield conn
            except IntegrityError as exc:
                if is_unique_violation(exc):
                    raise DuplicateEmailError(email) from exc
                logger.exception("Integrity error while trying to %s", action)
                raise StorageError(f"Failed to {action}: {exc.orig}") from exc
            except (SQLAlchemyError, OverflowError) as exc:
                logger.exception("Storage error while trying to %s", action)
                raise StorageError(f"Failed to {action}: {exc}") from exc

    # ── Commands ─────────────────────────────────────────

    def create(self, survey: ApiSurveyCreate) -> SurveyRecord:
        """Insert a survey; ``DuplicateEmailError`` if the e-mail is taken."""
        now = utcnow()
        values = survey.model_dump(include=set(UPDATABLE_COLUMNS))
        values.update(created_at=now, updated_at=now)

        with self._transaction("create survey", email=survey.email) as conn:
            result = conn.execute(insert(surveys_table).values(**values))
            new_id = result.inserted_primary_key[0]

        logger.info("Created survey %s", new_id)
        return SurveyRecord(id=new_id, **values)

    def update(self, survey_id: int, changes: Mapping[str, Any]) -> Optional[SurveyRecord]:
        """Apply whitelisted ``changes``; ``None`` if no row has ``survey_id``."""
        fields = {key: value for key, value in changes.items() if key in UPDATABLE_COLUMNS}
        if not fields:
            raise ValidationError("No valid fields to update")

        email = str(fields.get("email", ""))
        with self._transaction("update survey", email=email) as conn:
            result = conn.execute(
                update(surveys_table)
                .where(surveys_table.c.id == survey_id)
                .values(**fields, updated_at=utcnow())
            )
            if result.rowcount == 0:
                return None
            row = conn.execute(
                select(surveys_table).where(surveys_table.c.id == survey_id)
            ).mappings().one()

        return SurveyRecord.model_validate(dict(row))

    def delete(self, survey_id: int) -> bool:
        with self._transaction("delete survey") as conn:
            result = conn.execute(delete(surveys_table).where(surveys_table.c.id == survey_id))
            removed = result.rowcount > 0
        return removed

    # ── Queries ──────────────────────────────────────────

    def get_by_id(self, survey_id: int) -> Optional[SurveyRecord]:
        with self._transaction("fetch survey") as conn:
            row = conn.execute(
                select(surveys_table).where(surveys_table.c.id == survey_id)
            ).mappings().first()
        if row is None:
            return None
        return SurveyRecord.model_validate(dict(row))

    def get_page(
        self,
        page: int = 1,
        limit: int = 10,
        sort_by: str = DEFAULT_SORT_COLUMN,
        order: str = "desc",
    ) -> SurveyPage:
        """Return one page of surveys plus the total row count.

        ``sort_by`` and ``order`` are checked against the whitelist again here
        since they are interpolated into ORDER BY.
        """
        sort_by = getattr(sort_by, "value", sort_by)
        order = str(getattr(order, "value", order)).lower()
        column_name = sort_by if sort_by in SORTABLE_COLUMNS else DEFAULT_SORT_COLUMN
        descending = order != "asc"

        column = surveys_table.c[column_name]
        tiebreak = surveys_table.c.id
        ordering = (column.desc(), tiebreak.desc()) if descending else (column.asc(), tiebreak.asc())
        offset = (page - 1) * limit

        with self._transaction("fetch surveys") as conn:
            total = conn.execute(select(func.count()).select_from(surveys_table)).scalar_one()
            rows = conn.execute(
                select(surveys_table).order_by(*ordering).limit(limit).offset(offset)
            ).mappings().all()

        return SurveyPage(
            items=[SurveyRecord.model_validate(dict(row)) for row in rows],
            total=total,
        )

    def stats(self) -> SurveyStats:
        """Row count, rounded per-question averages, and recent submissions."""
        averages = [
            func.round(func.avg(cast(surveys_table.c[name], Float)), 2).label(name)
            for name in ("q1radio", "q2radio", "q3radio")
        ]
        cutoff = utcnow() - RECENT_WINDOW

        with self._transaction("compute survey statistics") as conn:
            total = conn.execute(select(func.count()).select_from(surveys_table)).scalar_one()
            avg_row = conn.execute(select(*averages)).mappings().one()
            recent = conn.execute(
                select(func.count())
                .select_from(surveys_table)
                .where(surveys_table.c.created_at >= cutoff)
            ).scalar_one()

        return SurveyStats(
            total_surveys=total,
            average_ratings=AverageRatings(
                question1=avg_row["q1radio"],
                question2=avg_row["q2radio"],
                question3=avg_row["q3radio"],
            ),
            recent_surveys=recent,
        )

    def ping(self) -> bool:
        try:
            with self._transaction("ping database") as conn:
                conn.execute(select(1))
        except StorageError:
            return False
        return True

    def close(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
                self._schema_ready = False
                logger.info("Survey database connection closed")
