"""Form-response repository: storage access for the legacy ``survey`` table."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from threading import RLock
from typing import Iterator, Optional

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from butterfly_survey.domain.errors import StorageError
from butterfly_survey.models.schemas import (
    ResponsePage,
    RunningAverages,
    SurveyFormSubmission,
    SurveyResponseRecord,
)
from butterfly_survey.services.database import build_engine, responses_table, utcnow

logger = logging.getLogger(__name__)

# Listing sort keys -> legacy column names.
SORT_COLUMNS = {
    "date": "date",
    "firstname": "fname",
    "surname": "sname",
    "email": "email",
}
DEFAULT_SORT_KEY = "date"


class SurveyResponseRepository:
    """Append-only store for public form submissions.

    Each operation opens its own connection and closes it when done.
    """

    def __init__(self, database_url: str, engine: Optional[Engine] = None) -> None:
        self._database_url = database_url
        self._engine = engine
        self._schema_ready = False
        self._lock = RLock()

    def _get_engine(self) -> Engine:
        if self._engine is None:
            self._engine = build_engine(self._database_url, per_call=True)
        if not self._schema_ready:
            responses_table.create(self._engine, checkfirst=True)
            self._schema_ready = True
            logger.info("Survey response table initialized")
        return self._engine

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Connection]:
        # In-memory databases fall back to one shared connection.
        with self._lock:
            try:
                with self._get_engine().begin() as conn:
                    yield conn
            except (SQLAlchemyError, OverflowError) as exc:
                logger.exception("Storage error while trying to %s", action)
                raise StorageError(f"Failed to {action}: {exc}") from exc

    def add(self, submission: SurveyFormSubmission) -> SurveyResponseRecord:
        values = {
            "fname": submission.firstname,
            "sname": submission.surname,
            "email": submission.email,
            "date": utcnow(),
            "q1": submission.q1radio,
            "q2": submission.q2radio,
            "q3": submission.q3radio,
            "colour": submission.butterfly_colour,
            "comment": submission.comments,
        }
        with self._transaction("store survey response") as conn:
            result = conn.execute(insert(responses_table).values(**values))
            new_id = result.inserted_primary_key[0]
        return SurveyResponseRecord(id=new_id, **values)

    def running_averages(self) -> RunningAverages:
        """Averages over every stored response, rounded to two places."""
        query = select(
            func.count().label("count"),
            func.avg(responses_table.c.q1).label("q1"),
            func.avg(responses_table.c.q2).label("q2"),
            func.avg(responses_table.c.q3).label("q3"),
        )
        with self._transaction("retrieve survey data") as conn:
            row = conn.execute(query).mappings().one()

        if not row["count"]:
            return RunningAverages()
        avg_q1 = round(row["q1"], 2)
        avg_q2 = round(row["q2"], 2)
        avg_q3 = round(row["q3"], 2)
        return RunningAverages(
            survey_count=row["count"],
            avg_q1=avg_q1,
            avg_q2=avg_q2,
            avg_q3=avg_q3,
            avg_total=round((avg_q1 + avg_q2 + avg_q3) / 3, 2),
        )

    def get_page(
        self,
        page: int = 1,
        limit: int = 20,
        sort_by: str = DEFAULT_SORT_KEY,
        order: str = "desc",
    ) -> ResponsePage:
        sort_by = getattr(sort_by, "value", sort_by)
        order = str(getattr(order, "value", order)).lower()
        column = responses_table.c[SORT_COLUMNS.get(sort_by, SORT_COLUMNS[DEFAULT_SORT_KEY])]
        tiebreak = responses_table.c.id
        if order == "asc":
            ordering = (column.asc(), tiebreak.asc())
        else:
            ordering = (column.desc(), tiebreak.desc())

        with self._transaction("retrieve surveys") as conn:
            total = conn.execute(select(func.count()).select_from(responses_table)).scalar_one()
            rows = conn.execute(
                select(responses_table)
                .order_by(*ordering)
                .limit(limit)
                .offset((page - 1) * limit)
            ).mappings().all()

        return ResponsePage(
            items=[SurveyResponseRecord.model_validate(dict(row)) for row in rows],
            total=total,
        )

    def count(self) -> int:
        with self._transaction("count survey responses") as conn:
            return conn.execute(select(func.count()).select_from(responses_table)).scalar_one()

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
