"""Submission service - create, list, look up and export visit reports"""

import math
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from fieldreport.config import settings
from fieldreport.core.exceptions import InvalidSubmissionTypeError, ResourceNotFoundError
from fieldreport.core.metrics import SUBMISSIONS_CREATED
from fieldreport.models.submission import SUBMISSION_MODELS, SubmissionMixin
from fieldreport.models.user import User
from fieldreport.schemas.submission import submission_values
from fieldreport.services.submission_query import (
    SubmissionFilters,
    distinct_areas_query,
    submission_union,
)

logger = logging.getLogger(__name__)

COMMON_EXPORT_COLUMNS = ("id", "type", "area", "user_email", "submitted_at")


def export_columns(filters: SubmissionFilters) -> List[str]:
    """Common columns followed by every type-specific column, first-seen order."""
    columns = list(COMMON_EXPORT_COLUMNS)
    for model in filters.models():
        for name in model.detail_columns:
            if name not in columns:
                columns.append(name)
    return columns


class SubmissionService:
    """Service for visit report persistence and retrieval"""

    @staticmethod
    def create_submission(db: Session, user: User, payload: Any) -> SubmissionMixin:
        """
        Persist a visit report in its type's table

        Args:
            db: Database session
            user: Submitting user
            payload: One of the per-type create schemas

        Returns:
            Created row
        """
        model = SUBMISSION_MODELS[payload.type]
        record = model(user_id=user.id, **submission_values(payload))
        db.add(record)
        db.commit()
        db.refresh(record)

        SUBMISSIONS_CREATED.labels(payload.type).inc()
        logger.info("Submission created: type=%s id=%s user_id=%s", payload.type, record.id, user.id)
        return record

    @staticmethod
    def list_submissions(
        db: Session,
        filters: SubmissionFilters,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        One page of submissions across the selected tables, newest first

        Returns:
            (rows, total) where total counts every matching row
        """
        combined = submission_union(filters, with_contact=True)

        total = db.execute(select(func.count()).select_from(combined)).scalar_one()

        query = (
            select(combined, User.email.label("user_email"))
            .select_from(combined.outerjoin(User, User.id == combined.c.user_id))
            .order_by(combined.c.submitted_at.desc(), combined.c.type, combined.c.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        rows = [dict(row) for row in db.execute(query).mappings().all()]
        return rows, total

    @staticmethod
    def page_count(total: int, limit: int) -> int:
        return max(1, math.ceil(total / limit)) if limit else 1

    @staticmethod
    def get_submission(db: Session, submission_type: str, submission_id: int) -> SubmissionMixin:
        model = SUBMISSION_MODELS.get(submission_type)
        if model is None:
            raise InvalidSubmissionTypeError()

        record = (
            db.query(model)
            .options(joinedload(model.user))
            .filter(model.id == submission_id)
            .first()
        )
        if not record:
            raise ResourceNotFoundError("Submission")
        return record

    @staticmethod
    def get_areas(db: Session, submission_type: Optional[str] = None) -> List[str]:
        return list(db.execute(distinct_areas_query(submission_type)).scalars().all())

    @staticmethod
    def export_rows(db: Session, filters: SubmissionFilters) -> List[Dict[str, Any]]:
        """
        Full rows of every matching submission for file export, newest first

        Capped at EXPORT_MAX_ROWS.
        """
        cap = settings.EXPORT_MAX_ROWS
        rows: List[Dict[str, Any]] = []
        for model in filters.models():
            records = (
                db.query(model)
                .options(joinedload(model.user))
                .filter(*filters.conditions(model))
                .order_by(model.submitted_at.desc(), model.id.desc())
                .limit(cap)
                .all()
            )
            rows.extend(record.to_dict() for record in records)

        rows.sort(key=lambda row: (row["submitted_at"] or "", row["type"], row["id"]), reverse=True)
        if len(rows) > cap:
            logger.warning("Export truncated to %s rows", cap)
        return rows[:cap]


# Singleton instance
submission_service = SubmissionService()
