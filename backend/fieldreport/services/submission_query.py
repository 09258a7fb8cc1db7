"""Query construction across the six submission tables.

Listing and analytics work on a single derived table built as a UNION ALL of
one SELECT per submission type, each carrying the same filters as bound
parameters. When a type filter is given only that table is selected.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Type

from sqlalchemy import String, literal, select, union, union_all
from sqlalchemy.sql import Subquery

from fieldreport.core.exceptions import InvalidSubmissionTypeError
from fieldreport.models.submission import SUBMISSION_MODELS, SubmissionMixin


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class SubmissionFilters:
    """Optional filters shared by listing, export and analytics.

    ``date_to`` is inclusive: the whole calendar day is matched.
    """

    type: Optional[str] = None
    area: Optional[str] = None
    user_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def __post_init__(self) -> None:
        if self.type is not None and self.type not in SUBMISSION_MODELS:
            raise InvalidSubmissionTypeError()
        if self.area is not None:
            self.area = self.area.strip() or None

    def models(self) -> List[Type[SubmissionMixin]]:
        if self.type:
            return [SUBMISSION_MODELS[self.type]]
        return list(SUBMISSION_MODELS.values())

    def conditions(self, model: Type[SubmissionMixin]) -> list:
        """WHERE clauses for one submission table."""
        clauses = []
        if self.area:
            clauses.append(model.area.ilike(f"%{_escape_like(self.area)}%", escape="\\"))
        if self.user_id is not None:
            clauses.append(model.user_id == self.user_id)
        if self.date_from:
            clauses.append(model.submitted_at >= datetime.combine(self.date_from, time.min))
        if self.date_to:
            clauses.append(model.submitted_at < datetime.combine(self.date_to + timedelta(days=1), time.min))
        return clauses


def submission_union(filters: SubmissionFilters, with_contact: bool = False) -> Subquery:
    """
    Derived table over the selected submission tables

    Columns: ``type``, ``id``, ``user_id``, ``area``, ``submitted_at`` and,
    with ``with_contact``, ``contact`` (the per-type headline column).
    """
    selects = []
    for model in filters.models():
        columns = [
            literal(model.submission_type, String).label("type"),
            model.id.label("id"),
            model.user_id.label("user_id"),
            model.area.label("area"),
            model.submitted_at.label("submitted_at"),
        ]
        if with_contact:
            columns.append(getattr(model, model.contact_column).label("contact"))
        selects.append(select(*columns).where(*filters.conditions(model)))

    if len(selects) == 1:
        return selects[0].subquery("submissions")
    return union_all(*selects).subquery("submissions")


def distinct_areas_query(submission_type: Optional[str] = None):
    """SELECT of distinct areas, sorted, from one table or all of them."""
    models = SubmissionFilters(type=submission_type).models()
    if len(models) == 1:
        model = models[0]
        return select(model.area).distinct().order_by(model.area)

    areas = union(*(select(model.area.label("area")) for model in models)).subquery("areas")
    return select(areas.c.area).order_by(areas.c.area)
