"""Analytics service - chart aggregations over all submission tables"""

import calendar
from datetime import date, datetime
from typing import Dict, List, Optional

from sqlalchemy import desc, extract, func, select
from sqlalchemy.orm import Session

from fieldreport.models.submission import TYPE_LABELS
from fieldreport.models.user import User, UserRole
from fieldreport.services.submission_query import SubmissionFilters, submission_union

MONTH_LABELS = [calendar.month_abbr[month] for month in range(1, 13)]


def _chart(rows) -> Dict[str, List]:
    return {
        "labels": [label for label, _ in rows],
        "data": [int(count) for _, count in rows],
    }


class AnalyticsService:
    """Counts for the dashboard charts and summary cards"""

    @staticmethod
    def by_type(db: Session, date_from: Optional[date] = None, date_to: Optional[date] = None) -> Dict[str, List]:
        combined = submission_union(SubmissionFilters(date_from=date_from, date_to=date_to))
        count = func.count().label("count")
        rows = db.execute(
            select(combined.c.type, count)
            .group_by(combined.c.type)
            .order_by(desc("count"), combined.c.type)
        ).all()
        return _chart([(TYPE_LABELS.get(type_, type_), n) for type_, n in rows])

    @staticmethod
    def by_area(
        db: Session,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 10,
    ) -> Dict[str, List]:
        combined = submission_union(SubmissionFilters(date_from=date_from, date_to=date_to))
        count = func.count().label("count")
        rows = db.execute(
            select(combined.c.area, count)
            .group_by(combined.c.area)
            .order_by(desc("count"), combined.c.area)
            .limit(limit)
        ).all()
        return _chart(rows)

    @staticmethod
    def by_user(
        db: Session,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 10,
    ) -> Dict[str, List]:
        combined = submission_union(SubmissionFilters(date_from=date_from, date_to=date_to))
        count = func.count().label("count")
        rows = db.execute(
            select(User.email, count)
            .select_from(combined.join(User, User.id == combined.c.user_id))
            .group_by(combined.c.user_id, User.email)
            .order_by(desc("count"), User.email)
            .limit(limit)
        ).all()
        return _chart(rows)

    @staticmethod
    def by_month(db: Session, year: int) -> Dict:
        """Twelve zero-filled monthly counts for one calendar year"""
        combined = submission_union(
            SubmissionFilters(date_from=date(year, 1, 1), date_to=date(year, 12, 31))
        )
        month = extract("month", combined.c.submitted_at)
        rows = db.execute(
            select(month.label("month"), func.count().label("count"))
            .group_by(month)
        ).all()

        data = [0] * 12
        for month_number, count in rows:
            data[int(month_number) - 1] = int(count)

        return {"labels": MONTH_LABELS, "data": data, "year": year}

    @staticmethod
    def summary(db: Session, today: Optional[date] = None) -> Dict[str, int]:
        today = today or datetime.utcnow().date()
        month_start = today.replace(day=1)
        month_end = today.replace(day=calendar.monthrange(today.year, today.month)[1])

        def count_submissions(filters: SubmissionFilters) -> int:
            combined = submission_union(filters)
            return db.execute(select(func.count()).select_from(combined)).scalar_one()

        return {
            "total_submissions": count_submissions(SubmissionFilters()),
            "total_users": db.query(User).filter(User.role == UserRole.USER.value).count(),
            "today_submissions": count_submissions(SubmissionFilters(date_from=today, date_to=today)),
            "this_month_submissions": count_submissions(
                SubmissionFilters(date_from=month_start, date_to=month_end)
            ),
        }


analytics_service = AnalyticsService()
