"""Dashboard analytics routes (admin / ceo)"""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fieldreport.core.database import get_db
from fieldreport.schemas.analytics import ChartData, MonthlyChartData, SummaryResponse
from fieldreport.services.analytics_service import analytics_service
from fieldreport.api.deps import get_staff_user
from fieldreport.models.user import User

router = APIRouter()


@router.get("/by-type", response_model=ChartData)
def submissions_by_type(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    current_user: User = Depends(get_staff_user),
    db: Session = Depends(get_db)
):
    return analytics_service.by_type(db, date_from, date_to)


@router.get("/by-area", response_model=ChartData)
def submissions_by_area(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(get_staff_user),
    db: Session = Depends(get_db)
):
    """Top areas by report count"""
    return analytics_service.by_area(db, date_from, date_to, limit=limit)


@router.get("/by-user", response_model=ChartData)
def submissions_by_user(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(get_staff_user),
    db: Session = Depends(get_db)
):
    """Most active reporters, labelled by email"""
    return analytics_service.by_user(db, date_from, date_to, limit=limit)


@router.get("/by-month", response_model=MonthlyChartData)
def submissions_by_month(
    year: Optional[int] = Query(None, ge=2020, le=2100),
    current_user: User = Depends(get_staff_user),
    db: Session = Depends(get_db)
):
    """Monthly counts for one year, January to December"""
    return analytics_service.by_month(db, year or datetime.utcnow().year)


@router.get("/summary", response_model=SummaryResponse)
def summary(
    current_user: User = Depends(get_staff_user),
    db: Session = Depends(get_db)
):
    return analytics_service.summary(db)
