"""Visit report routes"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import StreamingResponse
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from fieldreport.core.database import get_db
from fieldreport.schemas.submission import (
    SubmissionCreate,
    SubmissionCreatedResponse,
    SubmissionDetail,
    SubmissionListItem,
    SubmissionPage,
    Pagination,
)
from fieldreport.services.submission_query import SubmissionFilters
from fieldreport.services.submission_service import submission_service, export_columns
from fieldreport.services.export_service import export_service, CSV_MEDIA_TYPE, XLSX_MEDIA_TYPE
from fieldreport.services.audit_service import audit_service, AuditAction
from fieldreport.api.deps import client_ip, get_active_user, get_staff_user
from fieldreport.models.user import User

router = APIRouter()


def _filters(
    type: Optional[str] = Query(None, description="Submission type"),
    area: Optional[str] = Query(None, description="Case-insensitive substring of the area"),
    user: Optional[int] = Query(None, description="Submitting user id"),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
) -> SubmissionFilters:
    return SubmissionFilters(
        type=type,
        area=area,
        user_id=user,
        date_from=date_from,
        date_to=date_to,
    )


@router.post("", response_model=SubmissionCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_submission(
    request: Request,
    payload: SubmissionCreate = Body(..., discriminator="type"),
    current_user: User = Depends(get_active_user),
    db: Session = Depends(get_db)
):
    """
    File a visit report

    The ``type`` field selects the report form and its table.
    """
    record = submission_service.create_submission(db, current_user, payload)
    audit_service.log_event(
        db,
        action=AuditAction.SUBMISSION_CREATED,
        user_id=current_user.id,
        ip_address=client_ip(request),
        metadata={"type": payload.type, "submission_id": record.id},
    )
    return SubmissionCreatedResponse(id=record.id, type=payload.type)


@router.get("", response_model=SubmissionPage)
def list_submissions(
    filters: SubmissionFilters = Depends(_filters),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_staff_user),
    db: Session = Depends(get_db)
):
    """Combined listing over every report type, newest first"""
    rows, total = submission_service.list_submissions(db, filters, page=page, limit=limit)
    return SubmissionPage(
        data=[SubmissionListItem(**row) for row in rows],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=submission_service.page_count(total, limit),
        ),
    )


@router.get("/areas", response_model=List[str])
def get_areas(
    type: Optional[str] = Query(None),
    current_user: User = Depends(get_active_user),
    db: Session = Depends(get_db)
):
    """Distinct areas already reported, for form suggestions and filters"""
    return submission_service.get_areas(db, type)


@router.get("/export")
def export_submissions(
    request: Request,
    filters: SubmissionFilters = Depends(_filters),
    format: str = Query("csv", pattern="^(csv|xlsx)$"),
    current_user: User = Depends(get_staff_user),
    db: Session = Depends(get_db)
):
    """
    Download the filtered submissions as CSV or Excel

    Returns:
        File attachment
    """
    rows = submission_service.export_rows(db, filters)
    columns = export_columns(filters)

    if format == "xlsx":
        content = export_service.to_xlsx(rows, columns)
        media_type = XLSX_MEDIA_TYPE
    else:
        content = export_service.to_csv(rows, columns)
        media_type = CSV_MEDIA_TYPE

    audit_service.log_event(
        db,
        action=AuditAction.SUBMISSIONS_EXPORTED,
        user_id=current_user.id,
        ip_address=client_ip(request),
        metadata={"format": format, "rows": len(rows), "type": filters.type},
    )

    filename = export_service.filename(format)
    return StreamingResponse(
        iter([content]),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/{submission_type}/{submission_id}", response_model=SubmissionDetail)
def get_submission(
    submission_type: str,
    submission_id: int,
    current_user: User = Depends(get_staff_user),
    db: Session = Depends(get_db)
):
    """Full detail of one report"""
    record = submission_service.get_submission(db, submission_type, submission_id)
    return SubmissionDetail.model_validate(
        {to_camel(key): value for key, value in record.to_dict().items()}
    )
