"""Submission schemas - one create payload per visit type"""

from pydantic import ConfigDict, Field, field_validator
from typing import Annotated, Any, List, Literal, Optional, Union
from datetime import datetime
from enum import Enum

from fieldreport.schemas.base import CamelModel


class CollectionMode(str, Enum):
    DD = "DD"
    CASH = "Cash"
    CHEQUE = "Cheque"
    ONLINE_PAY = "Online Pay"


class OohSegment(str, Enum):
    HOTELS = "Hotels"
    HOSPITALS = "Hospitals"
    SCHOOLS = "Schools"
    COLLEGES = "Colleges"
    TRAVEL = "Travel"
    JEWELLERY = "Jewellery"
    BANK = "Bank"
    OTHERS = "Others"


RequiredText = Annotated[str, Field(min_length=1, max_length=2000)]
OptionalText = Annotated[Optional[str], Field(max_length=5000)]
Amount = Annotated[Optional[float], Field(ge=0)]


class SubmissionBase(CamelModel):
    """Fields common to every visit report"""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    area: str = Field(..., min_length=1, max_length=255)


class NewspaperCount(CamelModel):
    """A competing newspaper and the copies seen"""
    name: str = Field(..., min_length=1, max_length=100)
    number: Optional[str] = Field(default=None, max_length=20)

    @field_validator("number", mode="before")
    @classmethod
    def stringify_number(cls, v):
        if v is None or v == "":
            return None
        return str(v)


class DepoSubmissionCreate(SubmissionBase):
    type: Literal["depo"]
    accompanied_by: OptionalText = None
    person_met: RequiredText
    competition_activity: RequiredText
    discussion: OptionalText = None
    outcome: OptionalText = None


class VendorSubmissionCreate(SubmissionBase):
    type: Literal["vendor"]
    accompanied_by: OptionalText = None
    vendor_name: RequiredText
    phone: str = Field(..., min_length=6, max_length=20, pattern=r"^[0-9+()\-\s]+$")
    outcome: OptionalText = None


class _CollectionVisit(SubmissionBase):
    accompanied_by: OptionalText = None
    dues_amount: Amount = None
    collection_mode: Optional[CollectionMode] = None
    collection_amount: Amount = None
    competition_newspapers: List[NewspaperCount] = Field(default_factory=list)
    discussion: OptionalText = None
    outcome: OptionalText = None

    @field_validator("collection_mode", mode="before")
    @classmethod
    def blank_mode_is_none(cls, v):
        """The form posts an empty string when no mode is selected"""
        return v or None


class DealerSubmissionCreate(_CollectionVisit):
    type: Literal["dealer"]
    dealer_name: RequiredText


class StallSubmissionCreate(_CollectionVisit):
    type: Literal["stall"]
    stall_owner: RequiredText


class ReaderSubmissionCreate(SubmissionBase):
    type: Literal["reader"]
    reader_name: RequiredText
    contact_details: RequiredText
    present_reading: List[str] = Field(default_factory=list)
    readers_feedback: OptionalText = None


class OohSubmissionCreate(SubmissionBase):
    type: Literal["ooh"]
    segment: OohSegment
    contact_person: RequiredText
    existing_newspaper: List[str] = Field(default_factory=list)
    feedback_suggestion: OptionalText = None


# Discriminated on ``type`` where it is used as a request body
SubmissionCreate = Union[
    DepoSubmissionCreate,
    VendorSubmissionCreate,
    DealerSubmissionCreate,
    StallSubmissionCreate,
    ReaderSubmissionCreate,
    OohSubmissionCreate,
]


class SubmissionCreatedResponse(CamelModel):
    id: int
    type: str
    message: str = "Submitted successfully"


class SubmissionListItem(CamelModel):
    """One row of the combined listing"""
    id: int
    type: str
    area: str
    contact: Optional[str] = None
    user_id: Optional[int] = None
    user_email: Optional[str] = None
    submitted_at: Optional[datetime] = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class SubmissionPage(CamelModel):
    data: List[SubmissionListItem]
    pagination: Pagination


class SubmissionDetail(CamelModel):
    """Full row of a single table; type-specific columns vary"""
    model_config = ConfigDict(extra="allow")

    id: int
    type: str
    user_id: int
    user_email: Optional[str] = None
    area: str
    submitted_at: Optional[datetime] = None


def submission_values(payload: Any) -> dict:
    """Column values for the ORM model, without the discriminator."""
    return payload.model_dump(mode="json", exclude={"type"})
