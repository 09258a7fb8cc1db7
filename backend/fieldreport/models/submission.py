"""Visit report models - one table per submission type"""

from typing import Dict, Tuple, Type

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Numeric, JSON, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import declared_attr, relationship
from fieldreport.core.database import Base


class SubmissionMixin:
    """Columns shared by every submission table.

    Subclasses set ``submission_type`` (the public type key), ``contact_column``
    (the column used as the row headline in listings) and ``detail_columns``
    (type-specific columns, in display order).
    """

    submission_type: str = ""
    contact_column: str = ""
    detail_columns: Tuple[str, ...] = ()

    id = Column(Integer, primary_key=True, index=True)
    area = Column(Text, nullable=False)
    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    @declared_attr
    def user_id(cls):
        return Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    @declared_attr
    def user(cls):
        return relationship("User")

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={self.id}, user_id={self.user_id}, area='{self.area}')>"

    def to_dict(self) -> dict:
        """Full row, including the submission type and the submitter's email."""
        data = {
            "id": self.id,
            "type": self.submission_type,
            "user_id": self.user_id,
            "user_email": self.user.email if self.user else None,
            "area": self.area,
        }
        for name in self.detail_columns:
            value = getattr(self, name)
            data[name] = float(value) if name.endswith("_amount") and value is not None else value
        data["submitted_at"] = self.submitted_at.isoformat() if self.submitted_at else None
        return data


class CollectionMixin:
    """Dues collection columns shared by dealer and stall visits"""

    accompanied_by = Column(Text)
    dues_amount = Column(Numeric(12, 2, asdecimal=False))
    collection_mode = Column(String(20))
    collection_amount = Column(Numeric(12, 2, asdecimal=False))
    competition_newspapers = Column(JSON, nullable=False, default=list)
    discussion = Column(Text)
    outcome = Column(Text)


class DepoSubmission(SubmissionMixin, Base):
    __tablename__ = "submissions_depo"

    submission_type = "depo"
    contact_column = "person_met"
    detail_columns = ("accompanied_by", "person_met", "competition_activity", "discussion", "outcome")

    accompanied_by = Column(Text)
    person_met = Column(Text, nullable=False)
    competition_activity = Column(Text, nullable=False)
    discussion = Column(Text)
    outcome = Column(Text)


class VendorSubmission(SubmissionMixin, Base):
    __tablename__ = "submissions_vendor"

    submission_type = "vendor"
    contact_column = "vendor_name"
    detail_columns = ("accompanied_by", "vendor_name", "phone", "outcome")

    accompanied_by = Column(Text)
    vendor_name = Column(Text, nullable=False)
    phone = Column(String(20), nullable=False)
    outcome = Column(Text)


class DealerSubmission(SubmissionMixin, CollectionMixin, Base):
    __tablename__ = "submissions_dealer"

    submission_type = "dealer"
    contact_column = "dealer_name"
    detail_columns = (
        "accompanied_by", "dealer_name", "dues_amount", "collection_mode",
        "collection_amount", "competition_newspapers", "discussion", "outcome",
    )

    dealer_name = Column(Text, nullable=False)

    __table_args__ = (
        CheckConstraint("dues_amount >= 0", name="chk_dealer_dues_amount"),
        CheckConstraint("collection_amount >= 0", name="chk_dealer_collection_amount"),
    )


class StallSubmission(SubmissionMixin, CollectionMixin, Base):
    __tablename__ = "submissions_stall"

    submission_type = "stall"
    contact_column = "stall_owner"
    detail_columns = (
        "accompanied_by", "stall_owner", "dues_amount", "collection_mode",
        "collection_amount", "competition_newspapers", "discussion", "outcome",
    )

    stall_owner = Column(Text, nullable=False)

    __table_args__ = (
        CheckConstraint("dues_amount >= 0", name="chk_stall_dues_amount"),
        CheckConstraint("collection_amount >= 0", name="chk_stall_collection_amount"),
    )


class ReaderSubmission(SubmissionMixin, Base):
    __tablename__ = "submissions_reader"

    submission_type = "reader"
    contact_column = "reader_name"
    detail_columns = ("reader_name", "contact_details", "present_reading", "readers_feedback")

    reader_name = Column(Text, nullable=False)
    contact_details = Column(Text, nullable=False)
    present_reading = Column(JSON, nullable=False, default=list)
    readers_feedback = Column(Text)


class OohSubmission(SubmissionMixin, Base):
    __tablename__ = "submissions_ooh"

    submission_type = "ooh"
    contact_column = "contact_person"
    detail_columns = ("segment", "contact_person", "existing_newspaper", "feedback_suggestion")

    segment = Column(String(50), nullable=False)
    contact_person = Column(Text, nullable=False)
    existing_newspaper = Column(JSON, nullable=False, default=list)
    feedback_suggestion = Column(Text)


SUBMISSION_MODELS: Dict[str, Type[SubmissionMixin]] = {
    model.submission_type: model
    for model in (
        DepoSubmission,
        VendorSubmission,
        DealerSubmission,
        StallSubmission,
        ReaderSubmission,
        OohSubmission,
    )
}

SUBMISSION_TYPES: Tuple[str, ...] = tuple(SUBMISSION_MODELS)

TYPE_LABELS: Dict[str, str] = {
    "depo": "Depo",
    "vendor": "Vendor",
    "dealer": "Dealer",
    "stall": "Stall",
    "reader": "Reader",
    "ooh": "OOH",
}
