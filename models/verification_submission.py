import uuid

from sqlalchemy import Column, Integer, String, DateTime, Text, Enum as SQLEnum, Boolean, JSON
import enum
from models.base import Base, utcnow


class DocumentType(str, enum.Enum):
    GOVERNMENT_ID = "government_id"
    PASSPORT = "passport"
    DRIVERS_LICENSE = "drivers_license"
    VOTERS_ID = "voters_id"
    BUSINESS_REGISTRATION = "business_registration"
    TAX_CERTIFICATE = "tax_certificate"
    UTILITY_BILL = "utility_bill"
    SELFIE = "selfie"


class DocumentSlot(str, enum.Enum):
    """Single-document slots of a submission"""
    GOVERNMENT_ID = "government_id"
    GOVERNMENT_ID_BACK = "government_id_back"
    SELFIE_PHOTO = "selfie_photo"


class SubmissionStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    PENDING_RESUBMIT = "pending_resubmit"
    APPROVED = "approved"
    REJECTED = "rejected"


class ProviderType(str, enum.Enum):
    MANUAL = "manual"
    ONFIDO = "onfido"
    SUMSUB = "sumsub"
    JUMIO = "jumio"
    VERIFF = "veriff"


class VerificationSubmission(Base):
    __tablename__ = "verification_submissions"

    id = Column(Integer, primary_key=True)
    uuid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))

    vendor_id = Column(String(64), nullable=False, index=True)
    vendor_name = Column(String(200), nullable=False)
    vendor_email = Column(String(255), nullable=False)

    # evidence records: {id, type, file_url, file_name, file_size, mime_type, uploaded_at}
    government_id = Column(JSON, nullable=True)
    government_id_back = Column(JSON, nullable=True)
    selfie_photo = Column(JSON, nullable=True)
    business_documents = Column(JSON, default=list, nullable=False)

    id_number = Column(String(100), nullable=True)
    id_type = Column(String(50), nullable=True)
    id_issue_date = Column(String(20), nullable=True)
    current_address = Column(Text, nullable=True)

    status = Column(SQLEnum(SubmissionStatus, name="submission_status"), default=SubmissionStatus.DRAFT, nullable=False, index=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)  # empty while draft
    submission_count = Column(Integer, default=0, nullable=False)

    provider = Column(SQLEnum(ProviderType, name="verification_provider"), default=ProviderType.MANUAL, nullable=False)
    provider_ref = Column(String(255), nullable=True)
    provider_status = Column(String(30), nullable=True)

    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(String(64), nullable=True)
    review_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    resubmit_requested = Column(Boolean, default=False, nullable=False)
    resubmit_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def get_document(self, slot: DocumentSlot):
        if slot == DocumentSlot.GOVERNMENT_ID:
            return self.government_id
        if slot == DocumentSlot.GOVERNMENT_ID_BACK:
            return self.government_id_back
        if slot == DocumentSlot.SELFIE_PHOTO:
            return self.selfie_photo
        raise ValueError(f"Unknown document slot: {slot}")

    def set_document(self, slot: DocumentSlot, document: dict):
        if slot == DocumentSlot.GOVERNMENT_ID:
            self.government_id = document
        elif slot == DocumentSlot.GOVERNMENT_ID_BACK:
            self.government_id_back = document
        elif slot == DocumentSlot.SELFIE_PHOTO:
            self.selfie_photo = document
        else:
            raise ValueError(f"Unknown document slot: {slot}")
