# schemas/submission.py
from pydantic import BaseModel, EmailStr, Field, computed_field
from datetime import datetime
from typing import Optional, List

from core.constants import DOCUMENT_TYPE_NAMES, SUBMISSION_STATUS_NAMES
from models.verification_submission import DocumentType, ProviderType, SubmissionStatus


class SubmissionCreate(BaseModel):
    vendor_name: str
    vendor_email: EmailStr


class DocumentUpload(BaseModel):
    file_url: str = Field(..., min_length=1)
    file_name: str
    document_type: Optional[DocumentType] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None


class BusinessDocumentUpload(DocumentUpload):
    document_type: DocumentType = DocumentType.BUSINESS_REGISTRATION


class SubmissionInfoUpdate(BaseModel):
    id_number: Optional[str] = None
    id_type: Optional[str] = None
    id_issue_date: Optional[str] = None
    current_address: Optional[str] = None


class ReviewNotes(BaseModel):
    notes: Optional[str] = None


class ReviewReason(BaseModel):
    reason: str = Field(..., min_length=1)


class DocumentRead(BaseModel):
    id: str
    type: DocumentType
    file_url: str
    file_name: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    uploaded_at: datetime

    @computed_field
    @property
    def type_name(self) -> str:
        return DOCUMENT_TYPE_NAMES.get(self.type.value, self.type.value)


class SubmissionRead(BaseModel):
    id: int
    uuid: str
    vendor_id: str
    vendor_name: str
    vendor_email: str

    government_id: Optional[DocumentRead] = None
    government_id_back: Optional[DocumentRead] = None
    selfie_photo: Optional[DocumentRead] = None
    business_documents: List[DocumentRead] = []

    id_number: Optional[str] = None
    id_type: Optional[str] = None
    id_issue_date: Optional[str] = None
    current_address: Optional[str] = None

    status: SubmissionStatus
    submitted_at: Optional[datetime] = None
    submission_count: int

    provider: ProviderType
    provider_ref: Optional[str] = None
    provider_status: Optional[str] = None

    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    review_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    resubmit_requested: bool
    resubmit_reason: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @computed_field
    @property
    def status_name(self) -> str:
        return SUBMISSION_STATUS_NAMES.get(self.status.value, self.status.value)


class SubmissionStats(BaseModel):
    total: int
    pending: int
    under_review: int
    approved: int
    rejected: int
    pending_resubmit: int


class ProviderStatusRead(BaseModel):
    provider: ProviderType
    display_name: str
    supports_liveness: bool
    success: bool
    status: SubmissionStatus
    provider_ref: Optional[str] = None
    confidence: Optional[float] = None
    error: Optional[str] = None


class InconsistencyRead(BaseModel):
    vendor_id: str
    vendor_name: str
    submission_status: SubmissionStatus
    pending_categories: List[str]
