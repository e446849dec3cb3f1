# schemas/verification.py
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, List, Dict

from core.constants import get_verification_badge_info
from models.vendor_verification import Category, ItemStatus, OverallStatus, TrustLevel


class VerificationInitialize(BaseModel):
    vendor_name: str
    vendor_email: EmailStr
    business_name: Optional[str] = None


class EvidenceSubmit(BaseModel):
    category: Category
    evidence: str = Field(..., min_length=1)  # URL or storage id of the uploaded proof
    evidence_name: Optional[str] = None


class ApproveRequest(BaseModel):
    notes: Optional[str] = None


class ReasonRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class VerificationItemRead(BaseModel):
    category: Category
    status: ItemStatus
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    expires_at: Optional[datetime] = None
    evidence: Optional[str] = None
    evidence_name: Optional[str] = None
    notes: Optional[str] = None
    last_updated: datetime

    class Config:
        from_attributes = True


class BadgeRead(BaseModel):
    id: str
    label: str
    icon: str
    color: str

    @classmethod
    def for_badge(cls, badge: str) -> "BadgeRead":
        return cls(id=badge, **get_verification_badge_info(badge))


class VendorVerificationRead(BaseModel):
    id: int
    uuid: str
    vendor_id: str
    vendor_name: str
    vendor_email: str
    business_name: Optional[str] = None

    verification_score: int
    overall_status: OverallStatus
    trust_level: TrustLevel
    badge_display: List[str] = []
    badges: List[BadgeRead] = []
    items: Dict[Category, VerificationItemRead]

    is_suspended: bool
    suspension_reason: Optional[str] = None
    suspended_at: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime
    last_reviewed_at: Optional[datetime] = None
    last_reviewed_by: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_record(cls, record) -> "VendorVerificationRead":
        data = cls.model_validate(record)
        data.badges = [BadgeRead.for_badge(b) for b in data.badge_display]
        return data


class VendorVerificationSummary(BaseModel):
    vendor_id: str
    vendor_name: str
    business_name: Optional[str] = None
    verification_score: int
    overall_status: OverallStatus
    trust_level: TrustLevel
    badge_display: List[str] = []
    is_suspended: bool
    updated_at: datetime

    class Config:
        from_attributes = True


class BatchApprovalResult(BaseModel):
    approved_categories: List[Category]
    verification: VendorVerificationRead


class PublishEligibility(BaseModel):
    vendor_id: str
    overall_status: OverallStatus
    can_publish: bool
    reason: Optional[str] = None
    product_status: Optional[str] = None


class ExpirySweepResult(BaseModel):
    expired: Dict[str, List[Category]]
    total: int
