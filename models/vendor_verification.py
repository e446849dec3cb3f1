# app/models/vendor_verification.py
import enum
import uuid

from sqlalchemy import (
    Boolean, Column, DateTime, Enum as SQLEnum, ForeignKey, Integer, JSON, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import attribute_keyed_dict, relationship

from models.base import Base, utcnow


class Category(str, enum.Enum):
    """The six independent verification checks"""
    PHONE = "phone"
    EMAIL = "email"
    GOVERNMENT_ID = "government_id"
    FACIAL = "facial"
    BUSINESS_DOCUMENTS = "business_documents"
    ADDRESS = "address"


class ItemStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


class OverallStatus(str, enum.Enum):
    UNVERIFIED = "unverified"
    PARTIALLY_VERIFIED = "partially_verified"
    VERIFIED = "verified"
    SUSPENDED = "suspended"


class TrustLevel(str, enum.Enum):
    NEW = "new"
    BASIC = "basic"
    TRUSTED = "trusted"
    PREMIUM = "premium"


class VerificationItem(Base):
    __tablename__ = "verification_items"
    __table_args__ = (
        UniqueConstraint("vendor_verification_id", "category", name="uq_verification_item_category"),
    )

    id = Column(Integer, primary_key=True)
    vendor_verification_id = Column(
        Integer, ForeignKey("vendor_verifications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category = Column(SQLEnum(Category, name="verification_category"), nullable=False)
    status = Column(SQLEnum(ItemStatus, name="verification_item_status"), default=ItemStatus.NOT_STARTED, nullable=False)

    # exactly one of verified_* / rejected_* is filled at a time
    verified_at = Column(DateTime(timezone=True), nullable=True)
    verified_by = Column(String(64), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by = Column(String(64), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    # reference to the uploaded proof (URL / storage id), never the file itself
    evidence = Column(String(1000), nullable=True)
    evidence_name = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    last_updated = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class VendorVerification(Base):
    __tablename__ = "vendor_verifications"

    id = Column(Integer, primary_key=True)
    uuid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))

    # ---------- identity ----------
    vendor_id = Column(String(64), unique=True, index=True, nullable=False)
    vendor_name = Column(String(200), nullable=False)
    vendor_email = Column(String(255), nullable=False)
    business_name = Column(String(200), nullable=True)

    # ---------- derived (recomputed by services.scoring, never set directly) ----------
    verification_score = Column(Integer, default=0, nullable=False)
    overall_status = Column(
        SQLEnum(OverallStatus, name="vendor_overall_status"), default=OverallStatus.UNVERIFIED, nullable=False, index=True
    )
    trust_level = Column(SQLEnum(TrustLevel, name="vendor_trust_level"), default=TrustLevel.NEW, nullable=False)
    badge_display = Column(JSON, default=list, nullable=False)

    # ---------- suspension override ----------
    is_suspended = Column(Boolean, default=False, nullable=False)
    suspension_reason = Column(Text, nullable=True)
    suspended_at = Column(DateTime(timezone=True), nullable=True)

    # ---------- metadata ----------
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_reviewed_at = Column(DateTime(timezone=True), nullable=True)
    last_reviewed_by = Column(String(64), nullable=True)

    items = relationship(
        "VerificationItem",
        collection_class=attribute_keyed_dict("category"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def item(self, category: Category) -> VerificationItem:
        return self.items[Category(category)]

    def statuses(self) -> dict:
        return {category: self.items[category].status for category in Category}
