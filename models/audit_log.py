# app/models/audit_log.py
from sqlalchemy import Column, Integer, String, Text, DateTime, event
import enum
import uuid
from models.base import Base, utcnow


class AuditAction(str, enum.Enum):
    VERIFICATION_INITIALIZED = "VERIFICATION_INITIALIZED"
    VERIFICATION_EVIDENCE_SUBMITTED = "VERIFICATION_EVIDENCE_SUBMITTED"
    VERIFICATION_APPROVED = "VERIFICATION_APPROVED"
    VERIFICATION_REJECTED = "VERIFICATION_REJECTED"
    VERIFICATION_EXPIRED = "VERIFICATION_EXPIRED"
    VENDOR_SUSPENDED = "VENDOR_SUSPENDED"
    VENDOR_REINSTATED = "VENDOR_REINSTATED"
    SUBMISSION_SUBMITTED = "SUBMISSION_SUBMITTED"
    SUBMISSION_REVIEW_STARTED = "SUBMISSION_REVIEW_STARTED"
    SUBMISSION_APPROVED = "SUBMISSION_APPROVED"
    SUBMISSION_REJECTED = "SUBMISSION_REJECTED"
    SUBMISSION_RESUBMIT_REQUESTED = "SUBMISSION_RESUBMIT_REQUESTED"
    SUBMISSION_RETURNED_TO_DRAFT = "SUBMISSION_RETURNED_TO_DRAFT"


class ActorType(str, enum.Enum):
    ADMIN = "admin"
    VENDOR = "vendor"
    SYSTEM = "system"


# verification_type for entries that are not about a single category
VENDOR_SCOPE = "vendor"
SUBMISSION_SCOPE = "submission"


class VerificationAuditLog(Base):
    __tablename__ = "verification_audit_logs"

    id = Column(Integer, primary_key=True)
    uuid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))

    action = Column(String(100), nullable=False, index=True)
    vendor_id = Column(String(64), nullable=False, index=True)
    vendor_name = Column(String(200), nullable=False)
    verification_type = Column(String(50), nullable=False)  # category, "vendor" or "submission"

    actor_type = Column(String(20), nullable=False, default=ActorType.ADMIN.value)
    admin_id = Column(String(64), nullable=True)
    admin_email = Column(String(255), nullable=True)

    previous_status = Column(String(30), nullable=True)
    new_status = Column(String(30), nullable=False)
    details = Column(Text, nullable=False, default="")

    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)


@event.listens_for(VerificationAuditLog, "before_update")
def _refuse_audit_update(mapper, connection, target):
    raise RuntimeError(f"Audit log entries are immutable (id={target.id})")
