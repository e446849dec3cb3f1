from models.base import Base

from models.vendor_verification import VendorVerification, VerificationItem
from models.verification_submission import VerificationSubmission
from models.audit_log import VerificationAuditLog
