# app/services/review_workflow.py
from sqlalchemy import select
from typing import List, Optional, Dict, Any
import logging

from models.vendor_verification import Category, ItemStatus, VendorVerification, VerificationItem
from models.verification_submission import SubmissionStatus, VerificationSubmission
from services.submission_service import SubmissionService
from services.verification_service import VerificationService

logger = logging.getLogger(__name__)


class ReviewWorkflow:
    """Keeps a vendor's submission and verification ledger moving together.

    The two are stored and locked independently. Approving a submission
    does not touch the ledger, so admins either use
    ``approve_submission_with_pending`` or run ``find_inconsistencies``
    periodically to catch vendors left half way.
    """

    def __init__(self, verification_service: VerificationService, submission_service: SubmissionService):
        self.verifications = verification_service
        self.submissions = submission_service

    async def approve_submission_with_pending(
            self,
            vendor_id: str,
            admin_id: str,
            admin_email: str,
            notes: Optional[str] = None
    ) -> Dict[str, Any]:
        """Approve the submission, then every pending ledger category.

        Two separate transactions, always in this order. If the second step
        fails the submission stays approved and the vendor shows up in
        ``find_inconsistencies``.
        """
        submission = await self.submissions.approve_submission(vendor_id, admin_id, admin_email, notes)

        approved: List[Category] = []
        record = await self.verifications.find_vendor_verification(vendor_id)
        if record is None:
            logger.warning(f"Submission of vendor {vendor_id} approved but the vendor has no verification record")
        else:
            approved = await self.verifications.approve_all_pending_verifications(vendor_id, admin_id, admin_email)
            record = await self.verifications.get_vendor_verification(vendor_id)

        return {
            "submission": submission,
            "verification": record,
            "approved_categories": approved,
        }

    async def find_inconsistencies(self) -> List[Dict[str, Any]]:
        """Vendors whose current submission is approved while ledger categories are still pending"""
        db = self.submissions.db

        latest_ids = (
            select(VerificationSubmission.vendor_id, VerificationSubmission.id)
            .order_by(VerificationSubmission.vendor_id, VerificationSubmission.id.desc())
        )
        result = await db.execute(latest_ids)
        current: Dict[str, int] = {}
        for vendor_id, submission_id in result.all():
            current.setdefault(vendor_id, submission_id)

        result = await db.execute(
            select(VerificationSubmission.vendor_id)
            .where(
                VerificationSubmission.id.in_(list(current.values())),
                VerificationSubmission.status == SubmissionStatus.APPROVED,
            )
        )
        approved_vendors = list(result.scalars().all())
        if not approved_vendors:
            return []

        result = await db.execute(
            select(VendorVerification)
            .where(
                VendorVerification.vendor_id.in_(approved_vendors),
                VendorVerification.items.any(VerificationItem.status == ItemStatus.PENDING),
            )
            .order_by(VendorVerification.vendor_id)
            .execution_options(populate_existing=True)
        )

        findings = []
        for record in result.scalars().all():
            pending = [c for c in Category if record.item(c).status == ItemStatus.PENDING]
            findings.append({
                "vendor_id": record.vendor_id,
                "vendor_name": record.vendor_name,
                "submission_status": SubmissionStatus.APPROVED,
                "pending_categories": pending,
            })

        if findings:
            logger.warning(f"{len(findings)} vendor(s) approved at submission level with pending categories")
        return findings
