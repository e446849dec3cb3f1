# app/services/submission_service.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional, Dict, Any, Tuple
import uuid
import logging

from core.exceptions import (
    InvalidStateError, NotFoundError, ProviderError, ValidationError, VerificationError
)
from core.locks import SellerLocks, locked_transaction
from models.audit_log import AuditAction, ActorType, SUBMISSION_SCOPE
from models.base import utcnow
from models.verification_submission import (
    DocumentSlot, DocumentType, SubmissionStatus, VerificationSubmission
)
from services.audit_service import AuditService
from services.verification_provider import VerificationProvider, VerificationResult

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = (SubmissionStatus.DRAFT, SubmissionStatus.PENDING_RESUBMIT)
SUBMITTABLE_STATUSES = (SubmissionStatus.DRAFT, SubmissionStatus.PENDING_RESUBMIT)
DRAFTABLE_STATUSES = (SubmissionStatus.DRAFT, SubmissionStatus.SUBMITTED, SubmissionStatus.PENDING_RESUBMIT)

INFO_FIELDS = ("id_number", "id_type", "id_issue_date", "current_address")

SLOT_DEFAULT_TYPES = {
    DocumentSlot.GOVERNMENT_ID: DocumentType.GOVERNMENT_ID,
    DocumentSlot.GOVERNMENT_ID_BACK: DocumentType.GOVERNMENT_ID,
    DocumentSlot.SELFIE_PHOTO: DocumentType.SELFIE,
}


def validate_submission(submission: VerificationSubmission) -> List[str]:
    """Names of the required pieces still missing before review"""
    missing = []
    if not submission.government_id:
        missing.append("government ID front")
    if not submission.selfie_photo:
        missing.append("selfie photo")
    if not submission.id_number:
        missing.append("ID number")
    if not submission.id_type:
        missing.append("ID type")
    return missing


def new_document(
        document_type: DocumentType,
        file_url: str,
        file_name: str,
        file_size: Optional[int] = None,
        mime_type: Optional[str] = None
) -> Dict[str, Any]:
    return {
        "id": f"doc_{uuid.uuid4().hex[:12]}",
        "type": DocumentType(document_type).value,
        "file_url": file_url,
        "file_name": file_name,
        "file_size": file_size,
        "mime_type": mime_type,
        "uploaded_at": utcnow().isoformat(),
    }


class SubmissionService:
    """Evidence bundle of a vendor and its review workflow.

    draft -> submitted -> under_review -> approved | rejected | pending_resubmit
    pending_resubmit -> submitted (vendor fixes evidence and submits again)
    """

    def __init__(
            self,
            db: AsyncSession,
            locks: SellerLocks,
            provider: VerificationProvider,
            audit: Optional[AuditService] = None
    ):
        self.db = db
        self.locks = locks
        self.provider = provider
        self.audit = audit or AuditService(db)

    def _transaction(self, vendor_id: str):
        return locked_transaction(self.db, self.locks, vendor_id)

    async def _current(self, vendor_id: str, for_update: bool = False) -> Optional[VerificationSubmission]:
        query = (
            select(VerificationSubmission)
            .where(VerificationSubmission.vendor_id == vendor_id)
            .order_by(VerificationSubmission.id.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_or_404(self, vendor_id: str, for_update: bool = False) -> VerificationSubmission:
        submission = await self._current(vendor_id, for_update=for_update)
        if not submission:
            raise NotFoundError("Verification submission", vendor_id)
        return submission

    def _require(self, submission: VerificationSubmission, allowed, attempted: str):
        if submission.status not in allowed:
            raise InvalidStateError(submission.status.value, attempted)

    # --------------------------
    # 1️⃣ Create / read
    # --------------------------

    async def create_submission(self, vendor_id: str, vendor_name: str, vendor_email: str) -> VerificationSubmission:
        """Current submission, or a fresh draft when there is none or the last one was rejected"""
        async with self._transaction(vendor_id):
            existing = await self._current(vendor_id, for_update=True)
            if existing and existing.status != SubmissionStatus.REJECTED:
                return existing

            now = utcnow()
            submission = VerificationSubmission(
                vendor_id=vendor_id,
                vendor_name=vendor_name,
                vendor_email=vendor_email,
                status=SubmissionStatus.DRAFT,
                submitted_at=None,
                submission_count=0,
                business_documents=[],
                provider=self.provider.name,
                resubmit_requested=False,
                created_at=now,
                updated_at=now,
            )
            self.db.add(submission)
            await self.db.flush()

        logger.info(f"Created draft submission {submission.id} for vendor {vendor_id}")
        return submission

    async def get_submission(self, vendor_id: str) -> VerificationSubmission:
        return await self._get_or_404(vendor_id)

    async def get_submission_by_id(self, submission_id: int) -> VerificationSubmission:
        result = await self.db.execute(
            select(VerificationSubmission)
            .where(VerificationSubmission.id == submission_id)
            .execution_options(populate_existing=True)
        )
        submission = result.scalar_one_or_none()
        if not submission:
            raise NotFoundError("Verification submission", str(submission_id))
        return submission

    async def get_latest_submission(self, vendor_id: str) -> Optional[VerificationSubmission]:
        """Most recently submitted; never-submitted drafts sort last"""
        result = await self.db.execute(
            select(VerificationSubmission)
            .where(VerificationSubmission.vendor_id == vendor_id)
            .order_by(
                VerificationSubmission.submitted_at.desc().nulls_last(),
                VerificationSubmission.id.desc(),
            )
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    # --------------------------
    # 2️⃣ Evidence and identity fields
    # --------------------------

    async def upload_document(
            self,
            vendor_id: str,
            slot: DocumentSlot,
            file_url: str,
            file_name: str,
            document_type: Optional[DocumentType] = None,
            file_size: Optional[int] = None,
            mime_type: Optional[str] = None
    ) -> VerificationSubmission:
        """Replace the document held in a single slot"""
        slot = DocumentSlot(slot)
        if not file_url:
            raise ValidationError(["file_url"])

        async with self._transaction(vendor_id):
            submission = await self._get_or_404(vendor_id, for_update=True)
            self._require(submission, EDITABLE_STATUSES, "upload_document")

            document = new_document(
                document_type or SLOT_DEFAULT_TYPES[slot], file_url, file_name, file_size, mime_type
            )
            submission.set_document(slot, document)
            submission.updated_at = utcnow()

        logger.info(f"Vendor {vendor_id} uploaded {slot.value} ({document['id']})")
        return submission

    async def add_business_document(
            self,
            vendor_id: str,
            file_url: str,
            file_name: str,
            document_type: DocumentType = DocumentType.BUSINESS_REGISTRATION,
            file_size: Optional[int] = None,
            mime_type: Optional[str] = None
    ) -> Dict[str, Any]:
        if not file_url:
            raise ValidationError(["file_url"])

        async with self._transaction(vendor_id):
            submission = await self._get_or_404(vendor_id, for_update=True)
            self._require(submission, EDITABLE_STATUSES, "add_business_document")

            document = new_document(document_type, file_url, file_name, file_size, mime_type)
            submission.business_documents = [*(submission.business_documents or []), document]
            submission.updated_at = utcnow()

        return document

    async def remove_business_document(self, vendor_id: str, document_id: str) -> VerificationSubmission:
        async with self._transaction(vendor_id):
            submission = await self._get_or_404(vendor_id, for_update=True)
            self._require(submission, EDITABLE_STATUSES, "remove_business_document")

            documents = submission.business_documents or []
            remaining = [d for d in documents if d.get("id") != document_id]
            if len(remaining) == len(documents):
                raise NotFoundError("Business document", document_id)

            submission.business_documents = remaining
            submission.updated_at = utcnow()

        return submission

    async def update_submission_info(self, vendor_id: str, info: Dict[str, Any]) -> VerificationSubmission:
        """Merge id_number / id_type / id_issue_date / current_address; other fields stay as they are"""
        async with self._transaction(vendor_id):
            submission = await self._get_or_404(vendor_id, for_update=True)
            self._require(submission, EDITABLE_STATUSES, "update_submission_info")

            for key in INFO_FIELDS:
                if key in info and info[key] is not None:
                    setattr(submission, key, info[key])
            submission.updated_at = utcnow()

        return submission

    # --------------------------
    # 3️⃣ Vendor workflow
    # --------------------------

    async def submit_for_review(self, vendor_id: str) -> VerificationSubmission:
        """Validate, hand the bundle to the provider, then mark it submitted.

        Missing pieces raise ValidationError and a provider failure raises
        ProviderError; in both cases nothing is written. Callers retrying after
        a ProviderError should re-read the submission first.
        """
        async with self._transaction(vendor_id):
            submission = await self._get_or_404(vendor_id, for_update=True)
            self._require(submission, SUBMITTABLE_STATUSES, "submit_for_review")

            missing = validate_submission(submission)
            if missing:
                raise ValidationError(missing)

            result, provider_status = await self._call_provider(submission)

            previous_status = submission.status
            now = utcnow()
            submission.status = SubmissionStatus.SUBMITTED
            submission.submitted_at = now
            submission.submission_count = (submission.submission_count or 0) + 1
            submission.provider = self.provider.name
            submission.provider_ref = result.provider_ref
            submission.provider_status = provider_status.value
            submission.resubmit_requested = False
            submission.resubmit_reason = None
            submission.reviewed_at = None
            submission.reviewed_by = None
            submission.review_notes = None
            submission.rejection_reason = None
            submission.updated_at = now

            await self.audit.append(
                action=AuditAction.SUBMISSION_SUBMITTED,
                vendor_id=vendor_id,
                vendor_name=submission.vendor_name,
                verification_type=SUBMISSION_SCOPE,
                previous_status=previous_status,
                new_status=SubmissionStatus.SUBMITTED,
                details=f"Submitted for review via {self.provider.display_name} (#{submission.submission_count})",
                actor_type=ActorType.VENDOR,
                timestamp=now,
            )

        logger.info(f"Submission {submission.id} of vendor {vendor_id} submitted, ref {submission.provider_ref}")
        return submission

    async def _call_provider(self, submission: VerificationSubmission) -> Tuple[VerificationResult, SubmissionStatus]:
        provider_name = self.provider.name.value
        try:
            result = await self.provider.verify_identity(submission)
        except VerificationError:
            raise
        except Exception as e:
            logger.error(f"Provider {provider_name} failed for submission {submission.id}: {str(e)}")
            raise ProviderError(provider_name, f"Verification provider error: {str(e)}")

        if not result.success:
            logger.error(f"Provider {provider_name} refused submission {submission.id}: {result.error}")
            raise ProviderError(provider_name, result.error or "Verification provider rejected the submission")

        try:
            provider_status = SubmissionStatus(result.status)
        except ValueError:
            logger.error(f"Provider {provider_name} returned unknown status {result.status!r} for submission {submission.id}")
            raise ProviderError(provider_name, f"Unknown provider status: {result.status}")
        return result, provider_status

    async def save_draft(self, vendor_id: str) -> VerificationSubmission:
        """Pull the submission back to draft so the vendor can edit it"""
        async with self._transaction(vendor_id):
            submission = await self._get_or_404(vendor_id, for_update=True)
            self._require(submission, DRAFTABLE_STATUSES, "save_draft")

            previous_status = submission.status
            if previous_status != SubmissionStatus.DRAFT:
                now = utcnow()
                submission.status = SubmissionStatus.DRAFT
                submission.updated_at = now

                await self.audit.append(
                    action=AuditAction.SUBMISSION_RETURNED_TO_DRAFT,
                    vendor_id=vendor_id,
                    vendor_name=submission.vendor_name,
                    verification_type=SUBMISSION_SCOPE,
                    previous_status=previous_status,
                    new_status=SubmissionStatus.DRAFT,
                    details="Saved as draft by vendor",
                    actor_type=ActorType.VENDOR,
                    timestamp=now,
                )

        return submission

    # --------------------------
    # 4️⃣ Admin review
    # --------------------------

    async def start_review(self, vendor_id: str, admin_id: str, admin_email: Optional[str] = None) -> VerificationSubmission:
        """submitted -> under_review; a second call on an under_review submission does nothing"""
        async with self._transaction(vendor_id):
            submission = await self._get_or_404(vendor_id, for_update=True)
            if submission.status == SubmissionStatus.UNDER_REVIEW:
                return submission
            self._require(submission, (SubmissionStatus.SUBMITTED,), "start_review")

            now = utcnow()
            submission.status = SubmissionStatus.UNDER_REVIEW
            submission.updated_at = now

            await self.audit.append(
                action=AuditAction.SUBMISSION_REVIEW_STARTED,
                vendor_id=vendor_id,
                vendor_name=submission.vendor_name,
                verification_type=SUBMISSION_SCOPE,
                previous_status=SubmissionStatus.SUBMITTED,
                new_status=SubmissionStatus.UNDER_REVIEW,
                details=f"Review started by {admin_email or admin_id}",
                admin_id=admin_id,
                admin_email=admin_email,
                timestamp=now,
            )

        logger.info(f"Review of submission {submission.id} started by {admin_id}")
        return submission

    async def _finish_review(
            self,
            vendor_id: str,
            attempted: str,
            new_status: SubmissionStatus,
            action: AuditAction,
            admin_id: str,
            admin_email: str,
            details: str,
            **fields
    ) -> VerificationSubmission:
        async with self._transaction(vendor_id):
            submission = await self._get_or_404(vendor_id, for_update=True)
            self._require(submission, (SubmissionStatus.UNDER_REVIEW,), attempted)

            now = utcnow()
            submission.status = new_status
            submission.reviewed_at = now
            submission.reviewed_by = admin_id
            for key, value in fields.items():
                setattr(submission, key, value)
            submission.updated_at = now

            await self.audit.append(
                action=action,
                vendor_id=vendor_id,
                vendor_name=submission.vendor_name,
                verification_type=SUBMISSION_SCOPE,
                previous_status=SubmissionStatus.UNDER_REVIEW,
                new_status=new_status,
                details=details,
                admin_id=admin_id,
                admin_email=admin_email,
                timestamp=now,
            )

        logger.info(f"Submission {submission.id} of vendor {vendor_id}: under_review -> {new_status.value} by {admin_id}")
        return submission

    async def approve_submission(
            self, vendor_id: str, admin_id: str, admin_email: str, notes: Optional[str] = None
    ) -> VerificationSubmission:
        return await self._finish_review(
            vendor_id, "approve", SubmissionStatus.APPROVED, AuditAction.SUBMISSION_APPROVED,
            admin_id, admin_email, notes or "Submission approved",
            review_notes=notes,
        )

    async def reject_submission(
            self, vendor_id: str, admin_id: str, admin_email: str, reason: str
    ) -> VerificationSubmission:
        if not reason or not reason.strip():
            raise ValidationError(["reason"])
        return await self._finish_review(
            vendor_id, "reject", SubmissionStatus.REJECTED, AuditAction.SUBMISSION_REJECTED,
            admin_id, admin_email, reason,
            rejection_reason=reason,
        )

    async def request_resubmit(
            self, vendor_id: str, admin_id: str, admin_email: str, reason: str
    ) -> VerificationSubmission:
        if not reason or not reason.strip():
            raise ValidationError(["reason"])
        return await self._finish_review(
            vendor_id, "request_resubmit", SubmissionStatus.PENDING_RESUBMIT,
            AuditAction.SUBMISSION_RESUBMIT_REQUESTED,
            admin_id, admin_email, f"Resubmission requested: {reason}",
            resubmit_requested=True, resubmit_reason=reason,
        )

    async def check_provider_status(self, vendor_id: str) -> VerificationResult:
        submission = await self._get_or_404(vendor_id)
        if not submission.provider_ref:
            raise InvalidStateError(submission.status.value, "check_provider_status")

        try:
            return await self.provider.check_status(submission.provider_ref)
        except VerificationError:
            raise
        except Exception as e:
            logger.error(f"Status check failed for {submission.provider_ref}: {str(e)}")
            raise ProviderError(self.provider.name.value, f"Verification provider error: {str(e)}")

    # --------------------------
    # 5️⃣ Queries
    # --------------------------

    async def get_submissions_by_status(self, status: Optional[SubmissionStatus] = None) -> List[VerificationSubmission]:
        query = (
            select(VerificationSubmission)
            .order_by(VerificationSubmission.id.desc())
            .execution_options(populate_existing=True)
        )
        if status is not None:
            query = query.where(VerificationSubmission.status == SubmissionStatus(status))

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_all_submissions(self) -> List[VerificationSubmission]:
        return await self.get_submissions_by_status(None)

    async def get_pending_submissions(self) -> List[VerificationSubmission]:
        return await self.get_submissions_by_status(SubmissionStatus.SUBMITTED)

    async def get_under_review_submissions(self) -> List[VerificationSubmission]:
        return await self.get_submissions_by_status(SubmissionStatus.UNDER_REVIEW)

    async def get_stats(self) -> Dict[str, int]:
        result = await self.db.execute(
            select(VerificationSubmission.status, func.count(VerificationSubmission.id))
            .group_by(VerificationSubmission.status)
        )
        counts = {status: count for status, count in result.all()}

        return {
            "total": sum(counts.values()),
            "pending": counts.get(SubmissionStatus.SUBMITTED, 0),
            "under_review": counts.get(SubmissionStatus.UNDER_REVIEW, 0),
            "approved": counts.get(SubmissionStatus.APPROVED, 0),
            "rejected": counts.get(SubmissionStatus.REJECTED, 0),
            "pending_resubmit": counts.get(SubmissionStatus.PENDING_RESUBMIT, 0),
        }
