# app/services/verification_service.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime, timedelta
from typing import List, Optional, Dict, Any
import logging

from core.config import settings
from core.exceptions import InvalidStateError, NotFoundError, ValidationError
from core.locks import SellerLocks, locked_transaction
from models.audit_log import AuditAction, ActorType, VENDOR_SCOPE
from models.base import as_utc, utcnow
from models.vendor_verification import (
    Category, ItemStatus, OverallStatus, VendorVerification, VerificationItem
)
from services.audit_service import AuditService
from services.scoring import derive_all

logger = logging.getLogger(__name__)


class VerificationService:
    """Per-vendor verification ledger: six category checks plus derived trust fields"""

    def __init__(self, db: AsyncSession, locks: SellerLocks, audit: Optional[AuditService] = None):
        self.db = db
        self.locks = locks
        self.audit = audit or AuditService(db)

    def _transaction(self, vendor_id: str):
        return locked_transaction(self.db, self.locks, vendor_id)

    async def _load(self, vendor_id: str, for_update: bool = False) -> Optional[VendorVerification]:
        query = (
            select(VendorVerification)
            .where(VendorVerification.vendor_id == vendor_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_or_404(self, vendor_id: str, for_update: bool = False) -> VendorVerification:
        record = await self._load(vendor_id, for_update=for_update)
        if not record:
            raise NotFoundError("Vendor verification", vendor_id)
        return record

    def _recompute(self, record: VendorVerification, now: datetime):
        derived = derive_all(record.statuses(), suspended=record.is_suspended)
        record.verification_score = derived.verification_score
        record.overall_status = derived.overall_status
        record.trust_level = derived.trust_level
        record.badge_display = derived.badge_display
        record.updated_at = now

    # --------------------------
    # 1️⃣ Records
    # --------------------------

    async def initialize_vendor_verification(
            self,
            vendor_id: str,
            vendor_name: str,
            vendor_email: str,
            business_name: Optional[str] = None
    ) -> VendorVerification:
        """Return the vendor's record, creating it with six not_started checks if missing"""
        async with self._transaction(vendor_id):
            record = await self._load(vendor_id, for_update=True)
            if record:
                return record

            now = utcnow()
            record = VendorVerification(
                vendor_id=vendor_id,
                vendor_name=vendor_name,
                vendor_email=vendor_email,
                business_name=business_name,
                is_suspended=False,
                created_at=now,
            )
            for category in Category:
                record.items[category] = VerificationItem(
                    category=category,
                    status=ItemStatus.NOT_STARTED,
                    last_updated=now,
                )
            self._recompute(record, now)
            self.db.add(record)

            await self.audit.append(
                action=AuditAction.VERIFICATION_INITIALIZED,
                vendor_id=vendor_id,
                vendor_name=vendor_name,
                verification_type=VENDOR_SCOPE,
                new_status=record.overall_status,
                details="Verification record created",
                actor_type=ActorType.VENDOR,
                timestamp=now,
            )
            logger.info(f"Initialized verification record for vendor {vendor_id}")

        return record

    async def get_vendor_verification(self, vendor_id: str) -> VendorVerification:
        return await self._get_or_404(vendor_id)

    async def find_vendor_verification(self, vendor_id: str) -> Optional[VendorVerification]:
        return await self._load(vendor_id)

    # --------------------------
    # 2️⃣ Vendor evidence
    # --------------------------

    async def submit_verification_evidence(
            self,
            vendor_id: str,
            category: Category,
            evidence_url: str,
            evidence_name: Optional[str] = None
    ) -> VendorVerification:
        """Attach evidence to a category and move it to pending"""
        category = Category(category)
        if not evidence_url:
            raise ValidationError(["evidence"])

        async with self._transaction(vendor_id):
            record = await self._get_or_404(vendor_id, for_update=True)
            item = record.item(category)
            previous_status = item.status
            now = utcnow()

            item.status = ItemStatus.PENDING
            item.evidence = evidence_url
            item.evidence_name = evidence_name
            item.verified_at = None
            item.verified_by = None
            item.rejected_at = None
            item.rejected_by = None
            item.rejection_reason = None
            item.expires_at = None
            item.last_updated = now
            self._recompute(record, now)

            await self.audit.append(
                action=AuditAction.VERIFICATION_EVIDENCE_SUBMITTED,
                vendor_id=vendor_id,
                vendor_name=record.vendor_name,
                verification_type=category,
                previous_status=previous_status,
                new_status=ItemStatus.PENDING,
                details=f"Evidence submitted: {evidence_name or evidence_url}",
                actor_type=ActorType.VENDOR,
                timestamp=now,
            )

        logger.info(f"Vendor {vendor_id} submitted {category.value} evidence ({previous_status.value} -> pending)")
        return record

    # --------------------------
    # 3️⃣ Admin review per category
    # --------------------------

    async def _approve_item(
            self,
            record: VendorVerification,
            category: Category,
            admin_id: str,
            admin_email: str,
            notes: Optional[str]
    ):
        item = record.item(category)
        previous_status = item.status
        now = utcnow()

        item.status = ItemStatus.APPROVED
        item.verified_at = now
        item.verified_by = admin_id
        item.rejected_at = None
        item.rejected_by = None
        item.rejection_reason = None
        item.notes = notes
        item.expires_at = (
            now + timedelta(days=settings.VERIFICATION_VALIDITY_DAYS)
            if settings.VERIFICATION_VALIDITY_DAYS else None
        )
        item.last_updated = now

        self._recompute(record, now)
        record.last_reviewed_at = now
        record.last_reviewed_by = admin_id

        await self.audit.append(
            action=AuditAction.VERIFICATION_APPROVED,
            vendor_id=record.vendor_id,
            vendor_name=record.vendor_name,
            verification_type=category,
            previous_status=previous_status,
            new_status=ItemStatus.APPROVED,
            details=notes or f"{category.value} approved",
            admin_id=admin_id,
            admin_email=admin_email,
            timestamp=now,
        )
        logger.info(
            f"Vendor {record.vendor_id}: {category.value} {previous_status.value} -> approved by {admin_id} "
            f"(score {record.verification_score}, {record.overall_status.value})"
        )

    async def approve_verification(
            self,
            vendor_id: str,
            category: Category,
            admin_id: str,
            admin_email: str,
            notes: Optional[str] = None
    ) -> VendorVerification:
        category = Category(category)
        async with self._transaction(vendor_id):
            record = await self._get_or_404(vendor_id, for_update=True)
            await self._approve_item(record, category, admin_id, admin_email, notes)
        return record

    async def reject_verification(
            self,
            vendor_id: str,
            category: Category,
            admin_id: str,
            admin_email: str,
            reason: str
    ) -> VendorVerification:
        category = Category(category)
        if not reason or not reason.strip():
            raise ValidationError(["reason"])

        async with self._transaction(vendor_id):
            record = await self._get_or_404(vendor_id, for_update=True)
            item = record.item(category)
            previous_status = item.status
            now = utcnow()

            item.status = ItemStatus.REJECTED
            item.rejected_at = now
            item.rejected_by = admin_id
            item.rejection_reason = reason
            item.verified_at = None
            item.verified_by = None
            item.expires_at = None
            item.last_updated = now

            self._recompute(record, now)
            record.last_reviewed_at = now
            record.last_reviewed_by = admin_id

            await self.audit.append(
                action=AuditAction.VERIFICATION_REJECTED,
                vendor_id=vendor_id,
                vendor_name=record.vendor_name,
                verification_type=category,
                previous_status=previous_status,
                new_status=ItemStatus.REJECTED,
                details=reason,
                admin_id=admin_id,
                admin_email=admin_email,
                timestamp=now,
            )

        logger.info(f"Vendor {vendor_id}: {category.value} {previous_status.value} -> rejected by {admin_id}")
        return record

    async def approve_all_pending_verifications(
            self,
            vendor_id: str,
            admin_id: str,
            admin_email: str
    ) -> List[Category]:
        """Approve every category that is pending right now, one transaction each.

        Only categories seen as pending in the initial snapshot are touched, and
        each one is checked again under the lock, so a rejection that lands in
        between is never overwritten.
        """
        async with self.locks.hold(vendor_id):
            record = await self._get_or_404(vendor_id)
            pending = [c for c in Category if record.item(c).status == ItemStatus.PENDING]

        approved = []
        for category in pending:
            async with self._transaction(vendor_id):
                record = await self._get_or_404(vendor_id, for_update=True)
                current = record.item(category).status
                if current == ItemStatus.PENDING:
                    await self._approve_item(record, category, admin_id, admin_email, "Batch approval")
                    approved.append(category)
                else:
                    logger.warning(
                        f"Batch approval skipped {category.value} for vendor {vendor_id}: now {current.value}"
                    )

        return approved

    # --------------------------
    # 4️⃣ Suspension
    # --------------------------

    async def suspend_vendor_verification(
            self,
            vendor_id: str,
            admin_id: str,
            admin_email: str,
            reason: str
    ) -> VendorVerification:
        if not reason or not reason.strip():
            raise ValidationError(["reason"])

        async with self._transaction(vendor_id):
            record = await self._get_or_404(vendor_id, for_update=True)
            if record.is_suspended:
                raise InvalidStateError(OverallStatus.SUSPENDED.value, "suspend")

            previous_status = record.overall_status
            now = utcnow()
            record.is_suspended = True
            record.suspension_reason = reason
            record.suspended_at = now
            self._recompute(record, now)
            record.last_reviewed_at = now
            record.last_reviewed_by = admin_id

            await self.audit.append(
                action=AuditAction.VENDOR_SUSPENDED,
                vendor_id=vendor_id,
                vendor_name=record.vendor_name,
                verification_type=VENDOR_SCOPE,
                previous_status=previous_status,
                new_status=OverallStatus.SUSPENDED,
                details=f"Vendor suspended: {reason}",
                admin_id=admin_id,
                admin_email=admin_email,
                timestamp=now,
            )

        logger.info(f"Vendor {vendor_id} suspended by {admin_id}")
        return record

    async def reinstate_vendor_verification(
            self,
            vendor_id: str,
            admin_id: str,
            admin_email: str
    ) -> VendorVerification:
        """Lift the suspension and derive the status from the current score"""
        async with self._transaction(vendor_id):
            record = await self._get_or_404(vendor_id, for_update=True)
            if not record.is_suspended:
                raise InvalidStateError(record.overall_status.value, "reinstate")

            now = utcnow()
            record.is_suspended = False
            record.suspension_reason = None
            record.suspended_at = None
            self._recompute(record, now)
            record.last_reviewed_at = now
            record.last_reviewed_by = admin_id

            await self.audit.append(
                action=AuditAction.VENDOR_REINSTATED,
                vendor_id=vendor_id,
                vendor_name=record.vendor_name,
                verification_type=VENDOR_SCOPE,
                previous_status=OverallStatus.SUSPENDED,
                new_status=record.overall_status,
                details="Vendor verification reinstated",
                admin_id=admin_id,
                admin_email=admin_email,
                timestamp=now,
            )

        logger.info(f"Vendor {vendor_id} reinstated by {admin_id} as {record.overall_status.value}")
        return record

    # --------------------------
    # 5️⃣ Expiry sweep
    # --------------------------

    async def expire_verifications(self, now: Optional[datetime] = None) -> Dict[str, List[Category]]:
        """Move approved checks past their expiry date to expired"""
        now = as_utc(now or utcnow())

        result = await self.db.execute(
            select(VendorVerification.vendor_id).where(
                VendorVerification.items.any(
                    (VerificationItem.status == ItemStatus.APPROVED)
                    & (VerificationItem.expires_at.isnot(None))
                    & (VerificationItem.expires_at <= now)
                )
            )
        )
        vendor_ids = list(result.scalars().all())

        expired: Dict[str, List[Category]] = {}
        for vendor_id in vendor_ids:
            async with self._transaction(vendor_id):
                record = await self._get_or_404(vendor_id, for_update=True)
                for category in Category:
                    item = record.item(category)
                    if item.status != ItemStatus.APPROVED or item.expires_at is None:
                        continue
                    if as_utc(item.expires_at) > now:
                        continue

                    item.status = ItemStatus.EXPIRED
                    item.last_updated = now
                    self._recompute(record, now)
                    expired.setdefault(vendor_id, []).append(category)

                    await self.audit.append(
                        action=AuditAction.VERIFICATION_EXPIRED,
                        vendor_id=vendor_id,
                        vendor_name=record.vendor_name,
                        verification_type=category,
                        previous_status=ItemStatus.APPROVED,
                        new_status=ItemStatus.EXPIRED,
                        details=f"{category.value} verification expired",
                        actor_type=ActorType.SYSTEM,
                        timestamp=now,
                    )

            if vendor_id in expired:
                logger.info(f"Expired {[c.value for c in expired[vendor_id]]} for vendor {vendor_id}")

        return expired

    # --------------------------
    # 6️⃣ Queries
    # --------------------------

    async def _list(self, *conditions) -> List[VendorVerification]:
        query = (
            select(VendorVerification)
            .order_by(VendorVerification.updated_at.desc(), VendorVerification.id.desc())
            .execution_options(populate_existing=True)
        )
        if conditions:
            query = query.where(*conditions)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_all_verifications(self) -> List[VendorVerification]:
        return await self._list()

    async def get_pending_verifications(self) -> List[VendorVerification]:
        """Vendors with at least one category waiting for review"""
        return await self._list(
            VendorVerification.items.any(VerificationItem.status == ItemStatus.PENDING)
        )

    async def get_verified_vendors(self) -> List[VendorVerification]:
        return await self._list(VendorVerification.overall_status == OverallStatus.VERIFIED)

    async def get_vendors_needing_review(self) -> List[VendorVerification]:
        return await self._list(
            VendorVerification.overall_status.notin_([OverallStatus.VERIFIED, OverallStatus.SUSPENDED])
        )

    # --------------------------
    # 7️⃣ Publish gate
    # --------------------------

    async def get_publish_eligibility(self, vendor_id: str) -> Dict[str, Any]:
        """Only verified vendors may publish; everyone else is limited to drafts"""
        record = await self._load(vendor_id)
        overall_status = record.overall_status if record else OverallStatus.UNVERIFIED
        can_publish = overall_status == OverallStatus.VERIFIED

        return {
            "vendor_id": vendor_id,
            "overall_status": overall_status,
            "can_publish": can_publish,
            "reason": None if can_publish else (
                "Vendor verification required to publish products"
                if overall_status != OverallStatus.SUSPENDED else "Vendor is suspended"
            ),
        }

    async def resolve_product_status(self, vendor_id: str, requested_status: str) -> str:
        if requested_status != "active":
            return requested_status

        eligibility = await self.get_publish_eligibility(vendor_id)
        if not eligibility["can_publish"]:
            logger.info(f"Vendor {vendor_id} is {eligibility['overall_status'].value}; product saved as draft")
            return "draft"
        return requested_status
