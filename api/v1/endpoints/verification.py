# app/api/v1/endpoints/verification.py
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from core.dependencies import get_verification_service
from core.permissions import Actor, get_current_user, require_roles
from models.vendor_verification import Category
from schemas.verification import (
    VerificationInitialize, EvidenceSubmit, ApproveRequest, ReasonRequest,
    VendorVerificationRead, VendorVerificationSummary, BatchApprovalResult,
    PublishEligibility, ExpirySweepResult, BadgeRead
)
from services.verification_service import VerificationService

router = APIRouter()


# --------------------------
# 1️⃣ Vendor: own record
# --------------------------

@router.post("/me", response_model=VendorVerificationRead)
async def initialize_my_verification(
        data: VerificationInitialize,
        current_user: Actor = Depends(require_roles("VENDOR", "ADMIN")),
        service: VerificationService = Depends(get_verification_service)
):
    """Create the verification record of the calling vendor (returns it if it exists)"""
    record = await service.initialize_vendor_verification(
        current_user.id, data.vendor_name, data.vendor_email, data.business_name
    )
    return VendorVerificationRead.from_record(record)


@router.get("/me", response_model=VendorVerificationRead)
async def get_my_verification(
        current_user: Actor = Depends(require_roles("VENDOR", "ADMIN")),
        service: VerificationService = Depends(get_verification_service)
):
    record = await service.get_vendor_verification(current_user.id)
    return VendorVerificationRead.from_record(record)


@router.post("/me/evidence", response_model=VendorVerificationRead)
async def submit_my_evidence(
        data: EvidenceSubmit,
        current_user: Actor = Depends(require_roles("VENDOR", "ADMIN")),
        service: VerificationService = Depends(get_verification_service)
):
    """Attach evidence to one category; the category goes to pending"""
    record = await service.submit_verification_evidence(
        current_user.id, data.category, data.evidence, data.evidence_name
    )
    return VendorVerificationRead.from_record(record)


# --------------------------
# 2️⃣ Admin: listing and sweeps
# --------------------------

@router.get("/", response_model=List[VendorVerificationSummary])
async def list_verifications(
        list_filter: Optional[str] = Query(None, alias="filter", pattern="^(pending|verified|needs_review)$"),
        current_user: Actor = Depends(require_roles("ADMIN")),
        service: VerificationService = Depends(get_verification_service)
):
    if list_filter == "pending":
        return await service.get_pending_verifications()
    if list_filter == "verified":
        return await service.get_verified_vendors()
    if list_filter == "needs_review":
        return await service.get_vendors_needing_review()
    return await service.get_all_verifications()


@router.post("/expire", response_model=ExpirySweepResult)
async def expire_verifications(
        current_user: Actor = Depends(require_roles("ADMIN")),
        service: VerificationService = Depends(get_verification_service)
):
    """Expire approved checks whose validity has run out"""
    expired = await service.expire_verifications()
    return {
        "expired": expired,
        "total": sum(len(categories) for categories in expired.values()),
    }


@router.get("/badges/{badge}", response_model=BadgeRead)
async def get_badge_info(
        badge: str,
        current_user: Actor = Depends(get_current_user)
):
    return BadgeRead.for_badge(badge)


# --------------------------
# 3️⃣ Admin: one vendor
# --------------------------

@router.get("/{vendor_id}", response_model=VendorVerificationRead)
async def get_vendor_verification(
        vendor_id: str,
        current_user: Actor = Depends(require_roles("ADMIN")),
        service: VerificationService = Depends(get_verification_service)
):
    record = await service.get_vendor_verification(vendor_id)
    return VendorVerificationRead.from_record(record)


@router.get("/{vendor_id}/publish-eligibility", response_model=PublishEligibility)
async def get_publish_eligibility(
        vendor_id: str,
        requested_status: Optional[str] = Query(None),
        current_user: Actor = Depends(get_current_user),
        service: VerificationService = Depends(get_verification_service)
):
    """Whether the vendor may publish products; optionally resolves a requested product status"""
    eligibility = await service.get_publish_eligibility(vendor_id)
    if requested_status:
        eligibility["product_status"] = await service.resolve_product_status(vendor_id, requested_status)
    return eligibility


@router.post("/{vendor_id}/approve-all", response_model=BatchApprovalResult)
async def approve_all_pending(
        vendor_id: str,
        current_user: Actor = Depends(require_roles("ADMIN")),
        service: VerificationService = Depends(get_verification_service)
):
    approved = await service.approve_all_pending_verifications(vendor_id, current_user.id, current_user.email)
    record = await service.get_vendor_verification(vendor_id)
    return {
        "approved_categories": approved,
        "verification": VendorVerificationRead.from_record(record),
    }


@router.post("/{vendor_id}/suspend", response_model=VendorVerificationRead)
async def suspend_vendor(
        vendor_id: str,
        data: ReasonRequest,
        current_user: Actor = Depends(require_roles("ADMIN")),
        service: VerificationService = Depends(get_verification_service)
):
    record = await service.suspend_vendor_verification(vendor_id, current_user.id, current_user.email, data.reason)
    return VendorVerificationRead.from_record(record)


@router.post("/{vendor_id}/reinstate", response_model=VendorVerificationRead)
async def reinstate_vendor(
        vendor_id: str,
        current_user: Actor = Depends(require_roles("ADMIN")),
        service: VerificationService = Depends(get_verification_service)
):
    record = await service.reinstate_vendor_verification(vendor_id, current_user.id, current_user.email)
    return VendorVerificationRead.from_record(record)


@router.post("/{vendor_id}/{category}/approve", response_model=VendorVerificationRead)
async def approve_category(
        vendor_id: str,
        category: Category,
        data: Optional[ApproveRequest] = None,
        current_user: Actor = Depends(require_roles("ADMIN")),
        service: VerificationService = Depends(get_verification_service)
):
    record = await service.approve_verification(
        vendor_id, category, current_user.id, current_user.email, data.notes if data else None
    )
    return VendorVerificationRead.from_record(record)


@router.post("/{vendor_id}/{category}/reject", response_model=VendorVerificationRead)
async def reject_category(
        vendor_id: str,
        category: Category,
        data: ReasonRequest,
        current_user: Actor = Depends(require_roles("ADMIN")),
        service: VerificationService = Depends(get_verification_service)
):
    record = await service.reject_verification(
        vendor_id, category, current_user.id, current_user.email, data.reason
    )
    return VendorVerificationRead.from_record(record)
