"""
Tests for the verification ledger

Verifies:
- Initialization is idempotent and starts every category at not_started
- Derived fields follow every approval (scenario 1)
- Rejection, batch approval (scenario 3) and suspension semantics
- Every mutation leaves exactly one audit entry
- Approved checks expire when a validity period is configured
"""

from datetime import timedelta

import pytest

from conftest import ADMIN_EMAIL, ADMIN_ID
from core.config import settings
from core.exceptions import InvalidStateError, NotFoundError, ValidationError
from models.audit_log import AuditAction, ActorType
from models.base import as_utc, utcnow
from models.vendor_verification import Category, ItemStatus, OverallStatus, TrustLevel

VENDOR = "vendor-1"


async def init(service, vendor_id=VENDOR):
    return await service.initialize_vendor_verification(vendor_id, "Acme Store", "acme@example.com", "Acme Ltd")


@pytest.mark.asyncio
async def test_initialize_creates_fresh_record(verification_service):
    record = await init(verification_service)

    assert record.verification_score == 0
    assert record.overall_status == OverallStatus.UNVERIFIED
    assert record.trust_level == TrustLevel.NEW
    assert record.badge_display == []
    assert all(status == ItemStatus.NOT_STARTED for status in record.statuses().values())
    assert len(record.items) == 6


@pytest.mark.asyncio
async def test_initialize_is_idempotent(verification_service, audit_service):
    first = await init(verification_service)
    await verification_service.submit_verification_evidence(VENDOR, Category.PHONE, "https://files/phone.png")

    second = await init(verification_service)

    assert second.id == first.id
    assert second.item(Category.PHONE).status == ItemStatus.PENDING
    logs = await audit_service.get_audit_logs(VENDOR)
    assert [log.action for log in logs].count(AuditAction.VERIFICATION_INITIALIZED.value) == 1


@pytest.mark.asyncio
async def test_unknown_vendor_raises_not_found(verification_service):
    with pytest.raises(NotFoundError):
        await verification_service.get_vendor_verification("nobody")

    with pytest.raises(NotFoundError):
        await verification_service.approve_verification("nobody", Category.PHONE, ADMIN_ID, ADMIN_EMAIL)


@pytest.mark.asyncio
async def test_submit_evidence_requires_reference(verification_service):
    await init(verification_service)

    with pytest.raises(ValidationError) as exc:
        await verification_service.submit_verification_evidence(VENDOR, Category.EMAIL, "")
    assert exc.value.missing_fields == ["evidence"]


@pytest.mark.asyncio
async def test_scenario_progressive_approval(verification_service):
    await init(verification_service)
    for category in (Category.PHONE, Category.EMAIL, Category.GOVERNMENT_ID):
        record = await verification_service.submit_verification_evidence(VENDOR, category, f"https://files/{category.value}")
        assert record.item(category).status == ItemStatus.PENDING

    expected = [
        (Category.PHONE, 15, OverallStatus.UNVERIFIED, TrustLevel.NEW),
        (Category.EMAIL, 30, OverallStatus.PARTIALLY_VERIFIED, TrustLevel.NEW),
        (Category.GOVERNMENT_ID, 55, OverallStatus.PARTIALLY_VERIFIED, TrustLevel.BASIC),
        (Category.FACIAL, 75, OverallStatus.PARTIALLY_VERIFIED, TrustLevel.TRUSTED),
        (Category.BUSINESS_DOCUMENTS, 90, OverallStatus.VERIFIED, TrustLevel.TRUSTED),
    ]
    for category, score, status, trust in expected:
        record = await verification_service.approve_verification(VENDOR, category, ADMIN_ID, ADMIN_EMAIL)
        assert record.verification_score == score
        assert record.overall_status == status
        assert record.trust_level == trust

    assert record.badge_display == [
        "phone_verified", "email_verified", "id_verified", "facial_verified", "business_verified", "trusted_vendor",
    ]
    assert record.last_reviewed_by == ADMIN_ID


@pytest.mark.asyncio
async def test_approve_then_reject_keeps_timestamps_exclusive(verification_service):
    await init(verification_service)
    record = await verification_service.approve_verification(VENDOR, Category.PHONE, ADMIN_ID, ADMIN_EMAIL, "call ok")
    item = record.item(Category.PHONE)
    assert item.verified_at is not None
    assert item.verified_by == ADMIN_ID
    assert item.rejected_at is None

    record = await verification_service.reject_verification(VENDOR, Category.PHONE, ADMIN_ID, ADMIN_EMAIL, "number disconnected")
    item = record.item(Category.PHONE)
    assert item.status == ItemStatus.REJECTED
    assert item.rejection_reason == "number disconnected"
    assert item.rejected_at is not None
    assert item.verified_at is None
    assert record.verification_score == 0


@pytest.mark.asyncio
async def test_reject_requires_reason(verification_service):
    await init(verification_service)

    with pytest.raises(ValidationError) as exc:
        await verification_service.reject_verification(VENDOR, Category.PHONE, ADMIN_ID, ADMIN_EMAIL, "   ")
    assert exc.value.missing_fields == ["reason"]


@pytest.mark.asyncio
async def test_resubmitting_evidence_clears_previous_review(verification_service):
    await init(verification_service)
    await verification_service.reject_verification(VENDOR, Category.ADDRESS, ADMIN_ID, ADMIN_EMAIL, "old bill")

    record = await verification_service.submit_verification_evidence(
        VENDOR, Category.ADDRESS, "https://files/bill-2.pdf", "bill-2.pdf"
    )
    item = record.item(Category.ADDRESS)
    assert item.status == ItemStatus.PENDING
    assert item.rejection_reason is None
    assert item.rejected_at is None
    assert item.evidence == "https://files/bill-2.pdf"


@pytest.mark.asyncio
async def test_scenario_batch_approval(verification_service, audit_service):
    await init(verification_service)
    await verification_service.approve_verification(VENDOR, Category.EMAIL, ADMIN_ID, ADMIN_EMAIL)
    await verification_service.submit_verification_evidence(VENDOR, Category.PHONE, "https://files/phone")
    await verification_service.submit_verification_evidence(VENDOR, Category.ADDRESS, "https://files/address")

    approved = await verification_service.approve_all_pending_verifications(VENDOR, ADMIN_ID, ADMIN_EMAIL)

    assert approved == [Category.PHONE, Category.ADDRESS]
    record = await verification_service.get_vendor_verification(VENDOR)
    assert record.item(Category.PHONE).status == ItemStatus.APPROVED
    assert record.item(Category.ADDRESS).status == ItemStatus.APPROVED
    assert record.item(Category.EMAIL).status == ItemStatus.APPROVED
    assert record.item(Category.GOVERNMENT_ID).status == ItemStatus.NOT_STARTED
    assert record.verification_score == 40

    batch_logs = [log for log in await audit_service.get_audit_logs(VENDOR) if log.details == "Batch approval"]
    assert len(batch_logs) == 2
    assert {log.verification_type for log in batch_logs} == {"phone", "address"}


@pytest.mark.asyncio
async def test_batch_approval_with_nothing_pending(verification_service):
    await init(verification_service)
    assert await verification_service.approve_all_pending_verifications(VENDOR, ADMIN_ID, ADMIN_EMAIL) == []


@pytest.mark.asyncio
async def test_suspension_is_sticky(verification_service):
    await init(verification_service)
    for category in (Category.PHONE, Category.EMAIL, Category.GOVERNMENT_ID, Category.FACIAL):
        await verification_service.approve_verification(VENDOR, category, ADMIN_ID, ADMIN_EMAIL)

    record = await verification_service.suspend_vendor_verification(VENDOR, ADMIN_ID, ADMIN_EMAIL, "fraud report")
    assert record.overall_status == OverallStatus.SUSPENDED
    assert record.suspension_reason == "fraud report"

    record = await verification_service.approve_verification(VENDOR, Category.BUSINESS_DOCUMENTS, ADMIN_ID, ADMIN_EMAIL)
    assert record.verification_score == 90
    assert record.overall_status == OverallStatus.SUSPENDED
    assert "trusted_vendor" in record.badge_display

    record = await verification_service.reinstate_vendor_verification(VENDOR, ADMIN_ID, ADMIN_EMAIL)
    assert record.overall_status == OverallStatus.VERIFIED
    assert record.is_suspended is False
    assert record.suspension_reason is None


@pytest.mark.asyncio
async def test_double_suspend_and_bad_reinstate(verification_service):
    await init(verification_service)

    with pytest.raises(InvalidStateError):
        await verification_service.reinstate_vendor_verification(VENDOR, ADMIN_ID, ADMIN_EMAIL)

    await verification_service.suspend_vendor_verification(VENDOR, ADMIN_ID, ADMIN_EMAIL, "chargebacks")
    with pytest.raises(InvalidStateError) as exc:
        await verification_service.suspend_vendor_verification(VENDOR, ADMIN_ID, ADMIN_EMAIL, "again")
    assert exc.value.current_status == "suspended"


@pytest.mark.asyncio
async def test_every_mutation_is_audited(verification_service, audit_service):
    await init(verification_service)
    await verification_service.submit_verification_evidence(VENDOR, Category.PHONE, "https://files/phone")
    await verification_service.approve_verification(VENDOR, Category.PHONE, ADMIN_ID, ADMIN_EMAIL)
    await verification_service.reject_verification(VENDOR, Category.EMAIL, ADMIN_ID, ADMIN_EMAIL, "bounced")
    await verification_service.suspend_vendor_verification(VENDOR, ADMIN_ID, ADMIN_EMAIL, "review")
    await verification_service.reinstate_vendor_verification(VENDOR, ADMIN_ID, ADMIN_EMAIL)

    logs = await audit_service.get_audit_logs(VENDOR)
    assert [log.action for log in logs] == [
        AuditAction.VENDOR_REINSTATED.value,
        AuditAction.VENDOR_SUSPENDED.value,
        AuditAction.VERIFICATION_REJECTED.value,
        AuditAction.VERIFICATION_APPROVED.value,
        AuditAction.VERIFICATION_EVIDENCE_SUBMITTED.value,
        AuditAction.VERIFICATION_INITIALIZED.value,
    ]

    suspended = logs[1]
    assert suspended.verification_type == "vendor"
    assert suspended.details == "Vendor suspended: review"
    assert suspended.admin_email == ADMIN_EMAIL

    approved = logs[3]
    assert approved.previous_status == "pending"
    assert approved.new_status == "approved"

    evidence = logs[4]
    assert evidence.actor_type == ActorType.VENDOR.value
    assert evidence.admin_id is None


@pytest.mark.asyncio
async def test_failed_operation_leaves_no_audit(verification_service, audit_service):
    await init(verification_service)
    before = len(await audit_service.get_audit_logs(VENDOR))

    with pytest.raises(InvalidStateError):
        await verification_service.reinstate_vendor_verification(VENDOR, ADMIN_ID, ADMIN_EMAIL)

    assert len(await audit_service.get_audit_logs(VENDOR)) == before


@pytest.mark.asyncio
async def test_queries(verification_service):
    await init(verification_service, "v-pending")
    await verification_service.submit_verification_evidence("v-pending", Category.PHONE, "https://files/p")

    await init(verification_service, "v-verified")
    for category in (Category.PHONE, Category.EMAIL, Category.GOVERNMENT_ID, Category.FACIAL, Category.BUSINESS_DOCUMENTS):
        await verification_service.approve_verification("v-verified", category, ADMIN_ID, ADMIN_EMAIL)

    await init(verification_service, "v-suspended")
    await verification_service.suspend_vendor_verification("v-suspended", ADMIN_ID, ADMIN_EMAIL, "spam")

    pending = {r.vendor_id for r in await verification_service.get_pending_verifications()}
    verified = {r.vendor_id for r in await verification_service.get_verified_vendors()}
    needs_review = {r.vendor_id for r in await verification_service.get_vendors_needing_review()}

    assert pending == {"v-pending"}
    assert verified == {"v-verified"}
    assert needs_review == {"v-pending"}
    assert len(await verification_service.get_all_verifications()) == 3


@pytest.mark.asyncio
async def test_publish_gate(verification_service):
    await init(verification_service)

    eligibility = await verification_service.get_publish_eligibility(VENDOR)
    assert eligibility["can_publish"] is False
    assert await verification_service.resolve_product_status(VENDOR, "active") == "draft"
    assert await verification_service.resolve_product_status(VENDOR, "draft") == "draft"
    assert await verification_service.resolve_product_status("unknown", "active") == "draft"

    for category in (Category.PHONE, Category.EMAIL, Category.GOVERNMENT_ID, Category.FACIAL, Category.BUSINESS_DOCUMENTS):
        await verification_service.approve_verification(VENDOR, category, ADMIN_ID, ADMIN_EMAIL)

    assert (await verification_service.get_publish_eligibility(VENDOR))["can_publish"] is True
    assert await verification_service.resolve_product_status(VENDOR, "active") == "active"


@pytest.mark.asyncio
async def test_expiry_sweep(verification_service, audit_service, monkeypatch):
    monkeypatch.setattr(settings, "VERIFICATION_VALIDITY_DAYS", 30)
    await init(verification_service)
    record = await verification_service.approve_verification(VENDOR, Category.PHONE, ADMIN_ID, ADMIN_EMAIL)
    await verification_service.approve_verification(VENDOR, Category.EMAIL, ADMIN_ID, ADMIN_EMAIL)

    item = record.item(Category.PHONE)
    assert as_utc(item.expires_at) - as_utc(item.verified_at) == timedelta(days=30)

    assert await verification_service.expire_verifications(now=utcnow() + timedelta(days=1)) == {}

    expired = await verification_service.expire_verifications(now=utcnow() + timedelta(days=31))
    assert expired == {VENDOR: [Category.PHONE, Category.EMAIL]}

    record = await verification_service.get_vendor_verification(VENDOR)
    assert record.item(Category.PHONE).status == ItemStatus.EXPIRED
    assert record.verification_score == 0
    assert record.overall_status == OverallStatus.UNVERIFIED

    logs = await audit_service.get_audit_logs(VENDOR)
    assert logs[0].action == AuditAction.VERIFICATION_EXPIRED.value
    assert logs[0].actor_type == ActorType.SYSTEM.value
