"""
Tests for the audit trail

Verifies:
- Entries come back most recent first, optionally per vendor
- Paginated queries report totals
- Retention keeps only the newest entries when a cap is set
- Entries cannot be edited
"""

import pytest

from models.audit_log import AuditAction, ActorType, VerificationAuditLog
from services.audit_service import AuditService


async def add_entries(service, count, vendor_id="vendor-1"):
    for i in range(count):
        await service.append(
            action=AuditAction.VERIFICATION_APPROVED,
            vendor_id=vendor_id,
            vendor_name="Acme",
            verification_type="phone",
            previous_status="pending",
            new_status="approved",
            details=f"entry {i}",
            admin_id="admin-1",
            admin_email="admin@example.com",
        )
    await service.db.commit()


@pytest.mark.asyncio
async def test_most_recent_first(audit_service):
    await add_entries(audit_service, 3)

    logs = await audit_service.get_audit_logs()
    assert [log.details for log in logs] == ["entry 2", "entry 1", "entry 0"]
    assert logs[0].action == "VERIFICATION_APPROVED"
    assert logs[0].actor_type == ActorType.ADMIN.value
    assert logs[0].uuid


@pytest.mark.asyncio
async def test_vendor_filter(audit_service):
    await add_entries(audit_service, 2, "vendor-a")
    await add_entries(audit_service, 1, "vendor-b")

    assert len(await audit_service.get_audit_logs("vendor-a")) == 2
    assert len(await audit_service.get_audit_logs("vendor-b")) == 1
    assert await audit_service.get_audit_logs("vendor-c") == []


@pytest.mark.asyncio
async def test_paginated_query(audit_service):
    await add_entries(audit_service, 5)

    page = await audit_service.query(vendor_id="vendor-1", page=2, limit=2)
    assert page["total"] == 5
    assert page["total_pages"] == 3
    assert [log.details for log in page["items"]] == ["entry 2", "entry 1"]

    empty = await audit_service.query(action="VENDOR_SUSPENDED")
    assert empty["total"] == 0
    assert empty["items"] == []


@pytest.mark.asyncio
async def test_retention_cap(db):
    service = AuditService(db, max_entries=3)
    await add_entries(service, 5)

    logs = await service.get_audit_logs()
    assert [log.details for log in logs] == ["entry 4", "entry 3", "entry 2"]


@pytest.mark.asyncio
async def test_zero_cap_keeps_everything(db):
    service = AuditService(db, max_entries=0)
    await add_entries(service, 5)

    assert len(await service.get_audit_logs()) == 5


@pytest.mark.asyncio
async def test_entries_are_immutable(audit_service, db):
    await add_entries(audit_service, 1)
    entry = (await audit_service.get_audit_logs())[0]
    entry_id = entry.id

    entry.details = "rewritten"
    with pytest.raises(RuntimeError):
        await db.flush()
    await db.rollback()

    fresh = await db.get(VerificationAuditLog, entry_id, populate_existing=True)
    assert fresh.details == "entry 0"
