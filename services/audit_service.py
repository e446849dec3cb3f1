# app/services/audit_service.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from typing import Optional, List, Dict, Any
import math
import logging

from core.config import settings
from models.audit_log import VerificationAuditLog, ActorType
from models.base import utcnow

logger = logging.getLogger(__name__)


class AuditService:
    """Append-only verification audit trail.

    ``append`` never commits: the entry is written in the same transaction as
    the state change it describes, and disappears with it on rollback.
    """

    def __init__(self, db: AsyncSession, max_entries: Optional[int] = None):
        self.db = db
        self.max_entries = settings.AUDIT_LOG_MAX_ENTRIES if max_entries is None else max_entries

    async def append(
            self,
            action: str,
            vendor_id: str,
            vendor_name: str,
            verification_type: str,
            new_status: str,
            previous_status: Optional[str] = None,
            details: str = "",
            admin_id: Optional[str] = None,
            admin_email: Optional[str] = None,
            actor_type: ActorType = ActorType.ADMIN,
            timestamp=None,
    ) -> VerificationAuditLog:
        entry = VerificationAuditLog(
            action=str(getattr(action, "value", action)),
            vendor_id=vendor_id,
            vendor_name=vendor_name,
            verification_type=str(getattr(verification_type, "value", verification_type)),
            actor_type=ActorType(actor_type).value,
            admin_id=admin_id,
            admin_email=admin_email,
            previous_status=None if previous_status is None else str(getattr(previous_status, "value", previous_status)),
            new_status=str(getattr(new_status, "value", new_status)),
            details=details or "",
            timestamp=timestamp or utcnow(),
        )
        self.db.add(entry)
        await self.db.flush()

        if self.max_entries:
            await self._prune()

        return entry

    async def _prune(self):
        """Drop everything older than the newest ``max_entries`` rows"""
        cutoff = await self.db.scalar(
            select(VerificationAuditLog.id)
            .order_by(VerificationAuditLog.id.desc())
            .offset(self.max_entries)
            .limit(1)
        )
        if cutoff is None:
            return

        result = await self.db.execute(
            delete(VerificationAuditLog)
            .where(VerificationAuditLog.id <= cutoff)
            .execution_options(synchronize_session=False)
        )
        logger.info(f"Pruned {result.rowcount} audit entries (cap {self.max_entries})")

    async def get_audit_logs(self, vendor_id: Optional[str] = None) -> List[VerificationAuditLog]:
        """All entries (or one vendor's), most recent first"""
        query = select(VerificationAuditLog).order_by(VerificationAuditLog.id.desc())
        if vendor_id:
            query = query.where(VerificationAuditLog.vendor_id == vendor_id)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def query(
            self,
            vendor_id: Optional[str] = None,
            action: Optional[str] = None,
            page: int = 1,
            limit: int = 50
    ) -> Dict[str, Any]:
        query = select(VerificationAuditLog)
        if vendor_id:
            query = query.where(VerificationAuditLog.vendor_id == vendor_id)
        if action:
            query = query.where(VerificationAuditLog.action == action)

        total = await self.db.scalar(select(func.count()).select_from(query.subquery()))

        offset = (page - 1) * limit
        result = await self.db.execute(
            query.order_by(VerificationAuditLog.id.desc()).offset(offset).limit(limit)
        )

        return {
            "items": list(result.scalars().all()),
            "total": total or 0,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit) if total and total > 0 else 0
        }
