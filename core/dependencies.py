from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.locks import SellerLocks
from services.audit_service import AuditService
from services.review_workflow import ReviewWorkflow
from services.submission_service import SubmissionService
from services.verification_provider import VerificationProvider
from services.verification_service import VerificationService


def get_ledger_locks(request: Request) -> SellerLocks:
    return request.app.state.ledger_locks


def get_submission_locks(request: Request) -> SellerLocks:
    return request.app.state.submission_locks


def get_provider(request: Request) -> VerificationProvider:
    return request.app.state.verification_provider


async def get_verification_service(
    db: AsyncSession = Depends(get_db),
    locks: SellerLocks = Depends(get_ledger_locks)
) -> VerificationService:
    return VerificationService(db, locks)


async def get_submission_service(
    db: AsyncSession = Depends(get_db),
    locks: SellerLocks = Depends(get_submission_locks),
    provider: VerificationProvider = Depends(get_provider)
) -> SubmissionService:
    return SubmissionService(db, locks, provider)


async def get_audit_service(db: AsyncSession = Depends(get_db)) -> AuditService:
    return AuditService(db)


async def get_review_workflow(
    verification_service: VerificationService = Depends(get_verification_service),
    submission_service: SubmissionService = Depends(get_submission_service)
) -> ReviewWorkflow:
    return ReviewWorkflow(verification_service, submission_service)
