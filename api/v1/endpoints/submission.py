# app/api/v1/endpoints/submission.py
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from core.dependencies import get_submission_service, get_review_workflow
from core.permissions import Actor, require_roles
from models.verification_submission import DocumentSlot, SubmissionStatus
from schemas.submission import (
    SubmissionCreate, DocumentUpload, BusinessDocumentUpload, SubmissionInfoUpdate,
    ReviewNotes, ReviewReason, DocumentRead, SubmissionRead, SubmissionStats,
    ProviderStatusRead, InconsistencyRead
)
from services.review_workflow import ReviewWorkflow
from services.submission_service import SubmissionService

router = APIRouter()

vendor_access = require_roles("VENDOR", "ADMIN")
admin_access = require_roles("ADMIN")


# --------------------------
# 1️⃣ Vendor: own submission
# --------------------------

@router.post("/me", response_model=SubmissionRead)
async def create_my_submission(
        data: SubmissionCreate,
        current_user: Actor = Depends(vendor_access),
        service: SubmissionService = Depends(get_submission_service)
):
    """Current submission, or a new draft if there is none or the last one was rejected"""
    return await service.create_submission(current_user.id, data.vendor_name, data.vendor_email)


@router.get("/me", response_model=SubmissionRead)
async def get_my_submission(
        current_user: Actor = Depends(vendor_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.get_submission(current_user.id)


@router.put("/me/documents/{slot}", response_model=SubmissionRead)
async def upload_my_document(
        slot: DocumentSlot,
        data: DocumentUpload,
        current_user: Actor = Depends(vendor_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.upload_document(
        current_user.id, slot, data.file_url, data.file_name,
        document_type=data.document_type, file_size=data.file_size, mime_type=data.mime_type
    )


@router.post("/me/business-documents", response_model=DocumentRead)
async def add_my_business_document(
        data: BusinessDocumentUpload,
        current_user: Actor = Depends(vendor_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.add_business_document(
        current_user.id, data.file_url, data.file_name,
        document_type=data.document_type, file_size=data.file_size, mime_type=data.mime_type
    )


@router.delete("/me/business-documents/{document_id}", response_model=SubmissionRead)
async def remove_my_business_document(
        document_id: str,
        current_user: Actor = Depends(vendor_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.remove_business_document(current_user.id, document_id)


@router.patch("/me", response_model=SubmissionRead)
async def update_my_submission_info(
        data: SubmissionInfoUpdate,
        current_user: Actor = Depends(vendor_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.update_submission_info(current_user.id, data.model_dump(exclude_unset=True))


@router.post("/me/submit", response_model=SubmissionRead)
async def submit_my_submission(
        current_user: Actor = Depends(vendor_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.submit_for_review(current_user.id)


@router.post("/me/draft", response_model=SubmissionRead)
async def save_my_draft(
        current_user: Actor = Depends(vendor_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.save_draft(current_user.id)


# --------------------------
# 2️⃣ Admin: queues
# --------------------------

@router.get("/", response_model=List[SubmissionRead])
async def list_submissions(
        status: Optional[SubmissionStatus] = Query(None),
        current_user: Actor = Depends(admin_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.get_submissions_by_status(status)


@router.get("/stats", response_model=SubmissionStats)
async def get_submission_stats(
        current_user: Actor = Depends(admin_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.get_stats()


@router.get("/reconciliation", response_model=List[InconsistencyRead])
async def get_reconciliation_report(
        current_user: Actor = Depends(admin_access),
        workflow: ReviewWorkflow = Depends(get_review_workflow)
):
    """Vendors approved at submission level whose ledger still has pending categories"""
    return await workflow.find_inconsistencies()


# --------------------------
# 3️⃣ Admin: review one vendor
# --------------------------

@router.get("/{vendor_id}", response_model=SubmissionRead)
async def get_vendor_submission(
        vendor_id: str,
        current_user: Actor = Depends(admin_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.get_submission(vendor_id)


@router.get("/{vendor_id}/provider-status", response_model=ProviderStatusRead)
async def get_provider_status(
        vendor_id: str,
        current_user: Actor = Depends(admin_access),
        service: SubmissionService = Depends(get_submission_service)
):
    result = await service.check_provider_status(vendor_id)
    return {
        "provider": service.provider.name,
        "display_name": service.provider.display_name,
        "supports_liveness": service.provider.supports_liveness,
        "success": result.success,
        "status": result.status,
        "provider_ref": result.provider_ref,
        "confidence": result.confidence,
        "error": result.error,
    }


@router.post("/{vendor_id}/start-review", response_model=SubmissionRead)
async def start_review(
        vendor_id: str,
        current_user: Actor = Depends(admin_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.start_review(vendor_id, current_user.id, current_user.email)


@router.post("/{vendor_id}/approve", response_model=SubmissionRead)
async def approve_submission(
        vendor_id: str,
        data: Optional[ReviewNotes] = None,
        approve_pending: bool = Query(False),
        current_user: Actor = Depends(admin_access),
        workflow: ReviewWorkflow = Depends(get_review_workflow)
):
    """Approve the submission; with approve_pending=true also approve every pending category"""
    notes = data.notes if data else None
    if approve_pending:
        result = await workflow.approve_submission_with_pending(vendor_id, current_user.id, current_user.email, notes)
        return result["submission"]
    return await workflow.submissions.approve_submission(vendor_id, current_user.id, current_user.email, notes)


@router.post("/{vendor_id}/reject", response_model=SubmissionRead)
async def reject_submission(
        vendor_id: str,
        data: ReviewReason,
        current_user: Actor = Depends(admin_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.reject_submission(vendor_id, current_user.id, current_user.email, data.reason)


@router.post("/{vendor_id}/request-resubmit", response_model=SubmissionRead)
async def request_resubmit(
        vendor_id: str,
        data: ReviewReason,
        current_user: Actor = Depends(admin_access),
        service: SubmissionService = Depends(get_submission_service)
):
    return await service.request_resubmit(vendor_id, current_user.id, current_user.email, data.reason)
