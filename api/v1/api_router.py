# app/api/v1/router.py
from fastapi import APIRouter
from api.v1.endpoints import (
    verification,
    submission,
    audit,
)

api_router = APIRouter()

# ========== 1️⃣ Verification ledger ==========
api_router.include_router(verification.router, prefix="/verifications", tags=["Verifications"])

# ========== 2️⃣ Evidence submissions ==========
api_router.include_router(submission.router, prefix="/submissions", tags=["Submissions"])

# ========== 3️⃣ Audit trail ==========
api_router.include_router(audit.router, prefix="/audit-logs", tags=["Audit Logs"])
