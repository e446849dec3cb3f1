import os
import tempfile

# settings are read at import time
_TEST_DIR = tempfile.mkdtemp(prefix="vendor_verification_")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DIR}/app.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

import models  # noqa: F401
from core.locks import SellerLocks
from core.security import create_access_token
from models.base import Base
from models.verification_submission import SubmissionStatus
from services.audit_service import AuditService
from services.review_workflow import ReviewWorkflow
from services.submission_service import SubmissionService
from services.verification_provider import ManualVerificationProvider, VerificationResult
from services.verification_service import VerificationService

ADMIN_ID = "admin-1"
ADMIN_EMAIL = "admin@example.com"


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def ledger_locks():
    return SellerLocks("ledger")


@pytest.fixture
def submission_locks():
    return SellerLocks("submission")


@pytest.fixture
def provider():
    return ManualVerificationProvider()


@pytest.fixture
def verification_service(db, ledger_locks):
    return VerificationService(db, ledger_locks)


@pytest.fixture
def submission_service(db, submission_locks, provider):
    return SubmissionService(db, submission_locks, provider)


@pytest.fixture
def audit_service(db):
    return AuditService(db)


@pytest.fixture
def workflow(verification_service, submission_service):
    return ReviewWorkflow(verification_service, submission_service)


class FailingProvider(ManualVerificationProvider):
    """Provider whose backend is down"""

    async def verify_identity(self, submission):
        raise ConnectionError("provider unreachable")


class RefusingProvider(ManualVerificationProvider):
    async def verify_identity(self, submission):
        return VerificationResult(success=False, status=SubmissionStatus.REJECTED, error="document unreadable")


class OddStatusProvider(ManualVerificationProvider):
    """Reports a status this service does not know"""

    async def verify_identity(self, submission):
        return VerificationResult(success=True, status="processing", provider_ref=f"odd_{submission.id}")


def make_token(subject: str, role: str, email: str = None) -> str:
    return create_access_token(subject, extra_data={"role": role, "email": email or f"{subject}@example.com"})


def auth_headers(subject: str, role: str) -> dict:
    return {"Authorization": f"Bearer {make_token(subject, role)}"}
