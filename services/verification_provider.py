"""
Verification providers.

A provider receives a submission when the vendor submits it for review and
reports back a status plus an opaque reference. Only the manual provider is
implemented: it performs no checks, it just hands the submission to the
admin review queue.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Type
import logging

from models.verification_submission import (
    DocumentType, ProviderType, SubmissionStatus, VerificationSubmission
)

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    success: bool
    status: SubmissionStatus
    provider_ref: Optional[str] = None
    confidence: Optional[float] = None
    error: Optional[str] = None


class VerificationProvider(ABC):
    name: ProviderType
    display_name: str = ""
    supports_liveness: bool = False
    supported_documents: List[DocumentType] = []

    @abstractmethod
    async def initialize(self, config: Dict[str, str]) -> None:
        ...

    @abstractmethod
    async def verify_identity(self, submission: VerificationSubmission) -> VerificationResult:
        ...

    @abstractmethod
    async def check_status(self, provider_ref: str) -> VerificationResult:
        ...


class ManualVerificationProvider(VerificationProvider):
    name = ProviderType.MANUAL
    display_name = "Manual Review"
    supports_liveness = False
    supported_documents = [
        DocumentType.GOVERNMENT_ID,
        DocumentType.PASSPORT,
        DocumentType.DRIVERS_LICENSE,
        DocumentType.VOTERS_ID,
        DocumentType.BUSINESS_REGISTRATION,
        DocumentType.SELFIE,
    ]

    async def initialize(self, config: Dict[str, str]) -> None:
        logger.info("Manual verification provider initialized")

    async def verify_identity(self, submission: VerificationSubmission) -> VerificationResult:
        return VerificationResult(
            success=True,
            status=SubmissionStatus.UNDER_REVIEW,
            provider_ref=f"manual_{submission.id}",
        )

    async def check_status(self, provider_ref: str) -> VerificationResult:
        return VerificationResult(
            success=True,
            status=SubmissionStatus.UNDER_REVIEW,
            provider_ref=provider_ref,
        )


PROVIDERS: Dict[ProviderType, Type[VerificationProvider]] = {
    ProviderType.MANUAL: ManualVerificationProvider,
}


async def build_provider(name: str, config: Optional[Dict[str, str]] = None) -> VerificationProvider:
    """Instantiate and initialize the configured provider"""
    try:
        provider_type = ProviderType(name)
    except ValueError:
        raise ValueError(f"Unknown verification provider: {name}")

    provider_cls = PROVIDERS.get(provider_type)
    if provider_cls is None:
        raise ValueError(f"Verification provider '{name}' is not available")

    provider = provider_cls()
    await provider.initialize(config or {})
    return provider
