# app/core/exceptions.py
from typing import Any, List, Optional

from fastapi import HTTPException, status


class VerificationError(HTTPException):
    """Base class for every error raised by the verification engine"""
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **extra: Any):
        self.message = message
        self.extra = extra
        super().__init__(
            status_code=self.http_status,
            detail={"message": message, **extra},
        )

    def __str__(self) -> str:
        return self.message


class ValidationError(VerificationError):
    """Required evidence or fields are missing before a forward transition"""
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, missing_fields: List[str], message: Optional[str] = None):
        self.missing_fields = list(missing_fields)
        super().__init__(
            message or "Missing required fields: " + ", ".join(self.missing_fields),
            missing_fields=self.missing_fields,
        )


class InvalidStateError(VerificationError):
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, current_status: str, attempted: str, message: Optional[str] = None):
        self.current_status = current_status
        self.attempted = attempted
        super().__init__(
            message or f"Cannot {attempted} while status is '{current_status}'",
            current_status=current_status,
            attempted=attempted,
        )


class NotFoundError(VerificationError):
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            f"{resource} not found: {identifier}",
            resource=resource,
            identifier=identifier,
        )


class ProviderError(VerificationError):
    """The verification provider failed; the submission keeps its pre-call state"""
    http_status = status.HTTP_502_BAD_GATEWAY

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(message, provider=provider)


class PermissionDeniedError(VerificationError):
    http_status = status.HTTP_403_FORBIDDEN
