# app/core/config.py
from typing import *

from pydantic_settings import BaseSettings



class Settings(BaseSettings):
    APP_NAME: str = "Vendor Verification"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Security
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    ALGORITHM: str = "HS256"

    # Database
    DATABASE_URL: str
    AUTO_CREATE_TABLES: bool = True

    # ✅ Verification provider
    VERIFICATION_PROVIDER: str = "manual"  # manual, onfido, sumsub, jumio, veriff
    VERIFICATION_PROVIDER_CONFIG: Dict[str, str] = {}

    # ✅ Audit trail
    AUDIT_LOG_MAX_ENTRIES: Optional[int] = 2000  # None/0 = keep everything

    # ✅ Category approvals
    VERIFICATION_VALIDITY_DAYS: Optional[int] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
