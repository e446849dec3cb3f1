# schemas/audit.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class AuditLogRead(BaseModel):
    id: int
    uuid: str
    action: str
    vendor_id: str
    vendor_name: str
    verification_type: str
    actor_type: str
    admin_id: Optional[str] = None
    admin_email: Optional[str] = None
    previous_status: Optional[str] = None
    new_status: str
    details: str
    timestamp: datetime

    class Config:
        from_attributes = True
