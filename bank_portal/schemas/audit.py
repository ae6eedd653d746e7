import uuid
from datetime import datetime

from pydantic import BaseModel

from bank_portal.models.audit import AuditAction


class AuditLogResponse(BaseModel):
    id: uuid.UUID
    admin_id: uuid.UUID
    target_user_id: uuid.UUID | None
    action: AuditAction
    details: dict | None
    ip_address: str | None
    user_agent: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
