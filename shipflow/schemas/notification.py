import uuid
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any

from ..models.enums import NotificationType, NotificationSeverity

class NotificationRequestSchema(BaseModel):
    """Payload yang dikirim ke notification service"""
    user_id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    related_entity_type: str = 'ORDER'
    related_entity_id: Optional[uuid.UUID] = None
    severity: NotificationSeverity = NotificationSeverity.INFO
    metadata: Dict[str, Any] = Field(default_factory=dict)
