"""In-app notification record model."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class NotificationRecord(BaseModel):
    """A delivered notification kept in the local inbox."""

    id: Optional[int] = Field(default=None, description="Database ID")
    owner: str = Field(default="local", description="Recipient")
    alert_id: Optional[int] = Field(default=None, description="Alert that fired")
    channel: str = Field(default="in_app", description="Delivery channel")
    title: str = Field(..., description="Notification title")
    body: str = Field(..., description="Notification body")
    payload: dict[str, Any] = Field(default_factory=dict, description="Extra data")
    created_at: datetime = Field(default_factory=datetime.now)

    model_config = {"frozen": True}
