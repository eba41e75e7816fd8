"""Request DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class FetchRequest(BaseModel):
    """Request DTO for intercepting an arbitrary (possibly cross-origin) URL."""

    url: str = Field(..., description="Absolute URL to fetch", min_length=1)
    method: str = Field("GET", description="HTTP method")
    headers: dict[str, str] = Field(default_factory=dict, description="Request headers")


class SyncEventRequest(BaseModel):
    """Request DTO for background sync and periodic sync events."""

    tag: str = Field(..., description="Sync registration tag", min_length=1)


class PushEventRequest(BaseModel):
    """Request DTO for push events."""

    payload: dict[str, Any] | None = Field(
        None,
        description="Push message data (title, body, data); null for an empty push",
    )


class NotificationClickRequest(BaseModel):
    """Request DTO for notification click events."""

    notification_id: str = Field(..., description="Identifier of the clicked notification")
    action: str | None = Field(None, description="Action button pressed ('open', 'dismiss')")


class ClientRegistrationRequest(BaseModel):
    """Request DTO for registering an open page."""

    url: str = Field(..., description="URL the page has loaded", min_length=1)
    client_id: str | None = Field(None, description="Client identifier (generated if omitted)")
