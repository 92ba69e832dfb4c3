"""활동 로그 응답 스키마 (Activity log response schema)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class ActivityLogResponse(BaseModel):
    """활동 로그 응답 스키마.

    Activity log entry. ``metadata`` holds type-specific details such as
    the related attendance or visit id.
    """

    id: str
    activity_type: str  # clock_in, clock_out, overtime_request, visit_start 등
    title: str
    description: str | None
    activity_time: datetime
    latitude: float | None
    longitude: float | None
    location_address: str | None
    metadata: dict[str, Any] | None = None
