"""승인 공통 로직 (Shared approve/reject mechanics).

Overtime requests and visits follow the same decision shape: only a
pending item can be decided, rejection needs a reason, and the decision
stamps ``approved_by``/``approved_at``. Who may decide differs per type and
stays in the owning service.
"""

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from app.utils.exceptions import ErrorReason, PreconditionError, ValidationError


class Approvable(Protocol):
    """승인 대상 (Anything an approver can approve or reject)."""

    status: Any
    approved_by: UUID | None
    approved_at: datetime | None
    rejection_reason: str | None

    @property
    def is_pending(self) -> bool: ...


def ensure_pending(item: Approvable, label: str) -> None:
    """미결 상태가 아니면 거부합니다 (Reject decisions on already decided items)."""
    if not item.is_pending:
        raise PreconditionError(
            ErrorReason.ALREADY_PROCESSED,
            f"{label} has already been processed",
        )


def require_reason(reason: str | None) -> str:
    """반려 사유가 비어 있으면 거부합니다 (A rejection needs a non-blank reason)."""
    cleaned = (reason or "").strip()
    if not cleaned:
        raise ValidationError(ErrorReason.REJECTION_REASON_REQUIRED, "A rejection reason is required")
    return cleaned


def approve(item: Approvable, approved_status: Any, approver_id: UUID, decided_at: datetime) -> None:
    """승인 처리 (Mark a pending item approved)."""
    item.status = approved_status
    item.approved_by = approver_id
    item.approved_at = decided_at


def reject(
    item: Approvable,
    rejected_status: Any,
    approver_id: UUID | None,
    decided_at: datetime,
    reason: str,
) -> None:
    """반려 처리 (Mark a pending item rejected with a reason)."""
    item.status = rejected_status
    item.approved_by = approver_id
    item.approved_at = decided_at
    item.rejection_reason = reason
