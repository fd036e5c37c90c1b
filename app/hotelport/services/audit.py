import logging
from dataclasses import dataclass
from datetime import datetime

from app.hotelport.db.models import AuditEvent
from app.hotelport.repos.audit import AuditRepository

logger = logging.getLogger(__name__)


@dataclass
class AuditEventPayload:
    user_id: str | None
    action: str
    entity_type: str
    entity_id: str | None
    before: dict | None
    after: dict | None
    result: str = "success"
    trace_id: str | None = None
    metadata: dict | None = None


class AuditService:
    """Best-effort audit logging.

    Strategy: failures are logged and swallowed to avoid breaking request flows.
    """

    def __init__(self, db, *, trace_id: str | None = None):
        self.repo = AuditRepository(db)
        self.trace_id = trace_id

    def record_event(self, payload: AuditEventPayload) -> None:
        trace_id = payload.trace_id or self.trace_id
        try:
            event = AuditEvent(
                user_id=payload.user_id,
                trace_id=trace_id,
                action=payload.action,
                entity_type=payload.entity_type,
                entity_id=payload.entity_id,
                before_payload=payload.before,
                after_payload=payload.after,
                event_metadata=dict(payload.metadata or {}),
                result=payload.result,
                created_at=datetime.utcnow(),
            )
            self.repo.create(event)
        except Exception:
            logger.exception(
                "Failed to write audit event",
                extra={
                    "action": payload.action,
                    "trace_id": trace_id,
                    "entity_id": payload.entity_id,
                },
            )
