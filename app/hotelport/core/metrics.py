from __future__ import annotations

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from app.hotelport.core.config import settings


@dataclass
class MetricsSnapshot:
    content: bytes
    content_type: str


class Metrics:
    def __init__(self) -> None:
        self.enabled = bool(settings.METRICS_ENABLED)
        self._registry = None
        self._permission_denied_total = None
        self._lock_wait_timeout_total = None
        self._pending_action_decisions_total = None
        self._notification_failures_total = None
        if self.enabled:
            self._initialize_registry()

    def _initialize_registry(self) -> None:
        self._registry = CollectorRegistry()
        self._permission_denied_total = Counter(
            "permission_denied_total",
            "Permission checks that denied access.",
            ["module", "action", "reason"],
            registry=self._registry,
        )
        self._lock_wait_timeout_total = Counter(
            "lock_wait_timeout_total",
            "Lock wait timeout occurrences.",
            registry=self._registry,
        )
        self._pending_action_decisions_total = Counter(
            "pending_action_decisions_total",
            "Pending action approvals and rejections.",
            ["action_type", "status"],
            registry=self._registry,
        )
        self._notification_failures_total = Counter(
            "notification_failures_total",
            "Decision notifications that failed to send.",
            registry=self._registry,
        )

    def reset(self) -> None:
        if not self.enabled:
            return
        self._initialize_registry()

    def increment_permission_denied(self, *, module: str, action: str, resource_denied: bool) -> None:
        if not self.enabled:
            return
        reason = "resource" if resource_denied else "level"
        self._permission_denied_total.labels(module=module, action=action, reason=reason).inc()

    def increment_lock_wait_timeout(self) -> None:
        if not self.enabled:
            return
        self._lock_wait_timeout_total.inc()

    def record_decision(self, *, action_type: str, status: str) -> None:
        if not self.enabled:
            return
        self._pending_action_decisions_total.labels(action_type=action_type, status=status).inc()

    def increment_notification_failure(self) -> None:
        if not self.enabled:
            return
        self._notification_failures_total.inc()

    def render(self) -> MetricsSnapshot:
        if not self.enabled:
            return MetricsSnapshot(content=b"metrics_disabled\n", content_type="text/plain")
        return MetricsSnapshot(content=generate_latest(self._registry), content_type=CONTENT_TYPE_LATEST)


metrics = Metrics()
