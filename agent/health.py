"""
Health checks for deployment readiness.

Provides:
- /health/live: Liveness probe (process is running)
- /health/ready: Readiness probe (relay context built, outbound configured)

Neither probe calls external services.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass
class HealthStatus:
    """Health status response."""

    status: str  # "healthy", "degraded", "unhealthy"
    timestamp: str
    service: str
    uptime_seconds: float
    llm_backend: str
    message: str
    metadata: Dict[str, Any]


class HealthChecker:
    """
    Health checker for relay readiness.

    Invariant: Health checks do NOT verify external services.
    """

    def __init__(self, relay: Any, service: str, start_time: Optional[float] = None):
        self.relay = relay
        self.service = service
        self.start_time = start_time if start_time is not None else time.time()

    def _uptime(self) -> float:
        return time.time() - self.start_time

    def check_live(self) -> HealthStatus:
        """Always healthy if this code runs."""
        return HealthStatus(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            service=self.service,
            uptime_seconds=self._uptime(),
            llm_backend=self.relay.config.llm_backend,
            message="Relay process is running",
            metadata={},
        )

    def check_ready(self, outbound_configured: bool) -> HealthStatus:
        """
        Ready when the relay context exists and the sweeper is scheduled.

        Missing Infobip credentials degrade readiness: messages are still
        answered but replies cannot be delivered.
        """
        sweeper_running = self.relay.sweeper.is_running

        if not sweeper_running:
            status, message = "unhealthy", "Expiry sweeper is not running"
        elif not outbound_configured:
            status, message = "degraded", "Infobip credentials missing; replies cannot be sent"
        else:
            status, message = "healthy", "Relay ready"

        return HealthStatus(
            status=status,
            timestamp=datetime.now(timezone.utc).isoformat(),
            service=self.service,
            uptime_seconds=self._uptime(),
            llm_backend=self.relay.config.llm_backend,
            message=message,
            metadata={
                "store": self.relay.store.stats(),
                "dedup_records": len(self.relay.dedup),
                "outcomes": self.relay.orchestrator.stats(),
                "sweeper": {
                    "running": sweeper_running,
                    "cycles": self.relay.sweeper.cycles,
                    "failures": self.relay.sweeper.failures,
                },
            },
        )

    def to_dict(self, status: HealthStatus) -> Dict[str, Any]:
        """Convert HealthStatus to dict for JSON serialization."""
        return {
            "status": status.status,
            "timestamp": status.timestamp,
            "service": status.service,
            "uptime_seconds": status.uptime_seconds,
            "llm_backend": status.llm_backend,
            "message": status.message,
            "metadata": status.metadata,
        }
