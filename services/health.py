"""
Health probe endpoints for liveness and readiness checks.

Liveness  (/health/live)  — is the process running?
Readiness (/health/ready) — can /api/chat serve requests? (LLM provider has a token)
"""

import time
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class CheckResult:
    healthy: bool
    message: str
    details: Optional[Dict] = field(default=None)


class HealthChecker:
    """Liveness and readiness health checks."""

    def __init__(self):
        self.start_time = time.time()

    def liveness(self) -> CheckResult:
        """Liveness probe — always 200 if the process is alive."""
        return CheckResult(
            healthy=True,
            message="Process is running",
            details={"uptime_seconds": round(time.time() - self.start_time, 1)},
        )

    def readiness(self) -> CheckResult:
        """Readiness probe — 200 only when the chat LLM provider is usable."""
        checks: Dict[str, Dict] = {}
        try:
            llm_ok = _check_llm()
        except Exception as exc:
            llm_ok = CheckResult(healthy=False, message=str(exc))
        checks["llm"] = llm_ok.__dict__

        return CheckResult(
            healthy=llm_ok.healthy,
            message="All checks passed" if llm_ok.healthy else "One or more checks failed",
            details=checks,
        )


def _check_llm() -> CheckResult:
    """Check that the default LLM provider is registered and has its token."""
    import providers.llm  # noqa: F401
    from providers.registry import get_llm_provider

    provider = get_llm_provider()
    info = provider.get_info()
    if not provider.is_available():
        return CheckResult(healthy=False, message="HF_TOKEN not set", details=info)
    return CheckResult(healthy=True, message=f"{info.get('name')} configured", details=info)


# Module-level singleton, imported by app.py
health_checker = HealthChecker()
