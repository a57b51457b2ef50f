"""
Health checks for liveness and readiness probes.

Liveness answers "is the process up"; readiness runs every registered
check (storage connectivity and the like) under one shared time budget.
"""

import asyncio
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

CheckFunc = Callable[[], Awaitable[None]]


class HealthStatus(str, Enum):
    """Outcome of a health check."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class CheckResult:
    """Result of a single named check."""

    status: HealthStatus
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"status": self.status.value}
        if self.error:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class HealthResult:
    """Overall health with per-check detail."""

    status: HealthStatus
    checks: Dict[str, CheckResult] = field(default_factory=dict)

    @property
    def healthy(self) -> bool:
        return self.status is HealthStatus.HEALTHY

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "checks": {name: result.to_dict() for name, result in self.checks.items()},
        }


class HealthChecker:
    """
    Registry of named async health checks.

    A check passes by returning and fails by raising; the exception
    message becomes the check's error. Checks that do not finish within
    the budget fail with a timeout error.

    Example:
        >>> checker = HealthChecker(timeout=5.0)
        >>> checker.add_check("storage", repository.check_health)
        >>> result = await checker.readiness()
    """

    def __init__(self, timeout: float = 5.0):
        """
        Initialize checker.

        Args:
            timeout: Total seconds allowed for one round of checks
        """
        self.timeout = timeout
        self._checks: Dict[str, CheckFunc] = {}
        self._lock = threading.Lock()

    def add_check(self, name: str, check: CheckFunc) -> None:
        """Register (or replace) a named check."""
        with self._lock:
            self._checks[name] = check

    async def _run_check(self, check: CheckFunc) -> CheckResult:
        try:
            await check()
        except asyncio.TimeoutError:
            return CheckResult(HealthStatus.UNHEALTHY, "check timed out")
        except Exception as e:
            return CheckResult(HealthStatus.UNHEALTHY, str(e) or type(e).__name__)
        return CheckResult(HealthStatus.HEALTHY)

    async def check(self) -> HealthResult:
        """Run all checks concurrently under the shared timeout."""
        with self._lock:
            checks = dict(self._checks)

        names = list(checks)
        tasks = [
            asyncio.ensure_future(self._run_check(checks[name])) for name in names
        ]
        if tasks:
            done, pending = await asyncio.wait(tasks, timeout=self.timeout)
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        results: Dict[str, CheckResult] = {}
        for name, task in zip(names, tasks):
            if task.done() and not task.cancelled():
                results[name] = task.result()
            else:
                results[name] = CheckResult(HealthStatus.UNHEALTHY, "check timed out")

        overall = HealthStatus.HEALTHY
        if any(r.status is HealthStatus.UNHEALTHY for r in results.values()):
            overall = HealthStatus.UNHEALTHY
        return HealthResult(status=overall, checks=results)

    def liveness(self) -> HealthResult:
        """The process is running; always healthy."""
        return HealthResult(
            status=HealthStatus.HEALTHY,
            checks={"liveness": CheckResult(HealthStatus.HEALTHY)},
        )

    async def readiness(self) -> HealthResult:
        """Whether the service can serve traffic."""
        return await self.check()
