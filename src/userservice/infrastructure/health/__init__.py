"""Health check infrastructure."""

from .checker import CheckResult, HealthChecker, HealthResult, HealthStatus

__all__ = ["CheckResult", "HealthChecker", "HealthResult", "HealthStatus"]
