"""
Health endpoints.

Key behaviors:
- /health: Overall status from all registered checks
- /health/ready: Readiness probe (startup done, data directory writable)
- /health/live: Liveness probe (process alive)
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

# --- Types ---


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: HealthStatus
    message: str = ""
    latency_ms: float = 0.0
    details: dict[str, Any] = field(default_factory=dict)


class HealthCheck(Protocol):
    """Protocol for health checks."""

    name: str

    def check(self) -> CheckResult:
        """Run the health check and return result."""
        ...


# --- Startup Tracker ---


class StartupTracker:
    """Tracks application startup time for uptime calculation."""

    _start_time: float | None = None

    @classmethod
    def mark_started(cls) -> None:
        cls._start_time = time.time()

    @classmethod
    def reset(cls) -> None:
        cls._start_time = None

    @classmethod
    def get_uptime_seconds(cls) -> float:
        if cls._start_time is None:
            return 0.0
        return time.time() - cls._start_time

    @classmethod
    def is_started(cls) -> bool:
        return cls._start_time is not None


# --- Health Check Registry ---


class HealthCheckRegistry:
    """Registry of health checks to run."""

    def __init__(self) -> None:
        self._checks: list[HealthCheck] = []

    def register(self, check: HealthCheck) -> None:
        self._checks.append(check)

    def run_all(self) -> list[CheckResult]:
        return [check.check() for check in self._checks]

    def clear(self) -> None:
        self._checks = []


# --- Built-in Checks ---


class StartupCheck:
    """Check if application has completed startup."""

    name = "startup"

    def check(self) -> CheckResult:
        if StartupTracker.is_started():
            return CheckResult(
                name=self.name,
                status=HealthStatus.HEALTHY,
                message="Startup complete",
                details={"uptime_seconds": StartupTracker.get_uptime_seconds()},
            )
        return CheckResult(
            name=self.name,
            status=HealthStatus.UNHEALTHY,
            message="Startup not complete",
        )


class DataDirCheck:
    """Room documents and uploads live under the data directory; it must be writable."""

    name = "data_dir"

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir

    def check(self) -> CheckResult:
        start = time.time()
        ok = self._data_dir.is_dir() and os.access(self._data_dir, os.W_OK)
        return CheckResult(
            name=self.name,
            status=HealthStatus.HEALTHY if ok else HealthStatus.UNHEALTHY,
            message="Data directory writable" if ok else f"Data directory not writable: {self._data_dir}",
            latency_ms=(time.time() - start) * 1000,
        )


def _overall(results: list[CheckResult]) -> HealthStatus:
    if all(r.status == HealthStatus.HEALTHY for r in results):
        return HealthStatus.HEALTHY
    if any(r.status == HealthStatus.UNHEALTHY for r in results):
        return HealthStatus.UNHEALTHY
    return HealthStatus.DEGRADED


# --- FastAPI Router ---


def create_health_router(registry: HealthCheckRegistry, version: str = "0.0.0") -> APIRouter:
    """
    Create FastAPI router for health endpoints.

    Args:
        registry: Health check registry
        version: Application version string
    """
    router = APIRouter(tags=["health"])

    @router.get("/health", response_model=None)
    def health_check() -> JSONResponse:
        results = registry.run_all()
        overall = _overall(results)
        response = {
            "status": overall.value,
            "version": version,
            "uptime_seconds": StartupTracker.get_uptime_seconds(),
            "checks": [
                {
                    "name": r.name,
                    "status": r.status.value,
                    "message": r.message,
                    "latency_ms": r.latency_ms,
                }
                for r in results
            ],
        }
        code = status.HTTP_200_OK if overall == HealthStatus.HEALTHY else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=response, status_code=code)

    @router.get("/health/ready", response_model=None)
    def readiness_check() -> JSONResponse:
        results = registry.run_all()
        is_ready = all(r.status == HealthStatus.HEALTHY for r in results)
        response = {
            "ready": is_ready,
            "checks": [{"name": r.name, "status": r.status.value, "message": r.message} for r in results],
        }
        code = status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=response, status_code=code)

    @router.get("/health/live", response_model=None)
    def liveness_check() -> JSONResponse:
        return JSONResponse(
            content={"alive": True, "uptime_seconds": StartupTracker.get_uptime_seconds()},
            status_code=status.HTTP_200_OK,
        )

    return router


def build_default_registry(data_dir: Path) -> HealthCheckRegistry:
    registry = HealthCheckRegistry()
    registry.register(StartupCheck())
    registry.register(DataDirCheck(data_dir))
    return registry
