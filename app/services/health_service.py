"""Tagged health checks.

Checks are zero-argument callables (sync or async) returning a
``HealthCheckResult``. The registry runs every check matching a predicate and
reports the worst status. Checks run concurrently; a check that raises or
returns something other than a ``HealthCheckResult`` counts as unhealthy.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Awaitable, Callable, Union

import structlog

from app.models.schemas import HealthCheckEntry, HealthReport, HealthStatus

LIVE_TAG = "live"

_SEVERITY: dict[HealthStatus, int] = {"healthy": 0, "degraded": 1, "unhealthy": 2}

logger = structlog.get_logger("health")


@dataclass(frozen=True)
class HealthCheckResult:
    status: HealthStatus
    description: str | None = None

    @classmethod
    def healthy(cls, description: str | None = None) -> HealthCheckResult:
        return cls("healthy", description)

    @classmethod
    def degraded(cls, description: str | None = None) -> HealthCheckResult:
        return cls("degraded", description)

    @classmethod
    def unhealthy(cls, description: str | None = None) -> HealthCheckResult:
        return cls("unhealthy", description)


CheckFn = Callable[[], Union[HealthCheckResult, Awaitable[HealthCheckResult]]]


@dataclass
class HealthCheckRegistration:
    name: str
    check: CheckFn
    tags: frozenset[str] = field(default_factory=frozenset)


class HealthCheckRegistry:
    def __init__(self) -> None:
        self._checks: dict[str, HealthCheckRegistration] = {}

    def add_check(self, name: str, check: CheckFn, tags: list[str] | tuple[str, ...] = ()) -> None:
        if name in self._checks:
            raise ValueError(f"Health check {name!r} is already registered")
        self._checks[name] = HealthCheckRegistration(name=name, check=check, tags=frozenset(tags))

    @property
    def registrations(self) -> list[HealthCheckRegistration]:
        return list(self._checks.values())

    async def _run_one(self, registration: HealthCheckRegistration) -> tuple[HealthCheckResult, float]:
        start = perf_counter()
        try:
            outcome: Any = registration.check()
            if inspect.isawaitable(outcome):
                outcome = await outcome
            if isinstance(outcome, HealthCheckResult):
                result = outcome
            else:
                logger.warning("health_check_bad_result", check=registration.name, result_type=type(outcome).__name__)
                result = HealthCheckResult.unhealthy(f"Check returned {type(outcome).__name__}, not HealthCheckResult")
        except Exception as exc:
            logger.warning("health_check_failed", check=registration.name, error=str(exc))
            result = HealthCheckResult.unhealthy(str(exc) or exc.__class__.__name__)
        return result, (perf_counter() - start) * 1000.0

    async def run(self, predicate: Callable[[HealthCheckRegistration], bool] | None = None) -> HealthReport:
        start = perf_counter()
        status: HealthStatus = "healthy"
        entries: dict[str, HealthCheckEntry] = {}

        selected = [r for r in self._checks.values() if predicate is None or predicate(r)]
        outcomes = await asyncio.gather(*(self._run_one(r) for r in selected))

        for registration, (result, duration_ms) in zip(selected, outcomes):
            entries[registration.name] = HealthCheckEntry(
                status=result.status,
                description=result.description,
                duration_ms=round(duration_ms, 3),
                tags=sorted(registration.tags),
            )
            if _SEVERITY[result.status] > _SEVERITY[status]:
                status = result.status

        return HealthReport(
            status=status,
            total_duration_ms=round((perf_counter() - start) * 1000.0, 3),
            checks=entries,
        )


def tagged(tag: str) -> Callable[[HealthCheckRegistration], bool]:
    return lambda registration: tag in registration.tags


def build_default_registry() -> HealthCheckRegistry:
    registry = HealthCheckRegistry()
    registry.add_check("self", lambda: HealthCheckResult.healthy(), tags=[LIVE_TAG])
    return registry


_registry: HealthCheckRegistry | None = None


def set_health_registry(registry: HealthCheckRegistry | None) -> None:
    global _registry
    _registry = registry


def get_health_registry() -> HealthCheckRegistry:
    global _registry
    if _registry is None:
        _registry = build_default_registry()
    return _registry
