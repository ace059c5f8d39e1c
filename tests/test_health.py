import asyncio
import time

import pytest

from app.services.health_service import (
    LIVE_TAG,
    HealthCheckRegistry,
    HealthCheckResult,
    build_default_registry,
    get_health_registry,
    tagged,
)


async def test_health_reports_self_check(api_client) -> None:
    resp = await api_client.get("/health")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["status"] == "healthy"
    assert payload["checks"]["self"]["status"] == "healthy"
    assert payload["checks"]["self"]["tags"] == [LIVE_TAG]


async def test_alive_ignores_checks_not_tagged_live(api_client) -> None:
    get_health_registry().add_check("database", lambda: HealthCheckResult.unhealthy("connection refused"))

    alive = await api_client.get("/alive")
    assert alive.status_code == 200
    assert alive.json()["status"] == "healthy"
    assert set(alive.json()["checks"]) == {"self"}

    health = await api_client.get("/health")
    assert health.status_code == 503
    payload = health.json()
    assert payload["status"] == "unhealthy"
    assert payload["checks"]["database"]["description"] == "connection refused"


async def test_degraded_check_keeps_http_200(api_client) -> None:
    get_health_registry().add_check("cache", lambda: HealthCheckResult.degraded("slow"))

    resp = await api_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"


async def test_raising_check_is_reported_unhealthy() -> None:
    registry = build_default_registry()

    def _broken() -> HealthCheckResult:
        raise ConnectionError("unreachable")

    registry.add_check("upstream", _broken, tags=[LIVE_TAG])

    report = await registry.run(tagged(LIVE_TAG))
    assert report.status == "unhealthy"
    assert report.checks["upstream"].description == "unreachable"
    assert report.checks["self"].status == "healthy"


async def test_async_checks_are_awaited() -> None:
    registry = HealthCheckRegistry()

    async def _ping() -> HealthCheckResult:
        return HealthCheckResult.healthy("pong")

    registry.add_check("ping", _ping)
    report = await registry.run()
    assert report.checks["ping"].description == "pong"


async def test_empty_registry_is_healthy() -> None:
    report = await HealthCheckRegistry().run()
    assert report.status == "healthy"
    assert report.checks == {}


def test_duplicate_check_names_are_rejected() -> None:
    registry = build_default_registry()
    with pytest.raises(ValueError):
        registry.add_check("self", lambda: HealthCheckResult.healthy())


async def test_checks_run_concurrently() -> None:
    registry = HealthCheckRegistry()

    async def _slow() -> HealthCheckResult:
        await asyncio.sleep(0.2)
        return HealthCheckResult.healthy()

    for i in range(5):
        registry.add_check(f"slow-{i}", _slow)

    start = time.perf_counter()
    report = await registry.run()
    elapsed = time.perf_counter() - start

    assert report.status == "healthy"
    assert len(report.checks) == 5
    assert elapsed < 0.5
    assert report.total_duration_ms < 500


async def test_check_returning_wrong_type_is_unhealthy(api_client) -> None:
    get_health_registry().add_check("missing-return", lambda: None)

    resp = await api_client.get("/health")
    assert resp.status_code == 503
    entry = resp.json()["checks"]["missing-return"]
    assert entry["status"] == "unhealthy"
    assert "NoneType" in entry["description"]
