from __future__ import annotations

import asyncio
import random
from datetime import date, timedelta

from app.models.schemas import WeatherForecast

SUMMARIES = (
    "Freezing",
    "Bracing",
    "Chilly",
    "Cool",
    "Mild",
    "Warm",
    "Balmy",
    "Hot",
    "Sweltering",
    "Scorching",
)

MIN_TEMPERATURE_C = -20
MAX_TEMPERATURE_C = 54


def generate_forecasts(days: int = 5, today: date | None = None, rng: random.Random | None = None) -> list[WeatherForecast]:
    """Random forecasts for the ``days`` days following ``today``."""
    if days <= 0:
        raise ValueError("days must be greater than zero")

    rng = rng or random.Random()
    start = today or date.today()
    return [
        WeatherForecast(
            date=start + timedelta(days=offset),
            temperature_c=rng.randint(MIN_TEMPERATURE_C, MAX_TEMPERATURE_C),
            summary=rng.choice(SUMMARIES),
        )
        for offset in range(1, days + 1)
    ]


async def simulate_latency(min_ms: int, max_ms: int, rng: random.Random | None = None) -> float:
    """Sleep for a random whole number of ms in [min_ms, max_ms). Returns the chosen delay."""
    if min_ms < 0 or max_ms <= min_ms:
        raise ValueError("delay bounds must satisfy 0 <= min_ms < max_ms")

    delay_ms = (rng or random).randrange(min_ms, max_ms)
    await asyncio.sleep(delay_ms / 1000.0)
    return float(delay_ms)
