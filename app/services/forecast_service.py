from __future__ import annotations

import random
from datetime import date, timedelta
from typing import get_args

from app.models.schemas import Summary, WeatherForecast


SUMMARIES: tuple[str, ...] = get_args(Summary)


def generate_forecasts(days: int = 5, today: date | None = None, rng: random.Random | None = None) -> list[WeatherForecast]:
    if days < 1:
        raise ValueError("days must be >= 1")

    start = today or date.today()
    rand = rng or random.Random()
    return [
        WeatherForecast(
            date=start + timedelta(days=offset),
            temperature_c=rand.randrange(-20, 55),
            summary=rand.choice(SUMMARIES),
        )
        for offset in range(1, days + 1)
    ]
