from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field, computed_field


Summary = Literal[
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
]


class WeatherForecast(BaseModel):
    date: dt.date
    temperature_c: int = Field(ge=-20, lt=55)
    summary: Summary | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def temperature_f(self) -> int:
        return 32 + int(self.temperature_c / 0.5556)
