from __future__ import annotations

import math
from dataclasses import dataclass

from wifidist.errors import ConfigurationError


@dataclass(frozen=True)
class Scenario:
    """One experiment point: the STA cluster placed `distance` meters from the AP."""
    distance: float
    station_count: int = 3
    app_start: float = 1.0
    app_stop: float = 10.0
    sim_stop: float = 12.0

    @property
    def app_duration(self) -> float:
        return self.app_stop - self.app_start

    def validate(self) -> None:
        for name in ("distance", "app_start", "app_stop", "sim_stop"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ConfigurationError(f"{name} must be a finite number, got {value!r}", self.distance)
        if self.distance < 0:
            raise ConfigurationError(f"distance must not be negative, got {self.distance}", self.distance)
        if isinstance(self.station_count, bool) or not isinstance(self.station_count, int) or self.station_count < 0:
            raise ConfigurationError(f"station_count must be a non-negative integer, got {self.station_count!r}", self.distance)
        if self.app_start < 0:
            raise ConfigurationError(f"app_start must not be negative, got {self.app_start}", self.distance)
        if not self.app_start < self.app_stop <= self.sim_stop:
            raise ConfigurationError(
                f"expected app_start < app_stop <= sim_stop, got {self.app_start}, {self.app_stop}, {self.sim_stop}",
                self.distance,
            )


def make_scenarios(conf, distances=None) -> list[Scenario]:
    """ One Scenario per distance, in the given order, sharing the timing parameters of conf. """
    if distances is None:
        distances = conf.DISTANCES
    return [
        Scenario(
            distance=d,
            station_count=conf.NR_STATIONS,
            app_start=conf.APP_START,
            app_stop=conf.APP_STOP,
            sim_stop=conf.SIM_STOP,
        )
        for d in distances
    ]
