"""Optimizer result."""
from dataclasses import dataclass

from ..stage import Rocket
from ..units import Mass, Velocity


@dataclass(frozen=True)
class Solution:
    """A sized rocket plus search metadata.

    ``margin`` is achieved delta-v minus the target and ``runtime`` is
    wall-clock seconds spent in the optimizer.
    """
    rocket: Rocket
    margin: Velocity
    iterations: int
    runtime: float
    optimizer_name: str

    def delta_v(self) -> Velocity:
        return self.rocket.total_delta_v()

    def total_mass(self) -> Mass:
        return self.rocket.total_mass()

    def stage_count(self) -> int:
        return self.rocket.stage_count()

    def payload_fraction_percent(self) -> float:
        return self.rocket.payload_fraction().value * 100.0

    def meets_target(self) -> bool:
        return self.margin.mps >= 0.0

    def margin_percent(self, target: Velocity) -> float:
        return self.margin.mps / target.mps * 100.0
