"""Stage and Rocket aggregates."""
from dataclasses import dataclass
from typing import List, Sequence

from .engine import Engine
from .physics import G0, burn_time, delta_v, twr
from .units import Force, Mass, Ratio, Time, Velocity


class TwrViolation(Exception):
    """A stage does not produce enough thrust for its load."""


class InsufficientLiftoffTwr(TwrViolation):
    def __init__(self, twr_value: float):
        self.stage = 0
        self.twr = twr_value
        super().__init__(f"Liftoff TWR {twr_value:.3f} is below 1.0")


class InsufficientStageTwr(TwrViolation):
    def __init__(self, stage: int, twr_value: float, minimum: float):
        self.stage = stage
        self.twr = twr_value
        self.minimum = minimum
        super().__init__(f"Stage {stage + 1} TWR {twr_value:.3f} is below minimum {minimum:.3f}")


@dataclass(frozen=True)
class Stage:
    """One propulsion unit: ``engine_count`` engines, propellant and structure."""
    engine: Engine
    engine_count: int
    propellant_mass: Mass
    structural_mass: Mass

    def __post_init__(self):
        if self.engine_count < 1:
            raise ValueError("A stage needs at least one engine")

    @classmethod
    def with_structural_ratio(cls, engine: Engine, engine_count: int,
                              propellant_mass: Mass, structural_ratio: float) -> 'Stage':
        """Stage whose structure scales with its propellant load."""
        return cls(engine, engine_count, propellant_mass, propellant_mass * structural_ratio)

    def engine_mass(self) -> Mass:
        return self.engine.dry_mass * self.engine_count

    def dry_mass(self) -> Mass:
        return self.structural_mass + self.engine_mass()

    def wet_mass(self) -> Mass:
        return self.dry_mass() + self.propellant_mass

    def mass_ratio(self) -> Ratio:
        return self.wet_mass() / self.dry_mass()

    def thrust_sl(self) -> Force:
        return self.engine.thrust_sl * self.engine_count

    def thrust_vac(self) -> Force:
        return self.engine.thrust_vac * self.engine_count

    def delta_v(self) -> Velocity:
        """Delta-v of the bare stage, using vacuum Isp."""
        return delta_v(self.engine.isp_vac, self.mass_ratio())

    def delta_v_with_payload(self, extra: Mass) -> Velocity:
        """Delta-v while carrying ``extra`` mass (upper stages plus payload)."""
        ratio = (self.wet_mass() + extra) / (self.dry_mass() + extra)
        return delta_v(self.engine.isp_vac, ratio)

    def twr_vac(self) -> Ratio:
        return twr(self.thrust_vac(), self.wet_mass(), G0)

    def twr_sl(self) -> Ratio:
        return twr(self.thrust_sl(), self.wet_mass(), G0)

    def twr_vac_with_payload(self, extra: Mass) -> Ratio:
        return twr(self.thrust_vac(), self.wet_mass() + extra, G0)

    def twr_sl_with_payload(self, extra: Mass) -> Ratio:
        return twr(self.thrust_sl(), self.wet_mass() + extra, G0)

    def burn_time(self) -> Time:
        return burn_time(self.propellant_mass, self.thrust_vac(), self.engine.isp_vac)


class Rocket:
    """Stack of stages (index 0 fires first) carrying a payload."""

    def __init__(self, stages: Sequence[Stage], payload: Mass):
        if not stages:
            raise ValueError("A rocket needs at least one stage")
        self.stages: List[Stage] = list(stages)
        self.payload = payload

    def __repr__(self):
        return f"Rocket(stages={len(self.stages)}, total_mass={self.total_mass()})"

    def stage_count(self) -> int:
        return len(self.stages)

    def mass_above_stage(self, index: int) -> Mass:
        """Payload plus the wet mass of every stage above ``index``."""
        above = self.payload
        for stage in self.stages[index + 1:]:
            above = above + stage.wet_mass()
        return above

    def stage_delta_v(self, index: int) -> Velocity:
        return self.stages[index].delta_v_with_payload(self.mass_above_stage(index))

    def total_delta_v(self) -> Velocity:
        total = Velocity(0.0)
        for index in range(len(self.stages)):
            total = total + self.stage_delta_v(index)
        return total

    def total_mass(self) -> Mass:
        total = self.payload
        for stage in self.stages:
            total = total + stage.wet_mass()
        return total

    def payload_fraction(self) -> Ratio:
        return self.payload / self.total_mass()

    def total_burn_time(self) -> Time:
        total = Time(0.0)
        for stage in self.stages:
            total = total + stage.burn_time()
        return total

    def liftoff_twr(self) -> Ratio:
        """Stage 0 sea-level thrust against the full stack."""
        return twr(self.stages[0].thrust_sl(), self.total_mass(), G0)

    def stage_twr(self, index: int) -> Ratio:
        """Vacuum TWR of stage ``index`` at ignition."""
        return self.stages[index].twr_vac_with_payload(self.mass_above_stage(index))

    def validate_twr(self, min_twr: float, require_liftoff: bool) -> None:
        """Raise a TwrViolation naming the first stage that falls short.

        Stage 0 is checked with sea-level thrust when ``require_liftoff``,
        and must also clear 1.0 in that case.
        """
        for index in range(len(self.stages)):
            if index == 0 and require_liftoff:
                ratio = self.liftoff_twr().value
                if ratio < 1.0:
                    raise InsufficientLiftoffTwr(ratio)
            else:
                ratio = self.stage_twr(index).value
            if ratio < min_twr:
                raise InsufficientStageTwr(index, ratio, min_twr)
