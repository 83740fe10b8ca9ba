"""Closed-form two-stage solver for a single engine type."""
from typing import Tuple

from ...engine import Engine
from ...physics import G0, required_mass_ratio, twr
from ...stage import Rocket, Stage, TwrViolation
from ...units import Mass, Ratio
from ...utils.config import get_solver_config
from ..errors import Infeasible, Unsupported
from ..problem import Problem
from .base_solver import BaseSolver


class AnalyticalSolver(BaseSolver):
    """Equal delta-v split sizing for two stages sharing one engine type.

    With identical Isp and structural ratio on both stages the optimal
    split gives each stage the same delta-v, so each stage's propellant
    follows directly from the rocket equation. The upper stage is sized
    first because it sets the mass the lower stage has to lift.
    """

    name = "Analytical"

    def __init__(self, dv_margin: float = 0.02, tolerance_mps: float = 1.0, verbose: bool = True):
        super().__init__(verbose=verbose)
        self.dv_margin = dv_margin
        self.tolerance_mps = tolerance_mps

    @classmethod
    def from_config(cls, config=None, verbose: bool = True) -> 'AnalyticalSolver':
        settings = get_solver_config(config, "analytical")
        return cls(
            dv_margin=settings["dv_margin"],
            tolerance_mps=settings["tolerance_mps"],
            verbose=verbose,
        )

    @staticmethod
    def check_supported(problem: Problem) -> None:
        if not problem.is_single_engine():
            raise Unsupported(
                f"analytical solver needs exactly one engine type, got {len(problem.engines)}")
        if problem.stage_count != 2:
            raise Unsupported(
                f"analytical solver needs a fixed stage count of 2, got {problem.stage_count}")

    def _solve(self, problem: Problem) -> Tuple[Rocket, int]:
        self.check_supported(problem)
        engine = problem.single_engine()
        constraints = problem.constraints
        target = problem.target_delta_v

        dv_per_stage = target * (1.0 + self.dv_margin) / 2.0
        ratio = required_mass_ratio(dv_per_stage, engine.isp_vac)
        self.logger.debug(
            f"Sizing 2 x {engine.name}: {dv_per_stage.mps:.1f} m/s per stage, mass ratio {ratio.value:.4f}")

        upper, upper_evals = self._size_stage(
            engine, ratio, problem.payload, constraints.structural_ratio,
            constraints.min_stage_twr, constraints.max_engines_per_stage, sea_level=False)
        mass_above = upper.wet_mass() + problem.payload
        lower, lower_evals = self._size_stage(
            engine, ratio, mass_above, constraints.structural_ratio,
            constraints.min_liftoff_twr, constraints.max_engines_per_stage, sea_level=True)

        rocket = Rocket([lower, upper], problem.payload)
        try:
            rocket.validate_twr(constraints.min_stage_twr, require_liftoff=True)
        except TwrViolation as e:
            raise Infeasible(str(e)) from e

        achieved = rocket.total_delta_v()
        if achieved.mps < target.mps - self.tolerance_mps:
            raise Infeasible(
                f"achieved {achieved.mps:.1f} m/s is short of the {target.mps:.1f} m/s target")
        return rocket, upper_evals + lower_evals

    def _size_stage(self, engine: Engine, ratio: Ratio, mass_above: Mass, structural_ratio: float,
                    min_twr: float, max_engines: int, sea_level: bool) -> Tuple[Stage, int]:
        """Solve one stage's propellant in closed form, adding engines until it clears ``min_twr``.

        Returns:
            tuple: (stage, number of engine counts tried)
        """
        r = ratio.value
        if r <= 1.0:
            raise Infeasible(f"required mass ratio {r:.4f} must exceed 1")
        denominator = 1.0 + structural_ratio * (1.0 - r)
        if denominator <= 0.0:
            raise Infeasible(
                f"structural ratio {structural_ratio} is too high for mass ratio {r:.2f}")

        for count in range(1, max_engines + 1):
            fixed_mass = engine.dry_mass * count + mass_above
            propellant = fixed_mass * ((r - 1.0) / denominator)
            stage = Stage.with_structural_ratio(engine, count, propellant, structural_ratio)
            thrust = stage.thrust_sl() if sea_level else stage.thrust_vac()
            stage_twr = twr(thrust, stage.wet_mass() + mass_above, G0).value
            if stage_twr >= min_twr:
                self.logger.debug(
                    f"{count} engine(s): propellant {propellant.kg:.0f} kg, TWR {stage_twr:.2f}")
                return stage, count

        kind = "liftoff" if sea_level else "stage"
        raise Infeasible(
            f"{max_engines} x {engine.name} cannot reach the minimum {kind} TWR of {min_twr}")
