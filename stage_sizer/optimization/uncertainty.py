"""Parameter uncertainty and random perturbation of engines and structure."""
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..engine import Engine
from ..units import Force, Isp

STRUCTURAL_RATIO_MIN = 0.01
STRUCTURAL_RATIO_MAX = 0.5


@dataclass(frozen=True)
class Uncertainty:
    """1-sigma uncertainties in percent; zero means deterministic."""
    isp_percent: float = 1.0
    thrust_percent: float = 2.0
    structural_percent: float = 5.0

    def __post_init__(self):
        if min(self.isp_percent, self.thrust_percent, self.structural_percent) < 0:
            raise ValueError("Uncertainty percentages must be non-negative")

    @classmethod
    def none(cls) -> 'Uncertainty':
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def default(cls) -> 'Uncertainty':
        return cls()

    @classmethod
    def low(cls) -> 'Uncertainty':
        return cls(isp_percent=0.5, thrust_percent=1.0, structural_percent=3.0)

    @classmethod
    def high(cls) -> 'Uncertainty':
        return cls(isp_percent=2.0, thrust_percent=3.0, structural_percent=8.0)

    @classmethod
    def from_level(cls, level: str) -> 'Uncertainty':
        """Named preset: none, low, default (or medium) or high."""
        presets = {
            'none': cls.none,
            'low': cls.low,
            'default': cls.default,
            'medium': cls.default,
            'high': cls.high,
        }
        try:
            return presets[level.strip().lower()]()
        except KeyError:
            raise ValueError(f"Unknown uncertainty level: {level}") from None

    def is_zero(self) -> bool:
        return self.isp_percent == 0 and self.thrust_percent == 0 and self.structural_percent == 0


class ParameterSampler:
    """Draws perturbed parameters from ``Uncertainty``.

    Each parameter is scaled by an independent factor drawn from
    N(1, percent/100). A zero percentage returns the nominal value
    without touching the random generator.
    """

    def __init__(self, uncertainty: Uncertainty, rng: Optional[np.random.Generator] = None):
        self.uncertainty = uncertainty
        self.rng = rng if rng is not None else np.random.default_rng()

    def factor(self, percent: float) -> float:
        if percent == 0:
            return 1.0
        return float(self.rng.normal(1.0, percent / 100.0))

    def sample_isp(self, isp: Isp) -> Isp:
        return isp * self.factor(self.uncertainty.isp_percent)

    def sample_thrust(self, thrust: Force) -> Force:
        return thrust * self.factor(self.uncertainty.thrust_percent)

    def sample_structural_ratio(self, structural_ratio: float) -> float:
        """Perturbed structural ratio, clamped to [0.01, 0.5]."""
        if self.uncertainty.structural_percent == 0:
            return structural_ratio
        sampled = structural_ratio * self.factor(self.uncertainty.structural_percent)
        return min(max(sampled, STRUCTURAL_RATIO_MIN), STRUCTURAL_RATIO_MAX)

    def sample_engine(self, engine: Engine) -> Engine:
        """Copy of ``engine`` with independently perturbed thrust and Isp."""
        return engine.perturbed(
            thrust_factor_sl=self.factor(self.uncertainty.thrust_percent),
            thrust_factor_vac=self.factor(self.uncertainty.thrust_percent),
            isp_factor_sl=self.factor(self.uncertainty.isp_percent),
            isp_factor_vac=self.factor(self.uncertainty.isp_percent),
        )
