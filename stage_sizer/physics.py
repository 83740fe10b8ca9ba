"""Rocket physics kernel: rocket equation, thrust-to-weight, burn time and losses."""
import math
from dataclasses import dataclass

import numpy as np

from .units import Isp, Mass, Force, Ratio, Time, Velocity

# Standard gravity (m/s^2)
G0 = 9.80665

# Empirical loss model constants
GRAVITY_LOSS_FACTOR = 0.85
DRAG_LOSS_BASE = 150.0
STEERING_LOSS = 100.0
LEO_ORBITAL_VELOCITY = 7800.0
LEO_MARGIN = 150.0


def ideal_delta_v(isp_s, mass_ratio):
    """Tsiolkovsky rocket equation on raw floats or numpy arrays.

    Args:
        isp_s: Specific impulse in seconds
        mass_ratio: Wet mass divided by dry mass

    Returns:
        Delta-v in m/s, same shape as the inputs
    """
    return isp_s * G0 * np.log(mass_ratio)


def delta_v(isp: Isp, mass_ratio: Ratio) -> Velocity:
    """Delta-v achievable with the given specific impulse and mass ratio.

    A mass ratio of exactly 1 gives zero; ratios below 1 give a negative,
    physically meaningless result.
    """
    return Velocity(float(ideal_delta_v(isp.seconds, mass_ratio.value)))


def required_mass_ratio(dv: Velocity, isp: Isp) -> Ratio:
    """Inverse of the rocket equation: mass ratio needed for ``dv``."""
    return Ratio(math.exp(dv.mps / (isp.seconds * G0)))


def twr(thrust: Force, mass: Mass, gravity: float = G0) -> Ratio:
    """Thrust-to-weight ratio."""
    return Ratio(thrust.newtons / (mass.kg * gravity))


def mass_flow_rate(thrust: Force, isp: Isp) -> float:
    """Propellant mass flow in kg/s."""
    return thrust.newtons / (isp.seconds * G0)


def burn_time(propellant: Mass, thrust: Force, isp: Isp) -> Time:
    """Time to burn ``propellant`` at full thrust."""
    flow = mass_flow_rate(thrust, isp) if isp.seconds > 0 else 0.0
    if flow <= 0:
        return Time(math.inf)
    return Time(propellant.kg / flow)


def _clamped_twr(liftoff_twr: Ratio) -> float:
    return min(max(liftoff_twr.value, 1.0), 10.0)


def gravity_loss(burn: Time, liftoff_twr: Ratio) -> Velocity:
    """Empirical gravity loss; high-thrust vehicles spend less time fighting gravity."""
    return Velocity(G0 * burn.seconds * GRAVITY_LOSS_FACTOR / math.sqrt(_clamped_twr(liftoff_twr)))


def drag_loss(liftoff_twr: Ratio) -> Velocity:
    """Empirical atmospheric drag loss, higher for fast (high TWR) ascents."""
    return Velocity(DRAG_LOSS_BASE * (1.0 + 0.5 / _clamped_twr(liftoff_twr)))


def steering_loss() -> Velocity:
    return Velocity(STEERING_LOSS)


@dataclass(frozen=True)
class LossEstimate:
    """Breakdown of ascent losses."""
    gravity: Velocity
    drag: Velocity
    steering: Velocity

    @property
    def total(self) -> Velocity:
        return self.gravity + self.drag + self.steering


def estimate_losses(burn: Time, liftoff_twr: Ratio) -> LossEstimate:
    return LossEstimate(
        gravity=gravity_loss(burn, liftoff_twr),
        drag=drag_loss(liftoff_twr),
        steering=steering_loss(),
    )


def leo_delta_v_requirement(burn: Time, liftoff_twr: Ratio) -> Velocity:
    """Delta-v needed to reach low Earth orbit including losses and margin."""
    losses = estimate_losses(burn, liftoff_twr)
    return Velocity(LEO_ORBITAL_VELOCITY) + losses.total + Velocity(LEO_MARGIN)
