"""Engine performance records and propellant kinds."""
from dataclasses import dataclass, replace
from enum import Enum

from .units import Force, Isp, Mass


class Propellant(Enum):
    """Propellant combinations with display name, bulk density (kg/m^3) and aliases."""

    LOX_RP1 = ("LOX/RP-1", 1030.0, ("loxrp1", "rp1", "rp-1", "kerolox", "kerosene"))
    LOX_LH2 = ("LOX/LH2", 360.0, ("loxlh2", "lh2", "hydrolox", "hydrogen"))
    LOX_CH4 = ("LOX/CH4", 830.0, ("loxch4", "ch4", "methalox", "methane"))
    N2O4_UDMH = ("N2O4/UDMH", 1180.0, ("n2o4udmh", "udmh", "hypergolic"))
    SOLID = ("Solid", 1800.0, ("solid", "apcp"))

    def __init__(self, display_name, density, aliases):
        self.display_name = display_name
        self.density = density
        self.aliases = aliases

    def __str__(self):
        return self.display_name

    def matches(self, text: str) -> bool:
        """True if ``text`` names this propellant (case-insensitive)."""
        key = text.strip().lower()
        return key == self.display_name.lower() or key == self.name.lower() or key in self.aliases

    @classmethod
    def parse(cls, text: str) -> 'Propellant':
        for propellant in cls:
            if propellant.matches(text):
                return propellant
        raise ValueError(f"Unknown propellant: {text}")


@dataclass(frozen=True)
class Engine:
    """Immutable engine performance record.

    Engines with zero sea-level thrust or Isp are vacuum-only and cannot
    fire inside the atmosphere.
    """
    name: str
    thrust_sl: Force
    thrust_vac: Force
    isp_sl: Isp
    isp_vac: Isp
    dry_mass: Mass
    propellant: Propellant

    def is_upper_stage_only(self) -> bool:
        return self.thrust_sl.newtons == 0.0 or self.isp_sl.seconds == 0.0

    def thrust_to_mass(self) -> float:
        """Sea-level thrust per kilogram of engine, used to rank booster engines."""
        return self.thrust_sl.newtons / self.dry_mass.kg

    def isp_at(self, pressure_ratio: float) -> Isp:
        """Isp interpolated between vacuum (0.0) and sea level (1.0)."""
        p = min(max(pressure_ratio, 0.0), 1.0)
        return Isp(self.isp_vac.seconds + (self.isp_sl.seconds - self.isp_vac.seconds) * p)

    def thrust_at(self, pressure_ratio: float) -> Force:
        """Thrust interpolated between vacuum (0.0) and sea level (1.0)."""
        p = min(max(pressure_ratio, 0.0), 1.0)
        return Force(self.thrust_vac.newtons + (self.thrust_sl.newtons - self.thrust_vac.newtons) * p)

    def perturbed(self, thrust_factor_sl=1.0, thrust_factor_vac=1.0,
                  isp_factor_sl=1.0, isp_factor_vac=1.0) -> 'Engine':
        """Copy of this engine with thrust and Isp scaled by the given factors."""
        return replace(
            self,
            thrust_sl=self.thrust_sl * thrust_factor_sl,
            thrust_vac=self.thrust_vac * thrust_factor_vac,
            isp_sl=self.isp_sl * isp_factor_sl,
            isp_vac=self.isp_vac * isp_factor_vac,
        )

    @classmethod
    def from_dict(cls, data: dict) -> 'Engine':
        """Build an engine from a catalog record (kN, s, kg)."""
        return cls(
            name=data['name'],
            thrust_sl=Force.from_kilonewtons(float(data.get('thrust_sl_kn', 0.0))),
            thrust_vac=Force.from_kilonewtons(float(data['thrust_vac_kn'])),
            isp_sl=Isp(float(data.get('isp_sl_s', 0.0))),
            isp_vac=Isp(float(data['isp_vac_s'])),
            dry_mass=Mass(float(data['dry_mass_kg'])),
            propellant=Propellant.parse(data['propellant']),
        )
