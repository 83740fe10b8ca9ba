"""Optimization problem definition and constraint validation."""
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Tuple

from ..engine import Engine
from ..units import Mass, Velocity


class ProblemError(ValueError):
    """Base class for malformed problems and constraints."""


class InvalidPayload(ProblemError):
    pass


class InvalidDeltaV(ProblemError):
    pass


class NoEngines(ProblemError):
    pass


class InvalidStageCount(ProblemError):
    pass


class ConstraintError(ProblemError):
    pass


class InvalidLiftoffTwr(ConstraintError):
    pass


class InvalidStageTwr(ConstraintError):
    pass


class ZeroStages(ConstraintError):
    pass


class InvalidStructuralRatio(ConstraintError):
    pass


class InvalidEngineLimit(ConstraintError):
    pass


@dataclass(frozen=True)
class Constraints:
    """Feasibility limits applied to every candidate rocket."""
    min_liftoff_twr: float = 1.2
    min_stage_twr: float = 0.5
    max_stages: int = 3
    structural_ratio: float = 0.08
    max_engines_per_stage: int = 9

    def validate(self) -> None:
        if self.min_liftoff_twr < 1.0:
            raise InvalidLiftoffTwr(
                f"Minimum liftoff TWR must be at least 1.0, got {self.min_liftoff_twr}")
        if self.min_stage_twr <= 0.0:
            raise InvalidStageTwr(
                f"Minimum stage TWR must be positive, got {self.min_stage_twr}")
        if self.max_stages < 1:
            raise ZeroStages("Maximum stage count must be at least 1")
        if not 0.0 < self.structural_ratio < 1.0:
            raise InvalidStructuralRatio(
                f"Structural ratio must be between 0 and 1, got {self.structural_ratio}")
        if self.max_engines_per_stage < 1:
            raise InvalidEngineLimit(
                f"Maximum engines per stage must be at least 1, got {self.max_engines_per_stage}")

    def with_structural_ratio(self, structural_ratio: float) -> 'Constraints':
        return replace(self, structural_ratio=structural_ratio)

    @classmethod
    def from_dict(cls, data: dict) -> 'Constraints':
        known = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        return cls(**known)


@dataclass(frozen=True)
class Problem:
    """An optimization request: deliver ``payload`` to ``target_delta_v``.

    Args:
        payload: Payload mass
        target_delta_v: Required total delta-v
        engines: Candidate engines
        constraints: Feasibility limits
        stage_count: Fixed stage count, or None to search 1..max_stages
    """
    payload: Mass
    target_delta_v: Velocity
    engines: Tuple[Engine, ...]
    constraints: Constraints = field(default_factory=Constraints)
    stage_count: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'engines', tuple(self.engines))

    def validate(self) -> None:
        """Raise the first validation error found, if any."""
        if self.payload.kg <= 0:
            raise InvalidPayload(f"Payload must be positive, got {self.payload.kg} kg")
        if self.target_delta_v.mps <= 0:
            raise InvalidDeltaV(f"Target delta-v must be positive, got {self.target_delta_v.mps} m/s")
        if not self.engines:
            raise NoEngines("At least one candidate engine is required")
        if self.stage_count is not None and not 1 <= self.stage_count <= self.constraints.max_stages:
            raise InvalidStageCount(
                f"Stage count must be between 1 and {self.constraints.max_stages}, got {self.stage_count}")
        self.constraints.validate()

    def is_valid(self) -> Optional[ProblemError]:
        """Return the first validation error, or None for a valid problem."""
        try:
            self.validate()
        except ProblemError as e:
            return e
        return None

    def is_single_engine(self) -> bool:
        return len(self.engines) == 1

    def single_engine(self) -> Optional[Engine]:
        return self.engines[0] if self.is_single_engine() else None

    def stage_counts(self) -> range:
        """Stage counts the search should consider."""
        if self.stage_count is not None:
            return range(self.stage_count, self.stage_count + 1)
        return range(1, self.constraints.max_stages + 1)

    def with_engines(self, engines: Sequence[Engine]) -> 'Problem':
        return replace(self, engines=tuple(engines))

    def with_constraints(self, constraints: Constraints) -> 'Problem':
        return replace(self, constraints=constraints)
