"""Grid search over stage count, engine choice, engine count and propellant mass."""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ...engine import Engine
from ...physics import G0, ideal_delta_v
from ...stage import Rocket, Stage
from ...units import Mass
from ...utils.config import get_solver_config
from ..errors import Infeasible
from ..parallel_solver import ParallelSolver, reduce_best
from ..problem import Constraints, Problem
from .base_solver import BaseSolver

# Upper bound on the number of combinations broadcast in one numpy block
CHUNK_SIZE = 1_000_000


class _OptionTable:
    """Every (engine, engine count, propellant) choice for one stage position, as arrays."""

    def __init__(self, engines: Sequence[Engine], max_engines: int,
                 propellant_grids: Sequence[np.ndarray], structural_ratio: float):
        engine_idx, counts, propellant = [], [], []
        for index, grid in enumerate(propellant_grids):
            for count in range(1, max_engines + 1):
                engine_idx.append(np.full(len(grid), index))
                counts.append(np.full(len(grid), count))
                propellant.append(grid)

        self.engines = list(engines)
        self.structural_ratio = structural_ratio
        self.engine_idx = np.concatenate(engine_idx) if engine_idx else np.zeros(0, dtype=int)
        self.counts = np.concatenate(counts) if counts else np.zeros(0, dtype=int)
        self.propellant = np.concatenate(propellant) if propellant else np.zeros(0)

        engine_mass = np.array([e.dry_mass.kg for e in self.engines])[self.engine_idx] * self.counts
        self.dry = self.propellant * structural_ratio + engine_mass
        self.wet = self.dry + self.propellant
        self.thrust_sl = np.array([e.thrust_sl.newtons for e in self.engines])[self.engine_idx] * self.counts
        self.thrust_vac = np.array([e.thrust_vac.newtons for e in self.engines])[self.engine_idx] * self.counts
        self.isp_vac = np.array([e.isp_vac.seconds for e in self.engines])[self.engine_idx]

    def __len__(self):
        return len(self.propellant)

    def stage(self, option: int) -> Stage:
        return Stage.with_structural_ratio(
            self.engines[int(self.engine_idx[option])],
            int(self.counts[option]),
            Mass(float(self.propellant[option])),
            self.structural_ratio,
        )


@dataclass(frozen=True)
class _Candidate:
    """Best configuration found by one work item; ``picks`` is ordered bottom stage first."""
    total_mass: float
    picks: Tuple[int, ...]
    tables: Tuple[_OptionTable, ...]

    def to_rocket(self, payload: Mass) -> Rocket:
        return Rocket([table.stage(pick) for table, pick in zip(self.tables, self.picks)], payload)


@dataclass(frozen=True)
class _WorkItem:
    """One top-stage option (or, for single-stage rockets, the whole table)."""
    tables: Tuple[_OptionTable, ...]
    top_options: np.ndarray


class _SearchState:
    def __init__(self):
        self.best_mass = np.inf
        self.best_picks: Optional[Tuple[int, ...]] = None
        self.evaluated = 0


class BruteForceSolver(BaseSolver):
    """Two-phase grid search for the lightest feasible rocket.

    The coarse phase enumerates a log-spaced propellant grid for every
    candidate stage count using the top ranked engines per stage position
    (sea-level thrust/mass for the first stage, vacuum Isp above it). The
    refinement phase searches a finer linear grid within
    ``refine_fraction`` of the coarse winner's propellant loads, trying
    the winning engine and ``refine_alternatives`` others per stage.

    Rockets are assembled top-down so every partial stack can be pruned
    as soon as a stage misses its TWR limit or outweighs the best
    complete rocket found so far.
    """

    name = "BruteForce"

    def __init__(self, propellant_steps: int = 20, min_propellant_kg: float = 10_000.0,
                 max_propellant_kg: float = 5_000_000.0, top_engines: int = 3,
                 refine_fraction: float = 0.30, refine_steps: int = 15,
                 refine_alternatives: int = 2, max_workers: Optional[int] = None,
                 show_progress: bool = False, verbose: bool = True):
        super().__init__(verbose=verbose)
        if propellant_steps < 2:
            raise ValueError("propellant_steps must be at least 2")
        if not 0 < min_propellant_kg < max_propellant_kg:
            raise ValueError("propellant bounds must satisfy 0 < min < max")
        self.propellant_steps = propellant_steps
        self.min_propellant_kg = min_propellant_kg
        self.max_propellant_kg = max_propellant_kg
        self.top_engines = top_engines
        self.refine_fraction = refine_fraction
        self.refine_steps = refine_steps
        self.refine_alternatives = refine_alternatives
        self.parallel = ParallelSolver({'max_workers': max_workers, 'show_progress': show_progress})

    @classmethod
    def from_config(cls, config=None, verbose: bool = True) -> 'BruteForceSolver':
        settings = get_solver_config(config, "brute_force")
        return cls(
            propellant_steps=settings["propellant_steps"],
            min_propellant_kg=settings["min_propellant_kg"],
            max_propellant_kg=settings["max_propellant_kg"],
            top_engines=settings["top_engines"],
            refine_fraction=settings["refine_fraction"],
            refine_steps=settings["refine_steps"],
            refine_alternatives=settings["refine_alternatives"],
            max_workers=settings["max_workers"],
            show_progress=settings["show_progress"],
            verbose=verbose,
        )

    def propellant_grid(self) -> np.ndarray:
        return np.geomspace(self.min_propellant_kg, self.max_propellant_kg, self.propellant_steps)

    def rank_engines(self, engines: Sequence[Engine], stage_index: int) -> List[Engine]:
        """Engines ordered best-first for a stage position.

        The first stage needs sea-level thrust, so vacuum-only engines are
        excluded and the rest are ranked by thrust per kilogram. Upper
        stages are ranked by vacuum Isp.
        """
        if stage_index == 0:
            usable = [e for e in engines if not e.is_upper_stage_only()]
            return sorted(usable, key=lambda e: e.thrust_to_mass(), reverse=True)
        return sorted(engines, key=lambda e: e.isp_vac.seconds, reverse=True)

    def _solve(self, problem: Problem) -> Tuple[Rocket, int]:
        constraints = problem.constraints
        target = problem.target_delta_v.mps
        grid = self.propellant_grid()

        self.log_info(
            f"Coarse search: stage counts {list(problem.stage_counts())}, "
            f"{len(problem.engines)} engine type(s), {len(grid)} propellant steps")

        items = []
        for n_stages in problem.stage_counts():
            tables = []
            for position in range(n_stages):
                ranked = self.rank_engines(problem.engines, position)[:self.top_engines]
                tables.append(_OptionTable(ranked, constraints.max_engines_per_stage,
                                           [grid] * len(ranked), constraints.structural_ratio))
            items.extend(self._work_items(tuple(tables)))

        coarse, evaluated = self._run(items, problem.payload.kg, target, constraints, "coarse configurations")
        if coarse is None:
            raise Infeasible(
                f"no configuration of up to {max(problem.stage_counts())} stages reaches "
                f"{target:.0f} m/s with {problem.payload.kg:.0f} kg payload")
        self.logger.debug(f"Coarse winner: {len(coarse.picks)} stages, {coarse.total_mass:.0f} kg")

        refine_items = self._work_items(self._refinement_tables(coarse, problem))
        refined, refine_evaluated = self._run(
            refine_items, problem.payload.kg, target, constraints, "refinement configurations")
        evaluated += refine_evaluated

        best = coarse
        if refined is not None and refined.total_mass < coarse.total_mass:
            self.logger.debug(
                f"Refinement improved total mass {coarse.total_mass:.0f} -> {refined.total_mass:.0f} kg")
            best = refined
        return best.to_rocket(problem.payload), evaluated

    def _refinement_tables(self, coarse: _Candidate, problem: Problem) -> Tuple[_OptionTable, ...]:
        constraints = problem.constraints
        tables = []
        for position, (table, pick) in enumerate(zip(coarse.tables, coarse.picks)):
            winner = table.engines[int(table.engine_idx[pick])]
            alternatives = [e for e in self.rank_engines(problem.engines, position) if e is not winner]
            engines = [winner] + alternatives[:self.refine_alternatives]
            propellant = float(table.propellant[pick])
            fine_grid = np.linspace(propellant * (1.0 - self.refine_fraction),
                                    propellant * (1.0 + self.refine_fraction), self.refine_steps)
            tables.append(_OptionTable(engines, constraints.max_engines_per_stage,
                                       [fine_grid] * len(engines), constraints.structural_ratio))
        return tuple(tables)

    @staticmethod
    def _work_items(tables: Tuple[_OptionTable, ...]) -> List[_WorkItem]:
        top = tables[-1]
        if len(tables) == 1:
            return [_WorkItem(tables, np.arange(len(top)))]
        return [_WorkItem(tables, np.array([option])) for option in range(len(top))]

    def _run(self, items: List[_WorkItem], payload: float, target: float,
             constraints: Constraints, label: str) -> Tuple[Optional[_Candidate], int]:
        results = self.parallel.map(
            lambda item: self._evaluate(item, payload, target, constraints), items, label)
        evaluated = sum(count for _, count in results)
        best = reduce_best((candidate for candidate, _ in results), key=lambda c: c.total_mass)
        return best, evaluated

    def _evaluate(self, item: _WorkItem, payload: float, target: float,
                  constraints: Constraints) -> Tuple[Optional[_Candidate], int]:
        """Search every stack below ``item``'s top-stage options; returns the local best."""
        state = _SearchState()
        tables = item.tables
        top_level = len(tables) - 1
        # A single partial rocket to start from: the bare payload
        above = np.array([payload])
        dv = np.zeros(1)
        picks = np.zeros((1, 0), dtype=int)
        self._descend(tables, top_level, above, dv, picks, item.top_options,
                      target, constraints, state)
        if state.best_picks is None:
            return None, state.evaluated
        return _Candidate(float(state.best_mass), state.best_picks, tables), state.evaluated

    def _descend(self, tables, level, above, dv, picks, options, target, constraints, state):
        """Stack stage ``level`` under every partial rocket in (above, dv, picks).

        ``options`` restricts the choices considered at this level; None
        means the whole table. Arrays hold one row per partial rocket.
        """
        table = tables[level]
        if options is None:
            options = np.arange(len(table))
        if len(above) == 0 or len(options) == 0:
            return

        wet = table.wet[options]
        dry = table.dry[options]
        isp = table.isp_vac[options]
        if level == 0:
            thrust, min_twr = table.thrust_sl[options], constraints.min_liftoff_twr
        else:
            thrust, min_twr = table.thrust_vac[options], constraints.min_stage_twr

        rows_per_chunk = max(1, CHUNK_SIZE // len(options))
        for start in range(0, len(above), rows_per_chunk):
            stop = start + rows_per_chunk
            mass_above = above[start:stop, None]
            stack = mass_above + wet[None, :]
            state.evaluated += stack.size

            feasible = thrust[None, :] / (stack * G0) >= min_twr
            feasible &= stack < state.best_mass
            stage_dv = ideal_delta_v(isp[None, :], stack / (mass_above + dry[None, :]))
            total_dv = dv[start:stop, None] + stage_dv

            if level == 0:
                feasible &= total_dv >= target
                if not feasible.any():
                    continue
                masked = np.where(feasible, stack, np.inf)
                flat = int(np.argmin(masked))
                row, col = divmod(flat, len(options))
                if masked[row, col] < state.best_mass:
                    state.best_mass = float(masked[row, col])
                    state.best_picks = (int(options[col]),) + tuple(
                        int(p) for p in reversed(picks[start + row]))
                continue

            rows, cols = np.nonzero(feasible)
            if len(rows) == 0:
                continue
            next_picks = np.column_stack([picks[start:stop][rows], options[cols]])
            self._descend(tables, level - 1, stack[rows, cols], total_dv[rows, cols],
                          next_picks, None, target, constraints, state)
