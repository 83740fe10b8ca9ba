"""Test suite for the grid-search solver."""
import unittest

from stage_sizer.optimization import (
    BruteForceSolver,
    Constraints,
    Infeasible,
    InvalidProblem,
    OptimizerKind,
    Problem,
)
from stage_sizer.units import Mass, Velocity
from stage_sizer.utils.data import EngineDatabase


def small_solver(**kwargs):
    """Coarse grid small enough for unit tests."""
    settings = dict(propellant_steps=10, min_propellant_kg=10_000.0, max_propellant_kg=1_000_000.0,
                    refine_steps=5, max_workers=2)
    settings.update(kwargs)
    return BruteForceSolver(**settings)


class TestBruteForceSolver(unittest.TestCase):
    """Test cases for the coarse-to-fine grid search."""

    def setUp(self):
        db = EngineDatabase.load_embedded()
        self.raptor = db.get("Raptor-2")
        self.merlin = db.get("Merlin-1D")
        self.raptor_vac = db.get("Raptor-Vacuum")
        self.rl10 = db.get("RL-10C")
        self.problem = Problem(
            payload=Mass(5000),
            target_delta_v=Velocity(9000),
            engines=[self.raptor, self.merlin],
        )

    def assert_feasible(self, solution, problem):
        rocket = solution.rocket
        constraints = problem.constraints
        self.assertGreaterEqual(rocket.total_delta_v().mps, problem.target_delta_v.mps)
        self.assertGreaterEqual(solution.margin.mps, 0.0)
        self.assertGreaterEqual(rocket.liftoff_twr().value, constraints.min_liftoff_twr)
        for index in range(1, rocket.stage_count()):
            self.assertGreaterEqual(rocket.stage_twr(index).value, constraints.min_stage_twr)
        for stage in rocket.stages:
            self.assertLessEqual(stage.engine_count, constraints.max_engines_per_stage)

    def test_two_engine_types(self):
        print("\nTesting brute force search over 1-3 stages...")
        solution = small_solver().optimize(self.problem)
        self.assertEqual(solution.optimizer_name, "BruteForce")
        self.assertIn(solution.stage_count(), range(1, self.problem.constraints.max_stages + 1))
        self.assertGreater(solution.iterations, 0)
        self.assert_feasible(solution, self.problem)

    def test_fixed_stage_count(self):
        problem = Problem(Mass(5000), Velocity(9000), [self.raptor, self.merlin], stage_count=2)
        solution = small_solver().optimize(problem)
        self.assertEqual(solution.stage_count(), 2)
        self.assert_feasible(solution, problem)

    def test_single_engine_general_case(self):
        problem = Problem(Mass(5000), Velocity(9000), [self.raptor], stage_count=3)
        solution = small_solver().optimize(problem)
        self.assertEqual(solution.stage_count(), 3)
        self.assert_feasible(solution, problem)

    def test_vacuum_engine_kept_off_first_stage(self):
        problem = Problem(Mass(5000), Velocity(9000), [self.raptor, self.raptor_vac], stage_count=2)
        rocket = small_solver().optimize(problem).rocket
        self.assertFalse(rocket.stages[0].engine.is_upper_stage_only())
        self.assert_feasible(small_solver().optimize(problem), problem)

    def test_only_vacuum_engines(self):
        problem = Problem(Mass(1000), Velocity(5000), [self.rl10, self.raptor_vac])
        with self.assertRaises(Infeasible):
            small_solver().optimize(problem)

    def test_impossible_target(self):
        problem = Problem(Mass(100000), Velocity(50000), [self.merlin])
        with self.assertRaises(Infeasible):
            small_solver().optimize(problem)

    def test_invalid_problem(self):
        problem = Problem(Mass(5000), Velocity(-1), [self.raptor])
        with self.assertRaises(InvalidProblem):
            small_solver().optimize(problem)

    def test_result_independent_of_worker_count(self):
        serial = small_solver(max_workers=1).optimize(self.problem)
        parallel = small_solver(max_workers=4).optimize(self.problem)
        self.assertAlmostEqual(serial.total_mass().kg, parallel.total_mass().kg)
        self.assertEqual(serial.stage_count(), parallel.stage_count())
        self.assertEqual(serial.iterations, parallel.iterations)

    def test_refinement_never_worse(self):
        coarse_only = small_solver(refine_steps=2, refine_fraction=0.0).optimize(self.problem)
        refined = small_solver(refine_steps=9).optimize(self.problem)
        self.assertLessEqual(refined.total_mass().kg, coarse_only.total_mass().kg + 1e-6)

    def test_tighter_liftoff_twr(self):
        problem = Problem(Mass(5000), Velocity(9000), [self.raptor, self.merlin],
                          constraints=Constraints(min_liftoff_twr=1.8))
        solution = small_solver().optimize(problem)
        self.assertGreaterEqual(solution.rocket.liftoff_twr().value, 1.8)

    def test_rank_engines(self):
        solver = small_solver()
        engines = [self.rl10, self.merlin, self.raptor, self.raptor_vac]
        first = solver.rank_engines(engines, 0)
        self.assertNotIn(self.rl10, first)
        self.assertNotIn(self.raptor_vac, first)
        self.assertEqual(first[0], self.merlin)
        upper = solver.rank_engines(engines, 1)
        self.assertEqual(upper[0], self.rl10)
        self.assertEqual(len(upper), 4)

    def test_propellant_grid_is_log_spaced(self):
        grid = small_solver(propellant_steps=3, min_propellant_kg=1_000.0,
                            max_propellant_kg=100_000.0).propellant_grid()
        self.assertAlmostEqual(grid[0], 1_000.0)
        self.assertAlmostEqual(grid[1], 10_000.0)
        self.assertAlmostEqual(grid[2], 100_000.0)

    def test_invalid_grid(self):
        with self.assertRaises(ValueError):
            BruteForceSolver(propellant_steps=1)
        with self.assertRaises(ValueError):
            BruteForceSolver(min_propellant_kg=100.0, max_propellant_kg=10.0)

    def test_from_config(self):
        config = {"optimization": {"brute_force": {"propellant_steps": 6, "max_workers": 1}}}
        solver = BruteForceSolver.from_config(config)
        self.assertEqual(solver.propellant_steps, 6)
        self.assertEqual(solver.parallel.max_workers, 1)
        self.assertEqual(solver.top_engines, 3)

    def test_selected_for_general_problems(self):
        self.assertIs(OptimizerKind.select(self.problem), OptimizerKind.BRUTE_FORCE)
        single_three = Problem(Mass(5000), Velocity(9000), [self.raptor], stage_count=3)
        self.assertIs(OptimizerKind.select(single_three), OptimizerKind.BRUTE_FORCE)
        self.assertIs(OptimizerKind.parse("brute-force"), OptimizerKind.BRUTE_FORCE)
        with self.assertRaises(ValueError):
            OptimizerKind.parse("simplex")


if __name__ == '__main__':
    unittest.main()
