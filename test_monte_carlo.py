"""Test suite for Monte Carlo uncertainty propagation."""
import unittest

from stage_sizer.optimization import (
    InvalidProblem,
    MonteCarloResults,
    MonteCarloRunner,
    Problem,
    Uncertainty,
)
from stage_sizer.optimization.monte_carlo import DistributionSummary, nearest_rank_percentile
from stage_sizer.optimization.selection import optimize
from stage_sizer.units import Mass, Velocity
from stage_sizer.utils.data import EngineDatabase


class TestStatistics(unittest.TestCase):
    """Test cases for derived statistics."""

    def setUp(self):
        db = EngineDatabase.load_embedded()
        problem = Problem(Mass(5000), Velocity(9000), [db.get("Raptor-2")], stage_count=2)
        self.nominal = optimize(problem, verbose=False)

    def make_results(self, samples, target=9000.0):
        return MonteCarloResults(
            delta_v_samples=list(samples),
            mass_samples=[1000.0 * (i + 1) for i in range(len(samples))],
            successes=sum(1 for s in samples if s >= target),
            failures=0,
            total_runs=len(samples),
            target_delta_v=Velocity(target),
            runtime=0.0,
            nominal=self.nominal,
        )

    def test_nearest_rank(self):
        samples = [10.0, 1.0, 9.0, 2.0, 8.0, 3.0, 7.0, 4.0, 6.0, 5.0]
        self.assertEqual(nearest_rank_percentile(samples, 0), 1.0)
        self.assertEqual(nearest_rank_percentile(samples, 100), 10.0)
        # 0.5 * 9 = 4.5 rounds up to index 5
        self.assertEqual(nearest_rank_percentile(samples, 50), 6.0)
        # 0.05 * 9 = 0.45 rounds down to index 0
        self.assertEqual(nearest_rank_percentile(samples, 5), 1.0)
        self.assertEqual(nearest_rank_percentile(samples, 95), 10.0)
        self.assertEqual(nearest_rank_percentile([], 50), 0.0)

    def test_mean_and_std(self):
        results = self.make_results([8800.0, 9000.0, 9200.0])
        self.assertAlmostEqual(results.mean_delta_v(), 9000.0)
        self.assertAlmostEqual(results.std_delta_v(), 200.0)
        self.assertAlmostEqual(results.mean_mass(), 2000.0)
        self.assertAlmostEqual(results.std_mass(), 1000.0)

    def test_single_sample_std(self):
        results = self.make_results([9100.0])
        self.assertEqual(results.std_delta_v(), 0.0)
        self.assertEqual(results.std_mass(), 0.0)

    def test_success_probability(self):
        results = self.make_results([8900.0, 9000.0, 9100.0, 9200.0])
        self.assertAlmostEqual(results.success_probability(), 0.75)

    def test_required_margin(self):
        samples = [8700.0 + 50.0 * i for i in range(21)]  # 8700 .. 9700
        results = self.make_results(samples)
        # 5th percentile: round(0.05 * 20) = index 1 -> 8750
        self.assertAlmostEqual(results.required_margin(0.95), 250.0)
        # Everything above target needs no margin
        comfortable = self.make_results([9500.0, 9600.0, 9700.0])
        self.assertEqual(comfortable.required_margin(0.95), 0.0)

    def test_required_margin_without_samples(self):
        # Every sample failed
        results = MonteCarloResults([], [], 0, 10, 10, Velocity(9000), 0.0, self.nominal)
        self.assertEqual(results.required_margin(0.95), 0.0)
        self.assertEqual(results.success_probability(), 0.0)

    def test_summary(self):
        results = self.make_results([8800.0, 9000.0, 9200.0])
        summary = results.delta_v_summary()
        self.assertIsInstance(summary, DistributionSummary)
        self.assertAlmostEqual(summary.mean, 9000.0)
        self.assertEqual(summary.min, 8800.0)
        self.assertEqual(summary.max, 9200.0)
        self.assertEqual(summary.p50, 9000.0)
        self.assertEqual(DistributionSummary.from_samples([]).mean, 0.0)


class TestMonteCarloRunner(unittest.TestCase):
    """Test cases for repeated perturbed solves."""

    def setUp(self):
        db = EngineDatabase.load_embedded()
        self.raptor = db.get("Raptor-2")
        self.merlin = db.get("Merlin-1D")
        self.problem = Problem(Mass(5000), Velocity(9000), [self.raptor], stage_count=2)

    def test_no_uncertainty_single_sample(self):
        results = MonteCarloRunner(Uncertainty.none(), iterations=250, max_workers=2).run(self.problem)
        self.assertEqual(results.total_runs, 1)
        self.assertEqual(len(results.delta_v_samples), 1)
        self.assertEqual(results.success_probability(), 1.0)
        self.assertAlmostEqual(results.delta_v_samples[0], results.nominal.delta_v().mps)

    def test_default_uncertainty(self):
        print("\nTesting Monte Carlo with default uncertainty...")
        results = MonteCarloRunner(Uncertainty.default(), iterations=40, seed=11, max_workers=4).run(self.problem)
        self.assertEqual(results.total_runs, 40)
        self.assertEqual(results.nominal.optimizer_name, "Analytical")
        self.assertLessEqual(results.successes + results.failures, 40)
        self.assertEqual(len(results.delta_v_samples), 40 - results.failures)
        self.assertGreater(results.success_probability(), 0.5)
        self.assertGreater(results.std_mass(), 0.0)
        self.assertGreaterEqual(results.percentile(95), results.percentile(5))

    def test_seeded_runs_repeat(self):
        first = MonteCarloRunner(Uncertainty.high(), iterations=25, seed=2024, max_workers=4).run(self.problem)
        second = MonteCarloRunner(Uncertainty.high(), iterations=25, seed=2024, max_workers=1).run(self.problem)
        self.assertEqual(first.delta_v_samples, second.delta_v_samples)
        self.assertEqual(first.mass_samples, second.mass_samples)
        self.assertEqual(first.successes, second.successes)

    def test_failures_do_not_abort(self):
        # Barely feasible nominally; large structural scatter makes many samples infeasible
        problem = Problem(Mass(5000), Velocity(12000), [self.raptor], stage_count=2)
        runner = MonteCarloRunner(Uncertainty(0.0, 0.0, 100.0), iterations=30, seed=5, max_workers=2)
        results = runner.run(problem)
        self.assertEqual(results.total_runs, 30)
        self.assertGreater(results.failures, 0)
        self.assertLess(results.success_probability(), 1.0)

    def test_brute_force_samples(self):
        problem = Problem(Mass(5000), Velocity(9000), [self.raptor, self.merlin], stage_count=2)
        config = {"optimization": {"brute_force": {
            "propellant_steps": 8, "min_propellant_kg": 10_000.0, "max_propellant_kg": 1_000_000.0,
            "refine_steps": 3}}}
        results = MonteCarloRunner(Uncertainty.low(), iterations=4, seed=3, max_workers=2,
                                   config=config).run(problem)
        self.assertEqual(results.nominal.optimizer_name, "BruteForce")
        self.assertEqual(results.total_runs, 4)

    def test_invalid_problem(self):
        problem = Problem(Mass(5000), Velocity(9000), [])
        with self.assertRaises(InvalidProblem):
            MonteCarloRunner(Uncertainty.default(), iterations=10).run(problem)

    def test_iterations_must_be_positive(self):
        with self.assertRaises(ValueError):
            MonteCarloRunner(Uncertainty.default(), iterations=0)

    def test_from_config(self):
        config = {"optimization": {"monte_carlo": {"iterations": 12, "seed": 8}}}
        runner = MonteCarloRunner.from_config(Uncertainty.low(), config)
        self.assertEqual(runner.iterations, 12)
        self.assertEqual(runner.seed, 8)
        self.assertEqual(runner.sample_config["optimization"]["brute_force"]["max_workers"], 1)


if __name__ == '__main__':
    unittest.main()
