"""Test suite for the physics kernel and unit types."""
import math
import unittest

import numpy as np

from stage_sizer.physics import (
    G0,
    burn_time,
    delta_v,
    drag_loss,
    estimate_losses,
    gravity_loss,
    ideal_delta_v,
    leo_delta_v_requirement,
    required_mass_ratio,
    steering_loss,
    twr,
)
from stage_sizer.units import Force, Isp, Mass, Ratio, Time, Velocity


class TestUnits(unittest.TestCase):
    """Test cases for quantity wrappers."""

    def test_same_kind_arithmetic(self):
        total = Mass(1000) + Mass(500)
        self.assertEqual(total, Mass(1500))
        self.assertEqual(Mass(1000) - Mass(250), Mass(750))
        self.assertEqual(Velocity(100) * 3, Velocity(300))
        self.assertEqual(2 * Force(10), Force(20))

    def test_mass_division_gives_ratio(self):
        ratio = Mass(300) / Mass(100)
        self.assertIsInstance(ratio, Ratio)
        self.assertAlmostEqual(ratio.value, 3.0)
        self.assertIsInstance(Mass(300) / 3, Mass)

    def test_mixed_kinds_rejected(self):
        with self.assertRaises(TypeError):
            Mass(1) + Velocity(1)
        with self.assertRaises(TypeError):
            Mass(1) < Time(2)
        self.assertNotEqual(Mass(1), Velocity(1))

    def test_conversions(self):
        self.assertAlmostEqual(Mass.from_tonnes(2.5).kg, 2500.0)
        self.assertAlmostEqual(Velocity.from_kmps(7.8).mps, 7800.0)
        self.assertAlmostEqual(Force.from_kilonewtons(845).newtons, 845000.0)
        self.assertAlmostEqual(Time(120).minutes, 2.0)
        self.assertTrue(Mass(1) < Mass(2))


class TestRocketEquation(unittest.TestCase):
    """Test cases for the rocket equation and its inverse."""

    def setUp(self):
        self.rng = np.random.default_rng(42)

    def test_unit_mass_ratio_gives_zero(self):
        for isp in (1.0, 250.0, 311.0, 452.0):
            self.assertEqual(delta_v(Isp(isp), Ratio(1.0)).mps, 0.0)

    def test_increasing_in_mass_ratio(self):
        ratios = np.linspace(1.0, 25.0, 200)
        values = [delta_v(Isp(300), Ratio(r)).mps for r in ratios]
        self.assertTrue(np.all(np.diff(values) > 0))

    def test_increasing_in_isp(self):
        isps = np.linspace(100.0, 470.0, 200)
        values = [delta_v(Isp(isp), Ratio(4.0)).mps for isp in isps]
        self.assertTrue(np.all(np.diff(values) > 0))

    def test_known_value(self):
        # 300 s at mass ratio e: exhaust velocity exactly
        self.assertAlmostEqual(delta_v(Isp(300), Ratio(math.e)).mps, 300 * G0, places=6)

    def test_round_trip(self):
        for _ in range(500):
            isp = Isp(self.rng.uniform(150.0, 470.0))
            ratio = self.rng.uniform(1.001, 30.0)
            dv = delta_v(isp, Ratio(ratio))
            recovered = required_mass_ratio(dv, isp).value
            self.assertLess(abs(recovered - ratio) / ratio, 1e-4)

    def test_zero_delta_v_ratio(self):
        self.assertEqual(required_mass_ratio(Velocity(0), Isp(350)).value, 1.0)

    def test_vectorised_form(self):
        isp = np.array([300.0, 350.0])
        ratio = np.array([1.0, 3.0])
        result = ideal_delta_v(isp, ratio)
        self.assertEqual(result[0], 0.0)
        self.assertAlmostEqual(result[1], 350.0 * G0 * math.log(3.0))

    def test_falcon9_first_stage(self):
        """Falcon 9 first stage alone lands in the expected delta-v range."""
        ratio = Mass(411000 + 22200) / Mass(22200)
        dv = delta_v(Isp(297), ratio).mps
        self.assertGreater(dv, 8000)
        self.assertLess(dv, 9500)

    def test_saturn_v_first_stage(self):
        ratio = Mass(2149500 + 130000) / Mass(130000)
        dv = delta_v(Isp(280), ratio).mps
        self.assertGreater(dv, 7500)
        self.assertLess(dv, 8500)


class TestThrustAndBurn(unittest.TestCase):

    def test_twr(self):
        self.assertAlmostEqual(twr(Force(G0 * 1000), Mass(1000)).value, 1.0)
        self.assertAlmostEqual(twr(Force(3000), Mass(100), gravity=10.0).value, 3.0)

    def test_burn_time(self):
        # 10 kg/s mass flow
        result = burn_time(Mass(1000), Force(100 * G0 * 10), Isp(100))
        self.assertAlmostEqual(result.seconds, 100.0)

    def test_burn_time_without_thrust(self):
        self.assertTrue(math.isinf(burn_time(Mass(1000), Force(0), Isp(300)).seconds))


class TestLosses(unittest.TestCase):
    """Test cases for the empirical loss model."""

    def test_drag_loss_clamps_twr(self):
        self.assertAlmostEqual(drag_loss(Ratio(1.0)).mps, 225.0)
        self.assertAlmostEqual(drag_loss(Ratio(0.5)).mps, 225.0)
        self.assertAlmostEqual(drag_loss(Ratio(20.0)).mps, 157.5)

    def test_gravity_loss(self):
        self.assertAlmostEqual(gravity_loss(Time(100), Ratio(4.0)).mps, G0 * 100 * 0.85 / 2.0)

    def test_total_is_sum(self):
        losses = estimate_losses(Time(150), Ratio(1.4))
        expected = losses.gravity.mps + losses.drag.mps + losses.steering.mps
        self.assertAlmostEqual(losses.total.mps, expected)
        self.assertEqual(steering_loss(), Velocity(100))

    def test_leo_requirement(self):
        losses = estimate_losses(Time(160), Ratio(1.3))
        requirement = leo_delta_v_requirement(Time(160), Ratio(1.3))
        self.assertAlmostEqual(requirement.mps, 7800 + losses.total.mps + 150)


if __name__ == '__main__':
    unittest.main()
