import unittest
from core.converters import equivalent_kw
from core.models import InputMode, LoadItem, LoadType, ProjectConfig
from standards.iec import IECCalculator, compute, row_active_power
from standards.iec_tables import EXAMPLE_LOADS


def motor(power_kw, cos_phi=0.8, **kwargs):
    return LoadItem(id="m", name="Motor", type=LoadType.MOTOR, power_kw=power_kw, cos_phi=cos_phi, **kwargs)


class TestSystemCalculation(unittest.TestCase):
    def test_single_motor_380v(self):
        # 5.5kW * 1.2 margin = 6.6kW
        # I = 6600 / (1.732 * 380 * 0.8) = 12.53 A -> 16A breaker
        # Cable target = 12.53 * 1.25 = 15.66 A -> 2.5mm2 (20A)
        config = ProjectConfig(system_voltage=380, margin_factor=1.2, cable_safety_factor=1.25)
        result = compute([motor(5.5, quantity=1, kx=1.0)], config)

        self.assertEqual(result.total_active_power, 5.5)
        self.assertAlmostEqual(result.total_apparent_power, 6.875, delta=0.01)
        self.assertEqual(result.main_current, 12.5)
        self.assertEqual(result.main_breaker, "3P - 16A")
        self.assertEqual(result.main_cable, "3×2.5mm² + 1×2.5mm²")

    def test_single_phase_220v_current_input(self):
        # P = 10A * 220V * 0.9 / 1000 = 1.98 kW (no root3 below 300V)
        # I = 1.98 * 1.2 * 1000 / (220 * 0.9) = 12.0 A
        load = LoadItem(id="1", name="Unknown", type=LoadType.OTHER, input_mode=InputMode.CURRENT,
                        rated_amps=10, quantity=1, kx=1.0, cos_phi=0.9)
        config = ProjectConfig(system_voltage=220, margin_factor=1.2)
        result = compute([load], config)

        self.assertEqual(result.total_active_power, 1.98)
        self.assertEqual(result.main_current, 12.0)
        self.assertEqual(result.main_breaker, "2P - 16A")
        self.assertEqual(result.main_cable, "2×2.5mm² + 1×2.5mm²")

        # Same load on a 380V board goes through the three phase formula
        result_380 = compute([load], ProjectConfig(system_voltage=380, margin_factor=1.2))
        self.assertNotEqual(result_380.main_current, result.main_current)

    def test_empty_board(self):
        result = compute([], ProjectConfig())
        self.assertEqual(result.total_active_power, 0)
        self.assertEqual(result.total_apparent_power, 0)
        self.assertEqual(result.main_current, 0)
        self.assertEqual(result.main_breaker, "3P - 6A")
        self.assertEqual(result.main_cable, "3×1.5mm² + 1×1.5mm²")
        self.assertEqual(result.dc24v.total_current, 0)

    def test_example_project(self):
        # Motor 5.5 + Heaters 2*6*0.8 = 9.6 + 10A@220V 1.98 + Servo 1.5*2*0.6 = 1.8 + HMI 0.2
        # Total = 19.08 kW
        # S = 6.875 + 9.6 + 2.2 + 2.0 + 0.222 = 20.897 kVA -> cos = 0.913
        # I = 19.08 * 1.2 * 1000 / (1.732 * 380 * 0.913) = 38.1 A
        loads = [LoadItem(**row) for row in EXAMPLE_LOADS]
        result = compute(loads, ProjectConfig())

        self.assertEqual(result.total_active_power, 19.08)
        self.assertAlmostEqual(result.total_apparent_power, 20.9, delta=0.01)
        self.assertEqual(result.main_current, 38.1)
        self.assertEqual(result.main_breaker, "3P - 40A")
        # 38.1 * 1.25 = 47.6 A -> 10mm2 (50A)
        self.assertEqual(result.main_cable, "3×10mm² + 1×10mm²")
        # 24V: 1.5*2 + 2.0 = 5.0 A * 1.3 = 6.5 A
        self.assertEqual(result.dc24v.recommended_current, 6.5)
        self.assertEqual(result.dc24v.description, "240W (10A) supply")

    def test_total_is_sum_of_rows(self):
        loads = [LoadItem(**row) for row in EXAMPLE_LOADS]
        result = compute(loads, ProjectConfig())
        expected = sum(row_active_power(item, 380) for item in loads)
        self.assertAlmostEqual(result.total_active_power, expected, delta=0.005)

    def test_row_power_formula(self):
        for row in EXAMPLE_LOADS:
            item = LoadItem(**row)
            for voltage in (220, 380):
                self.assertEqual(
                    row_active_power(item, voltage),
                    equivalent_kw(item, voltage) * item.quantity * item.kx,
                )

    def test_row_power_is_not_clamped(self):
        # Kx above 1 and zero quantity are not corrected here
        self.assertAlmostEqual(row_active_power(motor(10, kx=1.5), 380), 15.0)
        self.assertEqual(row_active_power(motor(10, quantity=0), 380), 0)

    def test_zero_power_factor_falls_back(self):
        # cos 0 is read as 0.8, so the result matches an explicit 0.8
        result_zero = compute([motor(5.5, cos_phi=0)], ProjectConfig())
        result_08 = compute([motor(5.5, cos_phi=0.8)], ProjectConfig())
        self.assertEqual(result_zero, result_08)

    def test_incomplete_rows_count_as_zero(self):
        blank = LoadItem(id="x", name="Blank", power_kw=None, quantity=None, kx="", cos_phi=None)
        result = compute([blank], ProjectConfig())
        self.assertEqual(result.total_active_power, 0)
        self.assertEqual(result.main_current, 0)

    def test_zero_system_voltage_does_not_raise(self):
        result = compute([motor(5.5)], ProjectConfig(system_voltage=0))
        self.assertEqual(result.main_current, 0)

    def test_totals_round_half_up(self):
        # 0.125 kW prints as 0.13, not the banker's 0.12
        lamp = LoadItem(id="1", name="Lamp", type=LoadType.OTHER, power_kw=0.125)
        result = compute([lamp], ProjectConfig())
        self.assertEqual(result.total_active_power, 0.13)

    def test_deterministic(self):
        loads = [LoadItem(**row) for row in EXAMPLE_LOADS]
        self.assertEqual(compute(loads, ProjectConfig()), compute(loads, ProjectConfig()))


class TestEquipmentSelection(unittest.TestCase):
    def setUp(self):
        self.calc = IECCalculator()

    def test_grounding_conductor(self):
        # S <= 16 -> S, 16 < S <= 35 -> 16, S > 35 -> S/2
        self.assertEqual(self.calc.calculate_grounding_conductor(16), 16)
        self.assertEqual(self.calc.calculate_grounding_conductor(16.01), 16)
        self.assertEqual(self.calc.calculate_grounding_conductor(35), 16)
        self.assertAlmostEqual(self.calc.calculate_grounding_conductor(35.01), 17.505)
        self.assertEqual(self.calc.calculate_grounding_conductor(2.5), 2.5)

    def test_breaker_monotonic(self):
        previous = 0
        current = 0.0
        while current <= 700:
            breaker = self.calc.select_main_breaker(current, 380)
            rating = breaker.rated_current if breaker.rated_current is not None else float("inf")
            self.assertGreaterEqual(rating, previous)
            previous = rating
            current += 0.5

    def test_breaker_exact_rating(self):
        self.assertEqual(self.calc.select_main_breaker(16, 380).rated_current, 16)
        self.assertEqual(self.calc.select_main_breaker(16.01, 380).rated_current, 20)

    def test_breaker_beyond_range(self):
        breaker = self.calc.select_main_breaker(700, 380)
        self.assertIsNone(breaker.rated_current)
        self.assertEqual(self.calc.breaker_label(breaker), "> 630A (custom required)")

    def test_breaker_poles(self):
        self.assertEqual(self.calc.breaker_label(self.calc.select_main_breaker(30, 220)), "2P - 32A")
        self.assertEqual(self.calc.breaker_label(self.calc.select_main_breaker(30, 380)), "3P - 32A")

    def test_cable_with_reduced_pe(self):
        # 100A * 1.25 = 125A -> 50mm2 (134A), PE = 50/2 = 25
        cable = self.calc.select_cable(100, 1.25, 380)
        self.assertEqual(cable.size_mm2, 50)
        self.assertEqual(self.calc.cable_label(cable), "3×50mm² + 1×25mm²")
        # 64A * 1.25 = 80A -> 25mm2 (89A), PE = 16
        self.assertEqual(self.calc.cable_label(self.calc.select_cable(64, 1.25, 220)), "2×25mm² + 1×16mm²")

    def test_cable_exact_ampacity(self):
        # 16A * 1.25 = 20A, exactly the 2.5mm2 rating
        cable = self.calc.select_cable(16, 1.25, 380)
        self.assertEqual(cable.size_mm2, 2.5)
        self.assertEqual(self.calc.cable_label(cable), "3×2.5mm² + 1×2.5mm²")
        self.assertEqual(self.calc.select_cable(16.01, 1.25, 380).size_mm2, 4)

    def test_cable_beyond_range(self):
        # 300A * 1.25 = 375A > 363A (240mm2)
        cable = self.calc.select_cable(300, 1.25, 380)
        self.assertIsNone(cable.size_mm2)
        self.assertEqual(self.calc.cable_label(cable), "Parallel cables or busbar required")

    def test_large_board_sentinels(self):
        # 20 x 22kW motors = 440kW -> I = 528000 / (1.732 * 380 * 0.8) = 1002.8 A
        loads = [motor(22, quantity=20)]
        result = compute(loads, ProjectConfig())
        self.assertEqual(result.main_breaker, "> 630A (custom required)")
        self.assertEqual(result.main_cable, "Parallel cables or busbar required")


if __name__ == '__main__':
    unittest.main()
