import math
from typing import Iterable, List

from core.calculator import DistributionBoardCalculator
from core.components import CircuitBreaker, Cable, format_number, format_value
from core.converters import effective_voltage, equivalent_kw, format_fixed, phase_factor, round_half_up, to_float
from core.models import CalculationResult, DC24VResult, InputMode, LoadItem, LoadType, ProjectConfig
from standards.iec_tables import (
    BREAKER_SIZES, CABLE_TABLE, CONTACTOR_TABLE, DC24V_MARGIN, DC24V_SUPPLIES, DEFAULT_MOTOR_BREAKER,
)

# Assumed motor power factor for advisory current estimates
MOTOR_COS_PHI = 0.8
# Motor branch breakers (D curve) sit above 1.5x the running current
MOTOR_BREAKER_FACTOR = 1.5

NO_RECOMMENDATION = "-"


class IECCalculator(DistributionBoardCalculator):
    BREAKER_SIZES = BREAKER_SIZES
    CABLE_TABLE = CABLE_TABLE
    CONTACTOR_TABLE = CONTACTOR_TABLE

    def select_main_breaker(self, current: float, system_voltage: float) -> CircuitBreaker:
        poles = 2 if system_voltage == 220 else 3
        # Select first rating >= I
        for rating in self.BREAKER_SIZES:
            if rating >= current:
                return CircuitBreaker(rated_current=rating, poles=poles)
        return CircuitBreaker(rated_current=None, poles=poles)

    def breaker_label(self, breaker: CircuitBreaker) -> str:
        if breaker.rated_current is None:
            return f"> {self.BREAKER_SIZES[-1]}A (custom required)"
        return f"{breaker.pole_label} - {breaker.rated_current}A"

    def select_cable(self, current: float, safety_factor: float, system_voltage: float) -> Cable:
        target = current * safety_factor
        # 220V: L + N, 380V: three phases; PE always separate
        conductors = 2 if system_voltage == 220 else 3
        for size, ampacity in self.CABLE_TABLE:
            if ampacity >= target:
                return Cable(
                    size_mm2=size,
                    ampacity=ampacity,
                    pe_mm2=self.calculate_grounding_conductor(size),
                    conductors=conductors,
                )
        return Cable(size_mm2=None, ampacity=target, conductors=conductors)

    def cable_label(self, cable: Cable) -> str:
        if cable.size_mm2 is None:
            return "Parallel cables or busbar required"
        return f"{cable.conductors}×{format_number(cable.size_mm2)}mm² + 1×{format_number(cable.pe_mm2)}mm²"

    def calculate_grounding_conductor(self, phase_mm2: float) -> float:
        # IEC 60364-5-54 Table 54.2
        # S <= 16  -> S_pe = S
        # 16 < S <= 35 -> S_pe = 16
        # S > 35   -> S_pe = S / 2
        if phase_mm2 <= 16:
            return phase_mm2
        if phase_mm2 <= 35:
            return 16
        return phase_mm2 / 2

    def size_dc24v(self, loads: Iterable[LoadItem]) -> DC24VResult:
        total = 0.0
        for item in loads:
            if item.uses_24v:
                total += to_float(item.current_24v) * to_float(item.quantity)

        recommended = total * DC24V_MARGIN
        description = None
        for limit, label in DC24V_SUPPLIES:
            if recommended <= limit:
                description = label
                break
        if description is None:
            description = f"{math.ceil(recommended)}A or more, use parallel or high-power supplies"

        return DC24VResult(
            total_current=round_half_up(total, 2),
            recommended_current=round_half_up(recommended, 2),
            description=description,
        )

    def select_contactor(self, kw: float) -> str:
        for threshold, label in reversed(self.CONTACTOR_TABLE):
            if kw >= threshold:
                return label
        return self.CONTACTOR_TABLE[0][1]

    def select_motor_breaker(self, motor_amps: float) -> int:
        for rating in self.BREAKER_SIZES:
            if rating > motor_amps * MOTOR_BREAKER_FACTOR:
                return rating
        return DEFAULT_MOTOR_BREAKER

    def recommend_row(self, item: LoadItem, system_voltage: float) -> str:
        u = effective_voltage(item, system_voltage)
        kw = equivalent_kw(item, system_voltage)
        by_current = item.input_mode == InputMode.CURRENT

        if item.type == LoadType.MOTOR:
            if by_current:
                i_motor = to_float(item.rated_amps)
            elif u > 0:
                i_motor = kw * 1000 / (phase_factor(u) * u * MOTOR_COS_PHI)
            else:
                return NO_RECOMMENDATION
            contactor = self.select_contactor(kw)
            breaker = self.select_motor_breaker(i_motor)
            return f"Contactor:{contactor} / Breaker:D{breaker}"

        if item.type == LoadType.HEATER:
            if by_current:
                i_heat = to_float(item.rated_amps)
            elif u > 0:
                # Resistive, cos = 1
                i_heat = kw * 1000 / (u * phase_factor(u))
            else:
                return NO_RECOMMENDATION
            return f"Current ≈ {format_fixed(i_heat, 1)}A"

        if by_current:
            return f"Rated current {format_value(item.rated_amps)}A"
        return NO_RECOMMENDATION


_default_calculator = IECCalculator()


def compute(loads: List[LoadItem], config: ProjectConfig) -> CalculationResult:
    return _default_calculator.compute(loads, config)


def row_active_power(item: LoadItem, system_voltage: float) -> float:
    return _default_calculator.row_active_power(item, system_voltage)


def recommend_row(item: LoadItem, system_voltage: float) -> str:
    return _default_calculator.recommend_row(item, system_voltage)
