import logging
from abc import ABC, abstractmethod
from typing import Iterable, List

from .components import CircuitBreaker, Cable
from .converters import FALLBACK_COS_PHI, ROOT3, effective_cos_phi, equivalent_kw, round_half_up, to_float
from .models import CalculationResult, DC24VResult, LoadItem, ProjectConfig

logger = logging.getLogger(__name__)

# Keeps the power factor division defined when there are no loads
EMPTY_APPARENT_POWER = 0.1


class DistributionBoardCalculator(ABC):

    @abstractmethod
    def select_main_breaker(self, current: float, system_voltage: float) -> CircuitBreaker:
        """Selects the incoming breaker for the main current."""
        pass

    @abstractmethod
    def select_cable(self, current: float, safety_factor: float, system_voltage: float) -> Cable:
        """Selects the incoming feeder cable, PE conductor included."""
        pass

    @abstractmethod
    def calculate_grounding_conductor(self, phase_mm2: float) -> float:
        """Returns the PE cross-section for a phase cross-section."""
        pass

    @abstractmethod
    def size_dc24v(self, loads: Iterable[LoadItem]) -> DC24VResult:
        """Sums the DC24V demand and recommends a supply."""
        pass

    @abstractmethod
    def recommend_row(self, item: LoadItem, system_voltage: float) -> str:
        """Short per-row advisory text (contactor, breaker, current)."""
        pass

    @abstractmethod
    def breaker_label(self, breaker: CircuitBreaker) -> str:
        pass

    @abstractmethod
    def cable_label(self, cable: Cable) -> str:
        pass

    def row_active_power(self, item: LoadItem, system_voltage: float) -> float:
        """Counted power of a row: equivalent kW * quantity * Kx."""
        return equivalent_kw(item, system_voltage) * to_float(item.quantity) * to_float(item.kx)

    def main_current(self, design_power_kw: float, system_voltage: float, cos_phi: float) -> float:
        if system_voltage == 220:
            denominator = system_voltage * cos_phi
        else:
            denominator = ROOT3 * system_voltage * cos_phi
        if denominator == 0:
            return 0.0
        return (design_power_kw * 1000) / denominator

    def compute(self, loads: List[LoadItem], config: ProjectConfig) -> CalculationResult:
        """Performs the full board calculation for a snapshot of loads."""
        loads = list(loads)
        system_voltage = to_float(config.system_voltage)
        rows = [self.row_active_power(item, system_voltage) for item in loads]

        raw_active_power = sum(rows)
        design_power = raw_active_power * to_float(config.margin_factor)

        total_apparent = sum(p / effective_cos_phi(item.cos_phi) for p, item in zip(rows, loads))
        if total_apparent == 0:
            total_apparent = EMPTY_APPARENT_POWER

        avg_cos_phi = raw_active_power / total_apparent or FALLBACK_COS_PHI

        current = self.main_current(design_power, system_voltage, avg_cos_phi)
        logger.debug(
            "P=%.3f kW, design=%.3f kW, cos=%.3f, I=%.2f A",
            raw_active_power, design_power, avg_cos_phi, current,
        )

        breaker = self.select_main_breaker(current, system_voltage)
        cable = self.select_cable(current, to_float(config.cable_safety_factor), system_voltage)

        return CalculationResult(
            total_active_power=round_half_up(raw_active_power, 2),
            total_apparent_power=round_half_up(raw_active_power / avg_cos_phi, 2),
            main_current=round_half_up(current, 1),
            main_breaker=self.breaker_label(breaker),
            main_cable=self.cable_label(cable),
            dc24v=self.size_dc24v(loads),
        )
