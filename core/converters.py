import math
from decimal import ROUND_HALF_UP, Decimal

from core.models import InputMode, LoadItem

ROOT3 = 1.732
THREE_PHASE_MIN_VOLTAGE = 300
FALLBACK_COS_PHI = 0.8


def round_half_up(value: float, places: int) -> float:
    """Rounds the printed value half up, so 0.125 -> 0.13 (round() would give 0.12)."""
    if not math.isfinite(value):
        return value
    step = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(step, rounding=ROUND_HALF_UP))


def format_fixed(value: float, places: int) -> str:
    return f"{round_half_up(value, places):.{places}f}"


def to_float(value) -> float:
    """Coerces missing or non-numeric input to 0.0 (blank form cells, NaN from tables)."""
    if value is None or isinstance(value, str) and not value.strip():
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


def effective_cos_phi(value) -> float:
    return to_float(value) or FALLBACK_COS_PHI


def is_three_phase(voltage: float) -> bool:
    # 220V systems are single phase, 380V systems three phase
    return voltage >= THREE_PHASE_MIN_VOLTAGE


def phase_factor(voltage: float) -> float:
    return ROOT3 if is_three_phase(voltage) else 1.0


def effective_voltage(item: LoadItem, system_voltage: float) -> float:
    """Operating voltage of a load: the system's, or its own when it opts out."""
    if item.use_system_voltage:
        return to_float(system_voltage)
    return to_float(item.voltage)


def equivalent_kw(item: LoadItem, system_voltage: float) -> float:
    """
    Real power of one unit in kW.
    Loads entered by current are converted with P = I * U * (root3) * cos / 1000.
    """
    if item.input_mode == InputMode.POWER:
        return to_float(item.power_kw)

    u = effective_voltage(item, system_voltage)
    i = to_float(item.rated_amps)
    cos = effective_cos_phi(item.cos_phi)
    return (i * u * phase_factor(u) * cos) / 1000


def rated_current(item: LoadItem, system_voltage: float) -> float:
    """Line current of one unit, for display."""
    if item.input_mode == InputMode.CURRENT:
        return to_float(item.rated_amps)

    u = effective_voltage(item, system_voltage)
    if u <= 0:
        return 0.0
    cos = effective_cos_phi(item.cos_phi)
    return (to_float(item.power_kw) * 1000) / (u * phase_factor(u) * cos)
