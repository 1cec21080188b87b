from dataclasses import dataclass
from typing import Optional


def format_number(value: float) -> str:
    """Prints table sizes: 2.5 as '2.5' and 4.0 as '4'."""
    return f"{value:g}"


def format_value(value) -> str:
    """Echoes an entered number in full, without a trailing '.0' (12.3456789, 1234567)."""
    from core.converters import to_float

    text = repr(to_float(value))
    return text[:-2] if text.endswith(".0") else text


@dataclass
class CircuitBreaker:
    rated_current: Optional[float]  # None when beyond the standard range
    poles: int

    @property
    def pole_label(self) -> str:
        return f"{self.poles}P"


@dataclass
class Cable:
    size_mm2: Optional[float] = None  # None when no single cable fits
    ampacity: float = 0.0
    pe_mm2: Optional[float] = None
    conductors: int = 3  # current-carrying conductors, PE counted apart
