from dataclasses import dataclass, field
from enum import Enum
from typing import Union

SYSTEM_VOLTAGES = (220, 380)


class LoadType(Enum):
    MOTOR = "Motor"
    HEATER = "Heater"
    SERVO = "Servo"
    OTHER = "Other"


class InputMode(Enum):
    POWER = "KW"
    CURRENT = "AMP"


# A load type is either one of the known categories or a user's own label
LoadTypeTag = Union[LoadType, str]

# Labels written by older project and library files
LEGACY_TYPE_LABELS = {
    "电机": LoadType.MOTOR,
    "加热": LoadType.HEATER,
    "伺服": LoadType.SERVO,
    "其他": LoadType.OTHER,
}


def parse_load_type(label) -> LoadTypeTag:
    """Maps a label onto a LoadType member when it names one, else keeps the free text."""
    if isinstance(label, LoadType):
        return label
    text = "" if label is None else str(label).strip()
    if text in LEGACY_TYPE_LABELS:
        return LEGACY_TYPE_LABELS[text]
    for member in LoadType:
        if text.upper() in (member.name, member.value.upper()):
            return member
    return text


def type_label(tag: LoadTypeTag) -> str:
    return tag.value if isinstance(tag, LoadType) else str(tag)


def parse_input_mode(value) -> InputMode:
    if isinstance(value, InputMode):
        return value
    text = str(value).strip().upper()
    if text in ("AMP", "A", "CURRENT"):
        return InputMode.CURRENT
    return InputMode.POWER


@dataclass
class LoadItem:
    id: str
    name: str
    type: LoadTypeTag = LoadType.MOTOR
    input_mode: InputMode = InputMode.POWER
    power_kw: float = 0.0     # used in POWER mode
    rated_amps: float = 0.0   # used in CURRENT mode
    use_system_voltage: bool = True
    voltage: float = 380      # only when use_system_voltage is False
    quantity: int = 1
    kx: float = 1.0           # simultaneity factor
    cos_phi: float = 0.8
    uses_24v: bool = False
    current_24v: float = 0.0

    def __post_init__(self):
        self.type = parse_load_type(self.type)
        self.input_mode = parse_input_mode(self.input_mode)


@dataclass
class LibraryItem:
    lib_id: str
    name: str
    type: LoadTypeTag = LoadType.MOTOR
    input_mode: InputMode = InputMode.POWER
    power_kw: float = 0.0
    rated_amps: float = 0.0
    use_system_voltage: bool = True
    voltage: float = 380
    kx: float = 1.0
    cos_phi: float = 0.8
    uses_24v: bool = False
    current_24v: float = 0.0

    def __post_init__(self):
        self.type = parse_load_type(self.type)
        self.input_mode = parse_input_mode(self.input_mode)


@dataclass
class ProjectConfig:
    system_voltage: float = 380
    margin_factor: float = 1.2
    cable_safety_factor: float = 1.25
    default_cos_phi: float = 0.8


@dataclass
class DC24VResult:
    total_current: float
    recommended_current: float
    description: str


@dataclass
class CalculationResult:
    total_active_power: float    # kW
    total_apparent_power: float  # kVA
    main_current: float          # A
    main_breaker: str
    main_cable: str
    dc24v: DC24VResult = field(default_factory=lambda: DC24VResult(0.0, 0.0, ""))
