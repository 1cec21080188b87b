from core.models import InputMode, LoadType

# PVC insulated copper, conservative values for conductors in conduit
# Format: (Size_mm2, Max_Amps)
CABLE_TABLE = [
    (1.5, 14),
    (2.5, 20),
    (4, 28),
    (6, 36),
    (10, 50),
    (16, 68),
    (25, 89),
    (35, 110),
    (50, 134),
    (70, 171),
    (95, 207),
    (120, 239),
    (150, 276),
    (185, 311),
    (240, 363),
]

# Common MCB/MCCB ratings (Amps)
BREAKER_SIZES = [6, 10, 16, 20, 25, 32, 40, 50, 63, 80, 100, 125, 160, 200, 250, 315, 400, 630]

# Motor branch breaker when no standard size covers 1.5x the motor current
DEFAULT_MOTOR_BREAKER = 63

# Contactor per motor rating, AC-3 duty (approximate)
# Format: (Motor_kW, Contactor_Label)
CONTACTOR_TABLE = [
    (4, "09A"),
    (5.5, "12A"),
    (7.5, "18A"),
    (11, "25A"),
    (15, "32A"),
    (18.5, "40A"),
    (22, "50A"),
    (30, "65A"),
    (37, "80A"),
    (45, "95A"),
]

# DC24V supply breakpoints on the recommended current
# Format: (Max_Amps, Description)
DC24V_SUPPLIES = [
    (2.5, "60W (2.5A) supply"),
    (5, "120W (5A) supply"),
    (10, "240W (10A) supply"),
    (20, "480W (20A) supply"),
]
DC24V_MARGIN = 1.3

# Preset templates for the equipment library
DEFAULT_LIBRARY = [
    {"lib_id": "default-01", "name": "0.75kW Motor", "type": LoadType.MOTOR, "input_mode": InputMode.POWER,
     "power_kw": 0.75, "use_system_voltage": True, "voltage": 380, "kx": 1.0, "cos_phi": 0.8},
    {"lib_id": "default-02", "name": "5.5kW Motor", "type": LoadType.MOTOR, "input_mode": InputMode.POWER,
     "power_kw": 5.5, "use_system_voltage": True, "voltage": 380, "kx": 1.0, "cos_phi": 0.82},
    {"lib_id": "default-03", "name": "15kW Motor", "type": LoadType.MOTOR, "input_mode": InputMode.POWER,
     "power_kw": 15, "use_system_voltage": True, "voltage": 380, "kx": 1.0, "cos_phi": 0.85},
    {"lib_id": "default-04", "name": "Servo Drive (1kW)", "type": LoadType.SERVO, "input_mode": InputMode.POWER,
     "power_kw": 1.0, "use_system_voltage": True, "voltage": 380, "kx": 0.6, "cos_phi": 0.9,
     "uses_24v": True, "current_24v": 1.0},
    {"lib_id": "default-05", "name": "Inverter (7.5kW)", "type": LoadType.OTHER, "input_mode": InputMode.POWER,
     "power_kw": 7.5, "use_system_voltage": True, "voltage": 380, "kx": 0.9, "cos_phi": 0.95,
     "uses_24v": True, "current_24v": 0.5},
    {"lib_id": "default-06", "name": "Heating Element (2kW 220V)", "type": LoadType.HEATER, "input_mode": InputMode.POWER,
     "power_kw": 2.0, "use_system_voltage": False, "voltage": 220, "kx": 0.8, "cos_phi": 1.0},
    {"lib_id": "default-07", "name": "Solenoid Valves / Control Supply", "type": LoadType.OTHER, "input_mode": InputMode.POWER,
     "power_kw": 0.1, "use_system_voltage": False, "voltage": 220, "kx": 1.0, "cos_phi": 0.9,
     "uses_24v": True, "current_24v": 5.0},
]

# Starting rows for a new project
EXAMPLE_LOADS = [
    {"id": "1", "name": "Hydraulic Pump Motor", "type": LoadType.MOTOR, "input_mode": InputMode.POWER,
     "power_kw": 5.5, "use_system_voltage": True, "voltage": 380, "quantity": 1, "kx": 1.0, "cos_phi": 0.8},
    {"id": "2", "name": "Heater Bank A", "type": LoadType.HEATER, "input_mode": InputMode.POWER,
     "power_kw": 2.0, "use_system_voltage": False, "voltage": 220, "quantity": 6, "kx": 0.8, "cos_phi": 1.0},
    {"id": "3", "name": "Unrated Equipment", "type": LoadType.OTHER, "input_mode": InputMode.CURRENT,
     "rated_amps": 10, "use_system_voltage": False, "voltage": 220, "quantity": 1, "kx": 1.0, "cos_phi": 0.9},
    {"id": "4", "name": "Servo Drive", "type": LoadType.SERVO, "input_mode": InputMode.POWER,
     "power_kw": 1.5, "use_system_voltage": True, "voltage": 380, "quantity": 2, "kx": 0.6, "cos_phi": 0.9,
     "uses_24v": True, "current_24v": 1.5},
    {"id": "5", "name": "Control System and HMI", "type": LoadType.OTHER, "input_mode": InputMode.POWER,
     "power_kw": 0.2, "use_system_voltage": False, "voltage": 220, "quantity": 1, "kx": 1.0, "cos_phi": 0.9,
     "uses_24v": True, "current_24v": 2.0},
]
