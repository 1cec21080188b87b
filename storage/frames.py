"""Conversion between load lists and the editable table shown in the app."""
from typing import List

import pandas as pd

from core.converters import to_float
from core.models import InputMode, LoadItem, type_label

# Column -> LoadItem attribute
COLUMNS = {
    "ID": "id",
    "Name": "name",
    "Type": "type",
    "Mode": "input_mode",
    "Power (kW)": "power_kw",
    "Current (A)": "rated_amps",
    "System V": "use_system_voltage",
    "Voltage (V)": "voltage",
    "Qty": "quantity",
    "Kx": "kx",
    "CosPhi": "cos_phi",
    "24V": "uses_24v",
    "24V Current (A)": "current_24v",
}
INPUT_COLUMNS = list(COLUMNS)


def loads_to_dataframe(loads: List[LoadItem]) -> pd.DataFrame:
    rows = []
    for item in loads:
        row = {col: getattr(item, attr) for col, attr in COLUMNS.items()}
        row["Type"] = type_label(item.type)
        row["Mode"] = item.input_mode.value
        rows.append(row)
    return pd.DataFrame(rows, columns=INPUT_COLUMNS)


def _flag(value) -> bool:
    if pd.isna(value):
        return False
    return bool(value)


def dataframe_to_loads(df: pd.DataFrame, new_id=None) -> List[LoadItem]:
    """
    Rebuilds LoadItems from an edited table.
    Blank numeric cells become 0 and rows added in the editor get a fresh id.
    """
    loads = []
    for idx, row in df.iterrows():
        load_id = row.get("ID")
        if pd.isna(load_id) or not str(load_id).strip():
            load_id = new_id() if new_id else str(idx)
        name = row.get("Name")
        mode = row.get("Mode")
        loads.append(LoadItem(
            id=str(load_id),
            name="" if pd.isna(name) else str(name),
            type="" if pd.isna(row.get("Type")) else str(row.get("Type")),
            input_mode=InputMode.POWER if pd.isna(mode) else mode,
            power_kw=to_float(row.get("Power (kW)")),
            rated_amps=to_float(row.get("Current (A)")),
            use_system_voltage=_flag(row.get("System V")),
            voltage=to_float(row.get("Voltage (V)")),
            quantity=int(to_float(row.get("Qty"))),
            kx=to_float(row.get("Kx")),
            cos_phi=to_float(row.get("CosPhi")),
            uses_24v=_flag(row.get("24V")),
            current_24v=to_float(row.get("24V Current (A)")),
        ))
    return loads
