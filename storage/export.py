import datetime
import io
import logging
from typing import List

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from core.converters import (
    ROOT3, effective_cos_phi, effective_voltage, equivalent_kw, format_fixed, is_three_phase, rated_current,
    round_half_up,
)
from core.components import format_value
from core.models import CalculationResult, InputMode, LoadItem, ProjectConfig, type_label
from standards.iec import row_active_power, recommend_row
from standards.iec_tables import BREAKER_SIZES, CABLE_TABLE

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Name", "Type", "Voltage(V)", "Power/Current Input", "Quantity", "Kx", "CosPhi",
    "Counted Power(kW)", "Selection Reference",
]


def input_label(item: LoadItem) -> str:
    if item.input_mode == InputMode.POWER:
        return f"{format_value(item.power_kw)} kW"
    return f"{format_value(item.rated_amps)} A"


def dc24v_label(result: CalculationResult) -> str:
    return f"{result.dc24v.recommended_current} A ({result.dc24v.description})"


def loads_dataframe(loads: List[LoadItem], config: ProjectConfig) -> pd.DataFrame:
    """One row per load with the columns of the CSV export."""
    v_sys = config.system_voltage
    rows = []
    for item in loads:
        rows.append([
            item.name,
            type_label(item.type),
            format_value(effective_voltage(item, v_sys)),
            input_label(item),
            item.quantity,
            item.kx,
            item.cos_phi,
            format_fixed(row_active_power(item, v_sys), 2),
            # Commas would shift the columns
            recommend_row(item, v_sys).replace(",", " "),
        ])
    return pd.DataFrame(rows, columns=CSV_HEADER)


def summary_rows(result: CalculationResult) -> List[List[str]]:
    return [
        ["Summary"],
        ["Total Active Power (kW)", result.total_active_power],
        ["Main Current (A)", result.main_current],
        ["Recommended Main Breaker", result.main_breaker],
        ["Recommended Main Cable", result.main_cable],
        ["DC24V Total Demand", dc24v_label(result)],
    ]


def export_csv(loads: List[LoadItem], config: ProjectConfig, result: CalculationResult) -> bytes:
    """CSV calculation sheet, UTF-8 with BOM so spreadsheet tools pick the encoding."""
    buffer = io.StringIO()
    loads_dataframe(loads, config).to_csv(buffer, index=False, lineterminator="\n")
    buffer.write("\n")
    summary = pd.DataFrame(summary_rows(result))
    summary.to_csv(buffer, index=False, header=False, lineterminator="\n")
    return buffer.getvalue().encode("utf-8-sig")


def export_workbook(loads: List[LoadItem], config: ProjectConfig, result: CalculationResult) -> bytes:
    wb = Workbook()
    v_sys = config.system_voltage

    # --- Sheet 1: Loads ---
    ws1 = wb.active
    ws1.title = "Loads"
    headers = ["Name", "Type", "Qty", "Voltage (V)", "Input", "Amps Unit", "Kx", "Cos Phi",
               "Counted kW", "Recommendation"]
    ws1.append(headers)

    header_fill = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")
    header_font = Font(bold=True)
    for cell in ws1[1]:
        cell.font = header_font
        cell.fill = header_fill

    for item in loads:
        ws1.append([
            item.name,
            type_label(item.type),
            item.quantity,
            effective_voltage(item, v_sys),
            input_label(item),
            round_half_up(rated_current(item, v_sys), 2),
            item.kx,
            item.cos_phi,
            round_half_up(row_active_power(item, v_sys), 2),
            recommend_row(item, v_sys),
        ])

    for col in ws1.columns:
        ws1.column_dimensions[col[0].column_letter].width = 18

    # --- Sheet 2: Summary ---
    ws2 = wb.create_sheet("Summary")
    ws2.append(["DISTRIBUTION BOARD CALCULATION"])
    ws2["A1"].font = header_font
    ws2.append(["Date:", datetime.datetime.now().strftime("%Y-%m-%d %H:%M")])
    ws2.append(["System Voltage (V)", v_sys])
    ws2.append(["Margin Factor", config.margin_factor])
    ws2.append(["Cable Safety Factor", config.cable_safety_factor])
    ws2.append([])
    ws2.append(["Parameter", "Value"])
    ws2.append(["Total Active Power (kW)", result.total_active_power])
    ws2.append(["Total Apparent Power (kVA)", result.total_apparent_power])
    ws2.append(["Main Current (A)", result.main_current])
    ws2.append(["Main Breaker", result.main_breaker])
    ws2.append(["Main Cable", result.main_cable])
    ws2.append(["DC24V Total (A)", result.dc24v.total_current])
    ws2.append(["DC24V Recommended (A)", result.dc24v.recommended_current])
    ws2.append(["DC24V Supply", result.dc24v.description])
    ws2.column_dimensions["A"].width = 30
    ws2.column_dimensions["B"].width = 40

    # --- Sheet 3: Reference ---
    ws3 = wb.create_sheet("Reference Tables")
    ws3.append(["Cable (mm2)", "Max Amps", "", "Breaker (A)"])
    for cell in ws3[1]:
        cell.font = header_font
    for idx in range(max(len(CABLE_TABLE), len(BREAKER_SIZES))):
        size, amps = CABLE_TABLE[idx] if idx < len(CABLE_TABLE) else ("", "")
        breaker = BREAKER_SIZES[idx] if idx < len(BREAKER_SIZES) else ""
        ws3.append([size, amps, "", breaker])

    output = io.BytesIO()
    wb.save(output)
    logger.debug("Workbook exported with %d loads", len(loads))
    return output.getvalue()


def nameplate_text(result: CalculationResult, config: ProjectConfig, date: datetime.date = None) -> str:
    date = date or datetime.date.today()
    return (
        "Equipment Name: [enter name]\n"
        f"Rated Voltage: AC{format_value(config.system_voltage)}V / 50Hz\n"
        f"Total Power: {format_fixed(result.total_active_power, 2)} KW\n"
        f"Full Load Current: {result.main_current} A\n"
        "Control Voltage: DC24V\n"
        f"Date of Manufacture: {date.isoformat()}\n"
    )


def formula_details(item: LoadItem, system_voltage: float) -> dict:
    """Worked formulas behind a row, for the detail panel."""
    u = effective_voltage(item, system_voltage)
    three_phase = is_three_phase(u)
    cos = effective_cos_phi(item.cos_phi)
    eq_kw = equivalent_kw(item, system_voltage)
    counted = row_active_power(item, system_voltage)
    amps = rated_current(item, system_voltage)

    if item.input_mode == InputMode.POWER:
        kw = format_value(item.power_kw)
        if three_phase:
            current_formula = f"{kw}kW × 1000 / ({ROOT3} × {format_value(u)}V × {cos}) ≈ {format_fixed(amps, 2)} A"
        else:
            current_formula = f"{kw}kW × 1000 / ({format_value(u)}V × {cos}) ≈ {format_fixed(amps, 2)} A"
        power_step = f"Entered: {kw} kW"
    else:
        a = format_value(item.rated_amps)
        current_formula = f"Entered: {a} A"
        root = " × √3" if three_phase else ""
        power_step = f"{a}A × {format_value(u)}V{root} × {cos}(cosφ) / 1000 = {format_fixed(eq_kw, 3)} kW"

    counted_step = f"{format_fixed(eq_kw, 3)} kW × {item.quantity} × {item.kx} = {format_fixed(counted, 2)} kW"
    return {
        "voltage": u,
        "rated_current": current_formula,
        "unit_power": power_step,
        "counted_power": counted_step,
    }
