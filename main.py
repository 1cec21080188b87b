import argparse
import logging
import re
import sys

from core.converters import effective_voltage, rated_current
from core.models import SYSTEM_VOLTAGES, InputMode, LoadItem, ProjectConfig, parse_load_type, type_label
from standards.iec import compute, recommend_row, row_active_power
from standards.iec_tables import EXAMPLE_LOADS
from storage.export import export_csv, export_workbook, nameplate_text
from storage.library import new_load_id
from storage.project import ProjectFormatError, load_project_file, save_project_file

logger = logging.getLogger(__name__)


def get_loads_input():
    loads = []
    print("\n--- Load Entry ---")

    while True:
        print(f"\n[Load #{len(loads)+1}]")
        name = input("Load name (blank to finish): ").strip()
        if not name:
            break

        try:
            type_str = input("Type (Motor/Heater/Servo/Other or custom) [Motor]: ").strip() or "Motor"

            qty_str = input("Quantity [1]: ").strip()
            quantity = int(qty_str) if qty_str else 1

            # Value and unit, e.g. "5.5 kW" or "10 A"
            p_input_str = input("Power or current (e.g. 5.5 kW, 10 A): ").strip()
            match = re.match(r"([0-9\.]+)\s*([a-zA-Z]*)", p_input_str)
            if not match:
                raise ValueError(f"cannot read '{p_input_str}'")
            val = float(match.group(1))
            by_current = match.group(2).upper() == "A"

            v_str = input("Voltage (blank = system voltage): ").strip()
            kx = float(input("Simultaneity factor Kx [1.0]: ") or 1.0)
            cos_phi = float(input("Power factor [0.8]: ") or 0.8)

            uses_24v = input("Draws DC24V? (y/n) [n]: ").lower() == "y"
            current_24v = float(input("DC24V current (A): ") or 0) if uses_24v else 0.0

            loads.append(LoadItem(
                id=new_load_id(),
                name=name,
                type=parse_load_type(type_str),
                input_mode=InputMode.CURRENT if by_current else InputMode.POWER,
                power_kw=0.0 if by_current else val,
                rated_amps=val if by_current else 0.0,
                use_system_voltage=not v_str,
                voltage=float(v_str) if v_str else 380,
                quantity=quantity,
                kx=kx,
                cos_phi=cos_phi,
                uses_24v=uses_24v,
                current_24v=current_24v,
            ))
        except ValueError as e:
            print(f"Input error: {e}. Try again.")

    return loads


def print_report(loads, config, result):
    v_sys = config.system_voltage
    print("-" * 110)
    print(f"{'Qty':<4} | {'Load':<24} | {'Type':<8} | {'V':<5} | {'A/Unit':<7} | {'kW':<7} | {'Recommendation'}")
    print("-" * 110)
    for item in loads:
        print(
            f"{item.quantity:<4} | {item.name[:24]:<24} | {type_label(item.type)[:8]:<8} | "
            f"{effective_voltage(item, v_sys):<5g} | {rated_current(item, v_sys):<7.1f} | "
            f"{row_active_power(item, v_sys):<7.2f} | {recommend_row(item, v_sys)}"
        )
    print("-" * 110)

    print(f"Total Active Power:   {result.total_active_power} kW")
    print(f"Total Apparent Power: {result.total_apparent_power} kVA")
    print(f"Main Current:         {result.main_current} A")
    print(f"Main Breaker:         {result.main_breaker}")
    print(f"Main Cable:           {result.main_cable}")
    print(f"DC24V:                {result.dc24v.total_current} A -> {result.dc24v.recommended_current} A "
          f"({result.dc24v.description})")
    print()
    print(nameplate_text(result, config))


def build_parser():
    parser = argparse.ArgumentParser(
        description="Distribution board load calculation (power, main breaker, cable, DC24V supply)"
    )
    parser.add_argument("project", nargs="?", help="Project JSON file to calculate")
    parser.add_argument("--example", action="store_true", help="Use the example loads")
    parser.add_argument("--voltage", type=int, choices=SYSTEM_VOLTAGES, help="Override the system voltage")
    parser.add_argument("--margin", type=float, help="Override the margin factor")
    parser.add_argument("--cable-factor", type=float, help="Override the cable safety factor")
    parser.add_argument("--csv", help="Write the calculation sheet as CSV")
    parser.add_argument("--xlsx", help="Write the calculation workbook as Excel")
    parser.add_argument("--save", help="Save the (possibly edited) project as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("==========================================================")
    print(" DISTRIBUTION BOARD LOAD CALCULATOR")
    print("==========================================================")

    if args.project:
        try:
            config, loads = load_project_file(args.project)
        except (OSError, ProjectFormatError) as e:
            print(f"Cannot open project: {e}")
            return 1
    elif args.example:
        config, loads = ProjectConfig(), [LoadItem(**row) for row in EXAMPLE_LOADS]
    else:
        config, loads = ProjectConfig(), get_loads_input()

    if args.voltage is not None:
        config.system_voltage = args.voltage
    if args.margin is not None:
        config.margin_factor = args.margin
    if args.cable_factor is not None:
        config.cable_safety_factor = args.cable_factor

    if not loads:
        print("No loads entered.")
        return 0

    logger.debug("Calculating %d loads at %sV", len(loads), config.system_voltage)
    result = compute(loads, config)
    print_report(loads, config, result)

    if args.csv:
        with open(args.csv, "wb") as f:
            f.write(export_csv(loads, config, result))
        print(f"[INFO] CSV written: {args.csv}")
    if args.xlsx:
        with open(args.xlsx, "wb") as f:
            f.write(export_workbook(loads, config, result))
        print(f"[INFO] Excel written: {args.xlsx}")
    if args.save:
        save_project_file(args.save, config, loads)
        print(f"[INFO] Project saved: {args.save}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
