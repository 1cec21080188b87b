import datetime
import logging

import streamlit as st
import pandas as pd

from core.components import format_value
from core.converters import round_half_up
from core.models import SYSTEM_VOLTAGES, LoadItem, LoadType, ProjectConfig, type_label
from standards.iec import compute, recommend_row, row_active_power
from standards.iec_tables import EXAMPLE_LOADS
from storage.export import export_csv, export_workbook, formula_details, nameplate_text
from storage.frames import INPUT_COLUMNS, dataframe_to_loads, loads_to_dataframe
from storage.library import JsonFileLibraryRepository, group_library, load_from_library_item, new_load_id
from storage.project import ProjectFormatError, dump_project, parse_project

logger = logging.getLogger(__name__)

# --- Page Config ---
st.set_page_config(
    page_title="Distribution Board Load Calculator",
    page_icon="⚡",
    layout="wide",
    initial_sidebar_state="expanded"
)

# --- Custom CSS ---
st.markdown("""
<style>
    .main-header { font-family: 'Inter', sans-serif; color: #1E3A8A; font-weight: 700; }
    .stDataFrame { border-radius: 10px; overflow: hidden; }
</style>
""", unsafe_allow_html=True)

# --- Session State Init ---
if "loads_df" not in st.session_state:
    st.session_state.loads_df = loads_to_dataframe([LoadItem(**row) for row in EXAMPLE_LOADS])

if "config" not in st.session_state:
    st.session_state.config = ProjectConfig()

if "library" not in st.session_state:
    st.session_state.library = JsonFileLibraryRepository()

config: ProjectConfig = st.session_state.config
library: JsonFileLibraryRepository = st.session_state.library


def current_loads():
    return dataframe_to_loads(st.session_state.loads_df, new_id=new_load_id)


def append_load(item: LoadItem):
    loads = current_loads() + [item]
    st.session_state.loads_df = loads_to_dataframe(loads)


# --- Sidebar ---
with st.sidebar:
    st.title("Project Settings")

    v_index = SYSTEM_VOLTAGES.index(config.system_voltage) if config.system_voltage in SYSTEM_VOLTAGES else 1
    config.system_voltage = st.selectbox("System Voltage (V)", SYSTEM_VOLTAGES, index=v_index)
    config.margin_factor = st.number_input("Margin Factor", 1.0, 3.0, float(config.margin_factor), 0.05)
    config.cable_safety_factor = st.number_input(
        "Cable Safety Factor", 1.0, 3.0, float(config.cable_safety_factor), 0.05
    )
    config.default_cos_phi = st.number_input("Default Cos Phi", 0.1, 1.0, float(config.default_cos_phi), 0.05)

    st.markdown("---")
    st.subheader("📚 Equipment Library")

    groups = group_library(library.list())
    for group, items in groups.items():
        with st.expander(f"{group} ({len(items)})"):
            for lib_item in items:
                c_name, c_add, c_del = st.columns([3, 1, 1])
                c_name.write(lib_item.name)
                if c_add.button("➕", key=f"add_{lib_item.lib_id}", help="Add to project"):
                    append_load(load_from_library_item(lib_item))
                    st.rerun()
                if c_del.button("🗑️", key=f"del_{lib_item.lib_id}", help="Delete from library"):
                    library.delete(lib_item.lib_id)
                    st.rerun()

    loads_now = current_loads()
    if loads_now:
        names = [item.name for item in loads_now]
        to_save = st.selectbox("Save row to library", names)
        if st.button("💾 Save to Library", use_container_width=True):
            item = loads_now[names.index(to_save)]
            if library.find_by_name(item.name):
                st.warning(f"'{item.name}' already existed and was overwritten.")
            library.save_item(item)
            st.rerun()

    st.markdown("---")
    st.subheader("📂 Open Project")
    uploaded_file = st.file_uploader("Project JSON", type=["json"])
    if uploaded_file:
        if st.button("Load Project"):
            try:
                new_config, new_loads = parse_project(uploaded_file.getvalue().decode("utf-8"))
                st.session_state.config = new_config
                st.session_state.loads_df = loads_to_dataframe(new_loads)
                st.success(f"✅ {len(new_loads)} loads imported.")
                st.rerun()
            except (ProjectFormatError, UnicodeDecodeError) as e:
                logger.warning("Project import failed: %s", e)
                st.error(f"Error reading project: {e}")

# --- Main Area ---
st.markdown("<h1 class='main-header'>⚡ Distribution Board Load Calculator</h1>", unsafe_allow_html=True)
st.markdown("---")

tb1, tb2 = st.columns([1, 5])
with tb1:
    if st.button("➕ New Load", type="primary", use_container_width=True):
        append_load(LoadItem(id=new_load_id(), name="New Load", type=LoadType.MOTOR, power_kw=0.75,
                             cos_phi=config.default_cos_phi))
        st.rerun()
with tb2:
    if st.button("🗑️ Clear Table", type="secondary"):
        st.session_state.loads_df = pd.DataFrame(columns=INPUT_COLUMNS)
        st.rerun()

st.markdown("### 📋 Loads (Editable)")
st.caption("Edit any cell to recalculate. Select rows and press Delete to remove them.")

loads = current_loads()
df_to_show = st.session_state.loads_df.copy()
df_to_show["Counted kW"] = [round_half_up(row_active_power(l, config.system_voltage), 2) for l in loads]
df_to_show["Recommendation"] = [recommend_row(l, config.system_voltage) for l in loads]

type_options = [t.value for t in LoadType] + sorted(
    {type_label(l.type) for l in loads} - {t.value for t in LoadType}
)
column_config = {
    "ID": None,  # Hide
    "Type": st.column_config.SelectboxColumn(options=type_options, width="small"),
    "Mode": st.column_config.SelectboxColumn(options=["KW", "AMP"], width="small"),
    "Voltage (V)": st.column_config.NumberColumn(min_value=0, step=10, width="small"),
    "Qty": st.column_config.NumberColumn(min_value=1, step=1, width="small"),
    "Kx": st.column_config.NumberColumn(min_value=0.1, max_value=1.0, step=0.05),
    "CosPhi": st.column_config.NumberColumn(min_value=0.1, max_value=1.0, step=0.01),
}

edited_df = st.data_editor(
    df_to_show,
    key="editor",
    use_container_width=True,
    num_rows="dynamic",
    column_config=column_config,
    disabled=["Counted kW", "Recommendation"],
    height=400
)

# Only input columns go back to session state
edited_inputs = edited_df[INPUT_COLUMNS]
if not edited_inputs.equals(st.session_state.loads_df):
    st.session_state.loads_df = edited_inputs.reset_index(drop=True)
    st.rerun()

# --- Results ---
result = compute(loads, config)

st.markdown("---")
st.subheader("🏢 Main Incomer")
c1, c2, c3 = st.columns(3)
c1.metric("Total Active Power", f"{result.total_active_power} kW")
c2.metric("Total Apparent Power", f"{result.total_apparent_power} kVA")
c3.metric("Main Current", f"{result.main_current} A")
c4, c5, c6 = st.columns(3)
c4.metric("Main Breaker", result.main_breaker)
c5.metric("Main Cable", result.main_cable)
c6.metric("DC24V", f"{result.dc24v.recommended_current} A", help=f"Raw demand {result.dc24v.total_current} A")
st.info(f"DC24V supply: {result.dc24v.description}")

with st.expander("🔍 Formula Details"):
    for item in loads:
        details = formula_details(item, config.system_voltage)
        st.markdown(f"**{item.name}** ({format_value(details['voltage'])} V)")
        st.text(f"Rated current: {details['rated_current']}\n"
                f"Unit power:    {details['unit_power']}\n"
                f"Counted power: {details['counted_power']}")

with st.expander("🏷️ Nameplate"):
    st.code(nameplate_text(result, config), language=None)

# --- Downloads ---
st.markdown("---")
stamp = datetime.date.today().isoformat()
d1, d2, d3 = st.columns(3)
d1.download_button(
    "📥 CSV",
    data=export_csv(loads, config, result),
    file_name=f"load_calculation_{stamp}.csv",
    mime="text/csv",
    use_container_width=True
)
d2.download_button(
    "💾 Project JSON",
    data=dump_project(config, loads),
    file_name=f"project_{stamp}.json",
    mime="application/json",
    use_container_width=True
)
d3.download_button(
    "📊 Excel",
    data=export_workbook(loads, config, result),
    file_name=f"load_calculation_{stamp}.xlsx",
    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    use_container_width=True
)
