import platform
import importlib
from datetime import datetime
import streamlit as st

try:
    st.set_page_config(
        page_title="pktutor",
        page_icon="💊",
        layout="wide",
        initial_sidebar_state="expanded",
    )
except Exception:
    # set_page_config may have been called already if rendering in-place
    pass

st.title("💊 pktutor")
st.caption("Warfarin PK/PD: data wrangling, non-compartmental analysis and simulation")

# --- Quick navigation buttons ---
st.markdown("### Quick navigation")
cols = st.columns(3)
labels = ["Data", "NCA", "Simulation"]
targets = ["pages/1_Data.py", "pages/2_NCA.py", "pages/3_Simulation.py"]
for i, (label, target) in enumerate(zip(labels, targets)):
    with cols[i]:
        if st.button(label, use_container_width=True):
            st.switch_page(target)

st.divider()

# --- Session status ---
st.markdown("### Session status")
left, mid, right = st.columns(3)
with left:
    df = st.session_state.get("wide_df")
    st.metric("Dataset", f"{df['ID'].nunique()} subjects" if df is not None else "Not loaded")
with mid:
    nca = st.session_state.get("nca_df")
    st.metric("NCA", f"{len(nca)} subjects" if nca is not None else "Not run")
with right:
    sim = st.session_state.get("sim_df")
    st.metric("Simulation", f"{len(sim):,} rows" if sim is not None else "Not run")

# --- Quickstart ---
st.markdown("### Quickstart")
st.markdown(
    "- Step 1: Upload the warfarin CSV in Data; it is wrangled to wide format.\n"
    "- Step 2: Compute per-subject AUC, Cmax and half-life in NCA.\n"
    "- Step 3: Simulate dosing regimens in Simulation."
)

with st.expander("Command-line examples (optional)"):
    st.code(
        "python -m pktutor.cli auc --times 0 1 2 4 8 12 24 --obs 0.01 112 224 220 143 109 57\n"
        "python -m pktutor.cli nca --csv data/warfarin.csv --out nca.csv --lloq 1.0\n"
        "python -m pktutor.cli simulate --dose 100 --every 24 --n 3 --end 144 --csv sim.csv",
        language="bash",
    )

st.divider()

# --- Environment / About ---
st.markdown("### Environment")
try:
    pkg = importlib.import_module("pktutor")
    pkg_ver = getattr(pkg, "__version__", "unknown")
except ImportError:
    pkg_ver = "unknown"
env_cols = st.columns(3)
with env_cols[0]:
    st.write(f"Python: {platform.python_version()}")
with env_cols[1]:
    st.write(f"pktutor: {pkg_ver}")
with env_cols[2]:
    st.write(f"Launched: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
