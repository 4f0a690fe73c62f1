import streamlit as st

from pktutor.errors import SimulationError
from pktutor.regimen import Regimen
from pktutor.simulate import WarfarinParameters, simulate_population

try:
    st.set_page_config(page_title="pktutor - Simulation", page_icon="💊", layout="wide")
except Exception:
    pass

st.title("Simulation")
st.caption("Warfarin concentration and PCA response for a dosing regimen.")

defaults = WarfarinParameters()
left, right = st.columns(2)
with left:
    st.markdown("#### Regimen")
    dose = st.number_input("Dose (mg)", min_value=0.0, value=100.0, step=5.0)
    every = st.number_input("Interval (h)", min_value=1.0, value=24.0, step=1.0)
    n_doses = st.number_input("Number of doses", min_value=1, value=1)
    t_end = st.number_input("End time (h)", min_value=1.0, value=144.0, step=12.0)
    dt = st.number_input("Output step (h)", min_value=0.05, value=0.5, step=0.05)
with right:
    st.markdown("#### Parameters")
    clearance = st.number_input("CL (L/h)", min_value=0.001, value=defaults.clearance, format="%.3f")
    volume = st.number_input("Vc (L)", min_value=0.01, value=defaults.volume)
    tabs = st.number_input("Absorption half-life (h)", min_value=0.01, value=defaults.tabs)
    ec50 = st.number_input("EC50 (mg/L)", min_value=0.01, value=defaults.ec50)
    n_subjects = st.number_input("Subjects", min_value=1, max_value=200, value=1)
    seed = st.number_input("Seed", min_value=0, value=1234)
    with_error = st.checkbox("Residual error", value=False)

if st.button("Run simulation", use_container_width=True):
    params = WarfarinParameters(clearance=clearance, volume=volume, tabs=tabs, ec50=ec50)
    regimen = Regimen.repeated(start=0.0, every=every, n=int(n_doses), amount=dose)
    single = n_subjects == 1
    try:
        sim = simulate_population(
            params,
            regimen,
            n_subjects=int(n_subjects),
            t_end=t_end,
            dt=dt,
            omega=(0.0, 0.0, 0.0) if single else (0.01, 0.01, 0.01),
            omega_pd=(0.0, 0.0, 0.0, 0.0) if single else (0.01, 0.01, 0.01, 0.01),
            omega_lag=0.0 if single else 0.01,
            seed=int(seed),
            simulate_error=with_error,
        )
        st.session_state["sim_df"] = sim
        st.success(f"Simulation complete: {sim.shape[0]} points.")
    except (ValueError, SimulationError) as e:
        st.exception(e)

sim = st.session_state.get("sim_df")
if sim is not None:
    c1, c2 = st.columns(2)
    with c1:
        st.markdown("Concentration (mg/L)")
        st.line_chart(sim.pivot(index="time", columns="id", values="conc_obs" if "conc_obs" in sim.columns else "conc"))
    with c2:
        st.markdown("PCA")
        st.line_chart(sim.pivot(index="time", columns="id", values="pca_obs" if "pca_obs" in sim.columns else "pca"))
    csv_bytes = sim.to_csv(index=False).encode("utf-8")
    st.download_button("Download CSV", data=csv_bytes, file_name="simulation.csv", mime="text/csv")
