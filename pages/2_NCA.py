import streamlit as st

from pktutor.auc import cumulative_auc
from pktutor.config import settings
from pktutor.data import concentration_profiles, handle_blq
from pktutor.nca import nca_by_subject

try:
    st.set_page_config(page_title="pktutor - NCA", page_icon="💊", layout="wide")
except Exception:
    pass

st.title("NCA")
st.caption("Per-subject trapezoidal AUC, Cmax/Tmax and terminal half-life.")

wide_df = st.session_state.get("wide_df")
if wide_df is None:
    st.warning("No dataset loaded. Go to Data tab.")
    st.stop()

col1, col2, col3 = st.columns(3)
with col1:
    lloq = st.number_input("LLOQ (mg/L)", min_value=0.0, value=float(settings.lloq), step=0.1)
with col2:
    method = st.selectbox("BLQ handling", ["discard", "drop", "lloq"])
with col3:
    n_terminal = st.number_input("Terminal points", min_value=2, max_value=10, value=3)

if st.button("Run NCA", use_container_width=True):
    df = handle_blq(wide_df, method=method, lloq=lloq)
    st.session_state["nca_input_df"] = df
    st.session_state["nca_df"] = nca_by_subject(df, n_terminal=int(n_terminal))

nca_df = st.session_state.get("nca_df")
if nca_df is not None:
    st.dataframe(nca_df, use_container_width=True)
    st.write(nca_df[["auc_last", "auc_inf", "cmax", "half_life"]].describe())
    csv_bytes = nca_df.to_csv(index=False).encode("utf-8")
    st.download_button("Download NCA CSV", data=csv_bytes, file_name="nca.csv", mime="text/csv")

    st.subheader("Cumulative AUC")
    profiles = {sid: (t, c) for sid, t, c in concentration_profiles(st.session_state["nca_input_df"])}
    subject = st.selectbox("Subject", list(profiles))
    if subject is not None:
        times, conc = profiles[subject]
        st.line_chart({"cumulative AUC": cumulative_auc(list(times), list(conc))})
