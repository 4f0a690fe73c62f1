import pandas as pd
import streamlit as st

from pktutor.config import settings
from pktutor.data import describe_dataset, flag_blq, read_warfarin, wrangle
from pktutor.plots import plot_profiles

try:
    st.set_page_config(page_title="pktutor - Data", page_icon="💊", layout="wide")
except Exception:
    pass

st.title("Data")
st.caption("Load the warfarin dataset (long format, '.' for missing values) and reshape it for analysis.")

uploaded = st.file_uploader("Upload CSV", type=["csv"])
if uploaded is not None:
    try:
        raw = read_warfarin(uploaded)
        st.session_state["raw_df"] = raw
        st.session_state["wide_df"] = wrangle(raw)
        st.success(f"Loaded dataset with shape {raw.shape}")
    except (ValueError, pd.errors.ParserError) as e:
        st.error(f"Failed to read CSV: {e}")

raw_df = st.session_state.get("raw_df")
wide_df = st.session_state.get("wide_df")

if raw_df is not None:
    st.subheader("Raw dataset")
    info = describe_dataset(raw_df)
    c1, c2 = st.columns(2)
    with c1:
        st.metric("Rows", info["rows"])
        st.metric("Columns", info["columns"])
    with c2:
        st.write("Missing values per column")
        st.json(info["missing"])
    st.dataframe(raw_df.head(50), use_container_width=True)

if wide_df is not None:
    st.subheader("Wrangled (wide) dataset")
    lloq = st.number_input("LLOQ (mg/L)", min_value=0.0, value=float(settings.lloq), step=0.1)
    flagged = flag_blq(wide_df, lloq)
    st.write(f"BLQ observations: {int(flagged['BLQ'].sum())}")
    st.dataframe(flagged, use_container_width=True)

    log_y = st.checkbox("Log scale", value=False)
    which = st.selectbox("Observation", ["conc", "pca"])
    st.pyplot(plot_profiles(flagged, y=which, log_y=log_y))

    csv_bytes = flagged.to_csv(index=False).encode("utf-8")
    st.download_button("Download wide CSV", data=csv_bytes, file_name="warfarin_wide.csv", mime="text/csv")

if st.button("Clear dataset", use_container_width=True):
    for key in ("raw_df", "wide_df", "nca_df"):
        st.session_state.pop(key, None)
    st.rerun()
