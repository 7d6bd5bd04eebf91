# app.py
import pandas as pd
import matplotlib.pyplot as plt
import streamlit as st
from datetime import date

from coupons import (
    DEFAULT_BASIS,
    VALID_FREQUENCIES,
    coupdaybs,
    coupdaybs_frame,
    coupon_serial,
    previous_coupon_date,
    settlement_sweep,
)
from daycount import BASIS_NAMES
from date_utils import date_serial_from_value, parse_date
from formula_values import is_error


# ---------------------------
# Micro-caching wrappers
# ---------------------------
@st.cache_data(show_spinner=False, ttl=300)
def cached_settlement_sweep(maturity: date, frequency: int, basis: int, start: date, end: date):
    return settlement_sweep(maturity, frequency, basis, start, end)


@st.cache_data(show_spinner=False, ttl=300)
def cached_coupdaybs_frame(df: pd.DataFrame):
    return coupdaybs_frame(df)


# ---------------------------
# Page config
# ---------------------------
st.set_page_config(page_title="COUPDAYBS Calculator", page_icon="📅", layout="wide")

st.title("📅 COUPDAYBS — Days from Coupon Period Start to Settlement")
st.caption(
    "Spreadsheet-compatible COUPDAYBS: previous coupon date from maturity and frequency, "
    "then the day count to settlement under the chosen basis."
)

FREQ_LABELS = {1: "Annual (1)", 2: "Semiannual (2)", 4: "Quarterly (4)"}

tab1, tab2, tab3 = st.tabs(["Single bond", "Settlement sweep", "Batch (CSV)"])


# ===== TAB 1: Single calculation =====
with tab1:
    st.subheader("Single calculation")

    c1, c2 = st.columns(2)
    settle_str = c1.text_input("Settlement date (YYYY-MM-DD or serial)", value="2020-01-25")
    mat_str = c2.text_input("Maturity date (YYYY-MM-DD or serial)", value="2020-06-30")

    c3, c4 = st.columns(2)
    freq = c3.selectbox(
        "Payments per year",
        options=list(VALID_FREQUENCIES),
        index=1,
        format_func=lambda f: FREQ_LABELS[f],
    )
    basis = c4.selectbox(
        "Basis",
        options=list(BASIS_NAMES),
        index=DEFAULT_BASIS,
        format_func=lambda b: f"{b} — {BASIS_NAMES[b]}",
    )

    result = coupdaybs(settle_str, mat_str, freq, basis)
    if is_error(result):
        st.error(f"COUPDAYBS returned {result}")
    else:
        settle_serial = date_serial_from_value(settle_str)
        mat_serial = date_serial_from_value(mat_str)
        pcd = previous_coupon_date(settle_serial, mat_serial, freq)
        m1, m2, m3 = st.columns(3)
        m1.metric("Days (COUPDAYBS)", f"{result}")
        m2.metric("Previous coupon date", pcd.isoformat())
        m3.metric("Previous coupon serial", f"{coupon_serial(pcd)}")
        st.info(
            "The coupon date is found by moving maturity's month/day into the settlement year "
            "and stepping back by 12 / frequency months until it is on or before settlement."
        )


# ===== TAB 2: Sweep =====
with tab2:
    st.subheader("Day count across settlement dates")
    st.caption("Sawtooth: the count resets to 0 on each coupon date.")

    s1, s2, s3 = st.columns(3)
    mat_sw = s1.text_input("Maturity (YYYY-MM-DD)", value="2030-08-31", key="sw_mat")
    start_sw = s2.text_input("First settlement", value="2024-01-01", key="sw_start")
    end_sw = s3.text_input("Last settlement", value="2025-12-31", key="sw_end")

    s4, s5 = st.columns(2)
    freq_sw = s4.selectbox(
        "Payments per year",
        options=list(VALID_FREQUENCIES),
        index=1,
        format_func=lambda f: FREQ_LABELS[f],
        key="sw_freq",
    )
    basis_sw = s5.selectbox(
        "Basis",
        options=list(BASIS_NAMES),
        index=DEFAULT_BASIS,
        format_func=lambda b: f"{b} — {BASIS_NAMES[b]}",
        key="sw_basis",
    )

    try:
        mat_d = parse_date(mat_sw)
        start_d = parse_date(start_sw)
        end_d = parse_date(end_sw)
    except ValueError:
        st.error("Invalid date format. Use YYYY-MM-DD.")
    else:
        if end_d < start_d:
            st.error("Last settlement must not be before the first.")
        else:
            sweep = cached_settlement_sweep(mat_d, freq_sw, basis_sw, start_d, end_d)
            fig, ax = plt.subplots()
            ax.plot(sweep["settlement"], sweep["days"])
            ax.set_xlabel("Settlement date")
            ax.set_ylabel("Days since previous coupon")
            ax.set_title(f"Maturity {mat_d.isoformat()}, {FREQ_LABELS[freq_sw]}, basis {basis_sw}")
            fig.autofmt_xdate()
            st.pyplot(fig, use_container_width=True)


# ===== TAB 3: Batch =====
with tab3:
    st.subheader("Batch COUPDAYBS from CSV")
    st.markdown(
        """
Upload a CSV with columns:

- `settlement`, `maturity` – dates (YYYY-MM-DD) or serial numbers
- `frequency` – 1, 2 or 4
- Optional: `basis` – 0..4 (defaults to 0)

Rows that fail come back with the spreadsheet error text in `days`.
"""
    )

    sample_csv = """settlement,maturity,frequency,basis
2020-01-25,2020-06-30,2,0
2021-03-15,2030-08-31,2,1
2021-03-15,2030-08-31,3,1
"""
    st.download_button(
        "Download sample CSV",
        data=sample_csv,
        file_name="sample_coupdaybs.csv",
        mime="text/csv",
    )

    upl = st.file_uploader("Upload CSV", type=["csv"], key="batch_upl")
    if upl is not None:
        try:
            batch_df = pd.read_csv(upl, dtype={"settlement": str, "maturity": str})
            batch_df.columns = [c.lower().strip() for c in batch_df.columns]
            out = cached_coupdaybs_frame(batch_df)
            st.dataframe(out.astype({"days": str}), use_container_width=True)
            st.download_button(
                "Download results (CSV)",
                data=out.to_csv(index=False).encode("utf-8"),
                file_name="coupdaybs_results.csv",
                mime="text/csv",
            )
        except Exception as e:
            st.error(f"Could not process CSV: {e}")
