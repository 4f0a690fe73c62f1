"""Reading and wrangling of the warfarin PK/PD dataset.

The raw file is in long NONMEM-like format: one row per dose or observation,
with ``DVID`` 1 for concentration and 2 for prothrombin complex activity
(PCA), and ``.`` marking missing values.
"""

from typing import IO, Any, Dict, Iterator, Optional, Sequence, Tuple, Union
import logging

import numpy as np
import pandas as pd

from .config import settings
from .errors import DataError
from .pk import allometric_scale

LOGGER = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["ID", "TIME", "WEIGHT", "AGE", "SEX", "AMOUNT", "DVID", "DV"]
BLQ_METHODS = ("discard", "drop", "lloq")


def read_warfarin(path: Union[str, IO], missing_values: Optional[Sequence[str]] = None) -> pd.DataFrame:
    na_values = list(settings.missing_values if missing_values is None else missing_values)
    df = pd.read_csv(path, na_values=na_values, dtype={"ID": str})
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise DataError(f"Missing columns in dataset: {missing}")
    LOGGER.info("Read %d rows x %d columns from %s", len(df), df.shape[1], path)
    return df


def describe_dataset(df: pd.DataFrame) -> Dict[str, Any]:
    """Rows, columns, dtypes and missing counts (only columns that have any)."""
    counts = df.isna().sum()
    return {
        "rows": len(df),
        "columns": df.shape[1],
        "column_names": list(df.columns),
        "dtypes": {c: str(t) for c, t in df.dtypes.items()},
        "missing": {c: int(n) for c, n in counts.items() if n > 0},
    }


def deduplicate_times(
    df: pd.DataFrame,
    keys: Tuple[str, str, str] = ("ID", "TIME", "DVID"),
    offset: Optional[float] = None,
) -> pd.DataFrame:
    """Make ``keys`` unique by nudging the time of repeated records.

    The first record of a repeated triple keeps its time; the k-th repeat is
    shifted by ``k * offset``. Both values are assumed to be informative.
    """
    step = settings.duplicate_time_offset if offset is None else offset
    out = df.copy()
    # dropna=False so dose rows (DVID missing) are grouped too
    rank = out.groupby(list(keys), dropna=False, sort=False).cumcount()
    n_dup = int((rank > 0).sum())
    if n_dup:
        LOGGER.info("Adjusted time of %d duplicated records", n_dup)
    time_col = keys[1]
    out[time_col] = out[time_col] + rank * step
    return out


def add_derived_columns(
    df: pd.DataFrame,
    reference_weight: Optional[float] = None,
    clearance_exponent: Optional[float] = None,
) -> pd.DataFrame:
    out = df.copy()
    cl_exp = settings.clearance_exponent if clearance_exponent is None else clearance_exponent
    weight = out["WEIGHT"].to_numpy(dtype=float)
    out["FSZV"] = allometric_scale(weight, settings.volume_exponent, reference_weight)
    out["FSZCL"] = allometric_scale(weight, cl_exp, reference_weight)
    out["DVNAME"] = "DV" + out["DVID"].astype("Int64").astype(str)
    is_dose = out["AMOUNT"].notna()
    out["CMT"] = pd.Series(np.where(is_dose, 1, pd.NA), index=out.index, dtype="Int64")
    out["EVID"] = is_dose.astype(int)
    return out


def drop_invalid_subjects(df: pd.DataFrame, marker: str = "#") -> pd.DataFrame:
    keep = ~df["ID"].astype(str).str.contains(marker, regex=False)
    n_removed = int((~keep).sum())
    LOGGER.info("Removed %d rows with invalid subject IDs", n_removed)
    return df[keep].reset_index(drop=True)


def to_wide(df: pd.DataFrame) -> pd.DataFrame:
    """Spread DV by DVNAME into ``conc`` (DV1) and ``pca`` (DV2) columns."""
    keep_cols = [c for c in df.columns if c not in ("DVID", "DVNAME", "DV")]
    doses = df[df["EVID"] == 1]
    obs = df[df["EVID"] == 0]
    values = obs.groupby(["ID", "TIME", "DVNAME"], sort=False)["DV"].first().unstack("DVNAME")
    values.columns.name = None
    covariates = obs[keep_cols].drop_duplicates(["ID", "TIME"])
    wide = covariates.merge(values.reset_index(), on=["ID", "TIME"], how="left")
    wide = pd.concat([doses[keep_cols], wide], ignore_index=True, sort=False)
    wide = wide.rename(columns={"DV1": "conc", "DV2": "pca"})
    for col in ("conc", "pca"):
        if col not in wide.columns:
            wide[col] = np.nan
    wide = wide.sort_values(["ID", "TIME", "EVID"], ascending=[True, True, False], kind="stable")
    return wide.reset_index(drop=True)


def wrangle(df: pd.DataFrame) -> pd.DataFrame:
    """Dedup times, derive covariates and event columns, drop bad IDs, reshape wide."""
    out = deduplicate_times(df)
    out = add_derived_columns(out)
    out = drop_invalid_subjects(out)
    wide = to_wide(out)
    LOGGER.info("Wrangled dataset: %d rows, %d subjects", len(wide), wide["ID"].nunique())
    return wide


def flag_blq(df: pd.DataFrame, lloq: Optional[float] = None) -> pd.DataFrame:
    limit = settings.lloq if lloq is None else lloq
    out = df.copy()
    out["BLQ"] = (out["EVID"] == 0) & out["conc"].notna() & (out["conc"] < limit)
    return out


def handle_blq(df: pd.DataFrame, method: str = "discard", lloq: Optional[float] = None) -> pd.DataFrame:
    """Apply a BLQ strategy to ``conc``.

    discard: set BLQ concentrations to missing
    drop: remove BLQ rows
    lloq: replace BLQ concentrations by the LLOQ
    """
    if method not in BLQ_METHODS:
        raise ValueError(f"Unknown BLQ method: {method}")
    limit = settings.lloq if lloq is None else lloq
    out = flag_blq(df, limit)
    LOGGER.info("BLQ handling '%s' on %d records", method, int(out["BLQ"].sum()))
    if method == "discard":
        out.loc[out["BLQ"], "conc"] = np.nan
    elif method == "drop":
        out = out[~out["BLQ"]].reset_index(drop=True)
    else:
        out.loc[out["BLQ"], "conc"] = limit
    return out


def concentration_profiles(df: pd.DataFrame, value: str = "conc") -> Iterator[Tuple[str, np.ndarray, np.ndarray]]:
    """Yield ``(id, times, values)`` per subject from non-missing observation rows."""
    obs = df[(df["EVID"] == 0) & df[value].notna()]
    for subject_id, group in obs.groupby("ID", sort=True):
        group = group.sort_values("TIME")
        yield subject_id, group["TIME"].to_numpy(dtype=float), group[value].to_numpy(dtype=float)
