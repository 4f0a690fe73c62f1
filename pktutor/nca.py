from dataclasses import asdict, dataclass
from typing import Optional, Sequence
import logging
import math

import numpy as np
import pandas as pd

from .auc import profile_auc, validate_profile
from .data import concentration_profiles
from .errors import ProfileError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class NcaSummary:
    cmax: float
    tmax: float
    clast: float
    tlast: float
    auc_last: float
    lambda_z: float
    half_life: float
    auc_inf: float
    clearance: float


def terminal_elimination_rate(
    times: Sequence[float],
    conc: Sequence[float],
    n_points: int = 3,
    lloq: Optional[float] = None,
) -> float:
    """Elimination rate from a log-linear fit to the last ``n_points`` samples.

    Only positive concentrations (and those at or above ``lloq`` when given)
    are used. Returns the negated slope of ln(C) against time.
    """
    t = np.asarray(times, dtype=float)
    c = np.asarray(conc, dtype=float)
    usable = c > 0
    if lloq is not None:
        usable &= c >= lloq
    t, c = t[usable][-n_points:], c[usable][-n_points:]
    if len(t) < 2:
        raise ProfileError("need at least two positive concentrations in the terminal phase")
    log_c = np.log(c)
    t_mean = t.mean()
    slope = np.sum((t - t_mean) * (log_c - log_c.mean())) / np.sum((t - t_mean) ** 2)
    return float(-slope)


def summarize_profile(
    times: Sequence[float],
    conc: Sequence[float],
    dose: Optional[float] = None,
    n_terminal: int = 3,
) -> NcaSummary:
    validate_profile(times, conc)
    if len(times) == 0:
        raise ProfileError("empty profile")
    t = np.asarray(times, dtype=float)
    c = np.asarray(conc, dtype=float)
    i_max = int(np.argmax(c))
    auc_last = profile_auc(t.tolist(), c.tolist())

    try:
        lambda_z = terminal_elimination_rate(t, c, n_points=n_terminal)
    except ProfileError:
        lambda_z = math.nan
    if not lambda_z > 0:
        lambda_z = math.nan

    half_life = math.log(2) / lambda_z
    auc_inf = auc_last + c[-1] / lambda_z
    clearance = dose / auc_inf if dose is not None and auc_inf > 0 else math.nan
    return NcaSummary(
        cmax=float(c[i_max]),
        tmax=float(t[i_max]),
        clast=float(c[-1]),
        tlast=float(t[-1]),
        auc_last=auc_last,
        lambda_z=lambda_z,
        half_life=half_life,
        auc_inf=float(auc_inf),
        clearance=float(clearance),
    )


def nca_by_subject(df: pd.DataFrame, dose_column: str = "AMOUNT", n_terminal: int = 3) -> pd.DataFrame:
    """One NCA row per subject of a wrangled dataset.

    The subject dose is the sum of its dose rows. Subjects whose profile fails
    validation are skipped with a warning.
    """
    doses = df[df["EVID"] == 1].groupby("ID")[dose_column].sum()
    rows = []
    for subject_id, times, conc in concentration_profiles(df):
        try:
            summary = summarize_profile(times, conc, dose=doses.get(subject_id), n_terminal=n_terminal)
        except ProfileError as exc:
            LOGGER.warning("Skipping subject %s: %s", subject_id, exc)
            continue
        rows.append({"ID": subject_id, "dose": doses.get(subject_id, math.nan), **asdict(summary)})
    columns = ["ID", "dose"] + list(NcaSummary.__dataclass_fields__)
    return pd.DataFrame(rows, columns=columns)
