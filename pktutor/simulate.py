"""Warfarin PK/PD simulation.

One-compartment model with lagged first-order absorption driving an indirect
response (inhibition of prothrombin complex activity production). Dose events
split the time axis into segments which are integrated one after another with
SciPy, so bolus doses are applied exactly at their event times.
"""

from dataclasses import dataclass, replace
from functools import partial
from typing import List, Optional, Sequence, Tuple
import logging

import numpy as np
import pandas as pd

from .config import settings
from .pd import TurnoverModel
from .pk import allometric_scale, rate_from_half_life
from .regimen import Regimen
from .solver import integrate_ode

LOGGER = logging.getLogger(__name__)

DEPOT, CENTRAL, PCA = 0, 1, 2
_EVENT_TOL = 1e-9


@dataclass(frozen=True)
class WarfarinParameters:
    clearance: float = 0.134  # L/h (70 kg)
    volume: float = 8.11  # L (70 kg)
    tabs: float = 0.523  # absorption half-life, h
    lag: float = 0.1  # h
    baseline: float = 100.0  # PCA
    emax: float = 1.0
    ec50: float = 1.0  # mg/L
    turnover_half_life: float = 14.0  # h

    @property
    def ka(self) -> float:
        return rate_from_half_life(self.tabs)

    def for_weight(self, weight: float, reference_weight: Optional[float] = None) -> "WarfarinParameters":
        """Scale clearance and volume by body weight (FSZCL, FSZV)."""
        fszcl = allometric_scale(weight, settings.clearance_exponent, reference_weight)
        fszv = allometric_scale(weight, settings.volume_exponent, reference_weight)
        return replace(self, clearance=self.clearance * fszcl, volume=self.volume * fszv)

    def with_etas(self, eta_cl: float, eta_v: float, eta_tabs: float) -> "WarfarinParameters":
        return replace(
            self,
            clearance=self.clearance * np.exp(eta_cl),
            volume=self.volume * np.exp(eta_v),
            tabs=self.tabs * np.exp(eta_tabs),
        )

    def with_pd_etas(
        self, eta_baseline: float, eta_emax: float, eta_ec50: float, eta_turnover: float
    ) -> "WarfarinParameters":
        return replace(
            self,
            baseline=self.baseline * np.exp(eta_baseline),
            emax=self.emax * np.exp(eta_emax),
            ec50=self.ec50 * np.exp(eta_ec50),
            turnover_half_life=self.turnover_half_life * np.exp(eta_turnover),
        )

    def with_lag_eta(self, eta_lag: float) -> "WarfarinParameters":
        return replace(self, lag=self.lag * np.exp(eta_lag))


@dataclass(frozen=True)
class ResidualError:
    """Observation noise: combined proportional and additive on conc, additive on PCA (SDs)."""

    prop: float = 0.00752
    add: float = 0.0661  # mg/L
    pca: float = 0.01


@dataclass(frozen=True)
class WarfarinPKPD:
    params: WarfarinParameters

    @property
    def response(self) -> TurnoverModel:
        p = self.params
        return TurnoverModel(baseline=p.baseline, emax=p.emax, ec50=p.ec50, turnover_half_life=p.turnover_half_life)

    def initial_state(self) -> Tuple[float, float, float]:
        return (0.0, 0.0, self.params.baseline)

    def concentration(self, central: float) -> float:
        return central / self.params.volume

    def rhs(self, t: float, y: Sequence[float], infusion_rate: float = 0.0) -> List[float]:
        depot, central, pca = y
        ka = self.params.ka
        cp = self.concentration(central)
        return [
            -ka * depot,
            ka * depot - self.params.clearance * cp + infusion_rate,
            self.response.rhs(cp, pca),
        ]


def _bolus_events(params: WarfarinParameters, regimen: Regimen) -> List[Tuple[float, int, float]]:
    events = []
    for dose in regimen.doses:
        if dose.route == "oral":
            events.append((dose.time + params.lag, DEPOT, dose.amount))
        elif not dose.is_infusion:
            events.append((dose.time, CENTRAL, dose.amount))
    return events


def _infusions(regimen: Regimen) -> List[Tuple[float, float, float]]:
    return [
        (d.time, d.time + d.infusion_duration, d.amount / d.infusion_duration)
        for d in regimen.doses
        if d.is_infusion
    ]


def simulate_regimen(
    params: WarfarinParameters,
    regimen: Regimen,
    t_end: float,
    dt: float = 0.5,
    t_start: float = 0.0,
) -> pd.DataFrame:
    """Simulate one subject on ``regimen``.

    - params: structural PK/PD parameters
    - regimen: doses; oral doses enter the depot after the lag time
    - t_end, t_start: simulation window (h)
    - dt: output grid spacing (h); event times are always added to the grid

    Rows at a dose time hold the post-dose state. Doses at or after ``t_end``
    are not applied.
    """
    if t_end <= t_start:
        raise ValueError("t_end must be greater than t_start")
    if dt <= 0:
        raise ValueError("dt must be positive")

    model = WarfarinPKPD(params)
    boluses = _bolus_events(params, regimen)
    infusions = _infusions(regimen)

    edges = {t_start, t_end}
    edges.update(t for t, _, _ in boluses if t_start < t < t_end)
    edges.update(e for start, stop, _ in infusions for e in (start, stop) if t_start < e < t_end)
    breakpoints = sorted(edges)
    grid = np.union1d(np.arange(t_start, t_end + 1e-12, dt), breakpoints)
    grid = grid[grid <= t_end]

    state = list(model.initial_state())
    times: List[float] = []
    states: List[List[float]] = []
    for seg, (a, b) in enumerate(zip(breakpoints[:-1], breakpoints[1:])):
        for t_dose, cmt, amount in boluses:
            if abs(t_dose - a) < _EVENT_TOL:
                state[cmt] += amount
        rate = sum(r for start, stop, r in infusions if start <= a + _EVENT_TOL and a < stop - _EVENT_TOL)
        t_eval = grid[(grid >= a) & (grid <= b)]
        res = integrate_ode(partial(model.rhs, infusion_rate=rate), y0=state, t_span=(a, b), t_eval=t_eval)
        last_segment = seg == len(breakpoints) - 2
        keep = len(res.t) if last_segment else len(res.t) - 1
        for k in range(keep):
            times.append(res.t[k])
            # first point of a segment is the exact post-dose state
            states.append(list(state) if k == 0 else [res.y[i][k] for i in range(3)])
        state = [res.y[i][-1] for i in range(3)]

    arr = np.asarray(states, dtype=float)
    return pd.DataFrame({
        "time": times,
        "depot": arr[:, DEPOT],
        "central": arr[:, CENTRAL],
        "conc": arr[:, CENTRAL] / params.volume,
        "pca": arr[:, PCA],
    })


def add_residual_error(
    df: pd.DataFrame, rng: np.random.Generator, sigma: ResidualError = ResidualError()
) -> pd.DataFrame:
    """Add noisy ``conc_obs`` and ``pca_obs`` columns next to the model predictions."""
    out = df.copy()
    sd = np.sqrt((sigma.prop * out["conc"].to_numpy()) ** 2 + sigma.add ** 2)
    out["conc_obs"] = rng.normal(out["conc"].to_numpy(), sd)
    out["pca_obs"] = rng.normal(out["pca"].to_numpy(), sigma.pca)
    return out


def simulate_population(
    params: WarfarinParameters,
    regimen: Regimen,
    n_subjects: int,
    t_end: float,
    dt: float = 0.5,
    omega: Tuple[float, float, float] = (0.01, 0.01, 0.01),
    weights: Optional[Sequence[float]] = None,
    seed: Optional[int] = None,
    omega_pd: Tuple[float, float, float, float] = (0.01, 0.01, 0.01, 0.01),
    omega_lag: float = 0.01,
    simulate_error: bool = False,
    sigma: ResidualError = ResidualError(),
) -> pd.DataFrame:
    """Simulate ``n_subjects`` with log-normal between-subject variability.

    - omega: variances of the random effects on CL, V and tabs
    - omega_pd: variances on PCA baseline, Emax, EC50 and turnover half-life
    - omega_lag: variance on the absorption lag time
    - weights: optional per-subject body weights, scaled before the random effects
    - simulate_error: add ``conc_obs``/``pca_obs`` drawn with ``sigma``

    All draws come from one generator seeded with ``seed``.
    """
    if n_subjects < 1:
        raise ValueError("n_subjects must be at least 1")
    if weights is not None and len(weights) != n_subjects:
        raise ValueError("weights must have one entry per subject")
    rng = np.random.default_rng(seed)
    etas = rng.normal(0.0, np.sqrt(np.asarray(omega, dtype=float)), size=(n_subjects, 3))
    pd_etas = rng.normal(0.0, np.sqrt(np.asarray(omega_pd, dtype=float)), size=(n_subjects, 4))
    lag_etas = rng.normal(0.0, np.sqrt(omega_lag), size=n_subjects)

    frames = []
    for i in range(n_subjects):
        p = params if weights is None else params.for_weight(weights[i])
        p = p.with_etas(*etas[i]).with_pd_etas(*pd_etas[i]).with_lag_eta(lag_etas[i])
        df = simulate_regimen(p, regimen, t_end=t_end, dt=dt)
        if simulate_error:
            df = add_residual_error(df, rng, sigma)
        df.insert(0, "id", i + 1)
        df["CL"] = p.clearance
        df["V"] = p.volume
        df["E0"] = p.baseline
        frames.append(df)
    LOGGER.info("Simulated %d subjects over %.1f h", n_subjects, t_end)
    return pd.concat(frames, ignore_index=True)
