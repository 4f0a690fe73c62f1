from dataclasses import dataclass
from typing import Optional, Tuple, Union
import math

import numpy as np

from .config import settings

ArrayLike = Union[float, np.ndarray]


def _require_positive(**values: float) -> None:
    for name, value in values.items():
        if not value > 0:
            raise ValueError(f"{name} must be positive, got {value}")


def elimination_rate(clearance: float, volume: float) -> float:
    """k = CL / V (1/h)."""
    _require_positive(clearance=clearance, volume=volume)
    return clearance / volume


def half_life(rate: float) -> float:
    _require_positive(rate=rate)
    return math.log(2) / rate


def rate_from_half_life(t_half: float) -> float:
    """First-order rate constant from a half-life, e.g. Ka from the absorption half-life."""
    _require_positive(t_half=t_half)
    return math.log(2) / t_half


def clearance_from_rate(volume: float, rate: float) -> float:
    return volume * rate


def auc_from_dose(dose: float, clearance: float) -> float:
    """AUC(0-inf) = Dose / CL for linear kinetics."""
    _require_positive(clearance=clearance)
    return dose / clearance


def allometric_scale(
    weight: ArrayLike,
    exponent: float,
    reference_weight: Optional[float] = None,
) -> ArrayLike:
    """Size factor (WT / WTref)^exponent.

    exponent 1 gives the volume factor (FSZV), 0.75 the clearance factor (FSZCL).
    """
    ref = settings.reference_weight if reference_weight is None else reference_weight
    scaled = np.power(np.asarray(weight, dtype=float) / ref, exponent)
    return float(scaled) if scaled.ndim == 0 else scaled


def body_surface_area(weight_kg: ArrayLike, height_cm: float) -> ArrayLike:
    """DuBois body surface area (m^2)."""
    return 0.007184 * np.power(weight_kg, 0.425) * height_cm ** 0.725


def dose_by_weight(weight: ArrayLike, dose_per_kg: float) -> ArrayLike:
    return np.multiply(weight, dose_per_kg)


def bolus_concentration(
    dose: float,
    volume: float,
    clearance: float,
    t: ArrayLike,
    tau: Optional[float] = None,
) -> ArrayLike:
    """Analytic one-compartment IV bolus concentration at time(s) ``t``.

    With ``tau`` the dose is repeated every ``tau`` hours from t=0 and the
    contributions are superimposed.
    """
    k = elimination_rate(clearance, volume)
    c0 = dose / volume
    t_arr = np.asarray(t, dtype=float)
    if tau is None:
        conc = np.where(t_arr >= 0, c0 * np.exp(-k * np.clip(t_arr, 0.0, None)), 0.0)
    else:
        _require_positive(tau=tau)
        n_doses = np.floor(t_arr / tau).astype(int)
        conc = np.zeros_like(t_arr)
        for i in range(int(n_doses.max(initial=0)) + 1):
            since = t_arr - i * tau
            conc = conc + np.where(since >= 0, c0 * np.exp(-k * np.clip(since, 0.0, None)), 0.0)
    return float(conc) if conc.ndim == 0 else conc


@dataclass(frozen=True)
class OneCompIVBolus:
    """One-compartment IV bolus model.

    dA/dt = -k * A, where A is amount in central compartment (mg)
    C = A / V
    k = CL / V
    """
    clearance_L_per_h: float  # CL
    volume_L: float  # V

    def __post_init__(self) -> None:
        _require_positive(clearance_L_per_h=self.clearance_L_per_h, volume_L=self.volume_L)

    def k_elim(self) -> float:
        return elimination_rate(self.clearance_L_per_h, self.volume_L)

    def rhs(self, t: float, state: Tuple[float]) -> Tuple[float]:
        A = state[0]
        return (-self.k_elim() * A,)

    def concentration(self, state: Tuple[float]) -> float:
        return state[0] / self.volume_L


@dataclass(frozen=True)
class OneCompFirstOrderAbsorption:
    """One-compartment with first-order absorption (oral).

    States:
      A_depot: amount at absorption site (mg)
      A_c: central amount (mg)
    Equations:
      dA_depot/dt = -ka * A_depot
      dA_c/dt = F * ka * A_depot - ke * A_c
    ke = CL / V
    """
    clearance_L_per_h: float
    volume_L: float
    ka_per_h: float
    bioavailability: float = 1.0

    def __post_init__(self) -> None:
        _require_positive(
            clearance_L_per_h=self.clearance_L_per_h,
            volume_L=self.volume_L,
            ka_per_h=self.ka_per_h,
            bioavailability=self.bioavailability,
        )

    @classmethod
    def from_absorption_half_life(
        cls, clearance_L_per_h: float, volume_L: float, tabs_h: float, bioavailability: float = 1.0
    ) -> "OneCompFirstOrderAbsorption":
        return cls(
            clearance_L_per_h=clearance_L_per_h,
            volume_L=volume_L,
            ka_per_h=rate_from_half_life(tabs_h),
            bioavailability=bioavailability,
        )

    def k_elim(self) -> float:
        return elimination_rate(self.clearance_L_per_h, self.volume_L)

    def rhs(self, t: float, state: Tuple[float, float]) -> Tuple[float, float]:
        A_depot, A_c = state
        ka = self.ka_per_h
        dA_depot_dt = -ka * A_depot
        dA_c_dt = self.bioavailability * ka * A_depot - self.k_elim() * A_c
        return (dA_depot_dt, dA_c_dt)

    def concentration(self, state: Tuple[float, float]) -> float:
        return state[1] / self.volume_L
