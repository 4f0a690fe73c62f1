from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

ROUTES = ("iv", "oral")


@dataclass(frozen=True)
class Dose:
    time: float  # hours
    amount: float  # mg
    route: str = "oral"  # "iv" or "oral"
    infusion_duration: Optional[float] = None  # hours, for IV infusion

    def __post_init__(self) -> None:
        if self.route not in ROUTES:
            raise ValueError(f"Unsupported route: {self.route}")
        if self.infusion_duration is not None and self.route != "iv":
            raise ValueError("infusion_duration only applies to iv doses")

    @property
    def is_infusion(self) -> bool:
        return self.infusion_duration is not None and self.infusion_duration > 0


@dataclass(frozen=True)
class Regimen:
    doses: List[Dose]

    @staticmethod
    def repeated(start: float, every: float, n: int, amount: float, *, route: str = "oral", infusion_duration: Optional[float] = None) -> "Regimen":
        """Create a repeated dosing regimen.
        - start: first dose time (h)
        - every: interval (h)
        - n: number of doses
        - amount: dose amount (mg)
        - route: "iv" or "oral"
        - infusion_duration: hours if IV infusion
        """
        doses = []
        for i in range(n):
            doses.append(Dose(time=start + i * every, amount=amount, route=route, infusion_duration=infusion_duration))
        return Regimen(doses=doses)

    @staticmethod
    def from_events(df: pd.DataFrame, *, route: str = "oral") -> "Regimen":
        """Regimen from the dose rows (EVID == 1) of a wrangled dataset for one subject."""
        dose_rows = df[df["EVID"] == 1].sort_values("TIME")
        doses = [Dose(time=float(r.TIME), amount=float(r.AMOUNT), route=route) for r in dose_rows.itertuples()]
        return Regimen(doses=doses)

    @property
    def times(self) -> List[float]:
        return [d.time for d in self.doses]

    def total_amount(self) -> float:
        return sum(d.amount for d in self.doses)
