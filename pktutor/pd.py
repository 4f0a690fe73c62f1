from dataclasses import dataclass
import math


@dataclass(frozen=True)
class EmaxModel:
    """Sigmoid Emax PD model with baseline.

    Effect = baseline + (Emax * C^h) / (EC50^h + C^h)
    """
    emax: float
    ec50: float
    baseline: float = 0.0
    hill: float = 1.0

    def effect(self, concentration: float) -> float:
        if concentration <= 0:
            return self.baseline
        c_h = concentration ** self.hill
        return self.baseline + (self.emax * c_h) / (self.ec50 ** self.hill + c_h)


@dataclass(frozen=True)
class TurnoverModel:
    """Indirect response with inhibition of production (warfarin on PCA).

    dR/dt = kon * baseline * (1 - Emax * C / (EC50 + C)) - kon * R
    kon = ln 2 / turnover half-life
    """
    baseline: float
    emax: float
    ec50: float
    turnover_half_life: float

    def __post_init__(self) -> None:
        if self.turnover_half_life <= 0:
            raise ValueError("turnover_half_life must be positive")
        if self.ec50 <= 0:
            raise ValueError("ec50 must be positive")

    @property
    def kon(self) -> float:
        return math.log(2) / self.turnover_half_life

    def inhibition(self, concentration: float) -> float:
        c = max(concentration, 0.0)
        return self.emax * c / (self.ec50 + c)

    def rhs(self, concentration: float, response: float) -> float:
        return self.kon * self.baseline * (1.0 - self.inhibition(concentration)) - self.kon * response
