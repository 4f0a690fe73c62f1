"""pktutor: pharmacometrics course toolkit.

Trapezoidal AUC, the PK formulas used throughout the course, reading and
wrangling of the warfarin PK/PD dataset, non-compartmental summaries and
warfarin PK/PD simulation.

Run the CLI with: python -m pktutor.cli
"""

from .auc import cumulative_auc, profile_auc, trapezoid_auc

__all__ = [
    "auc",
    "config",
    "errors",
    "data",
    "nca",
    "pd",
    "pk",
    "plots",
    "regimen",
    "simulate",
    "solver",
    "cumulative_auc",
    "profile_auc",
    "trapezoid_auc",
]

__version__ = "0.1.0"
