class ProfileError(ValueError):
    """Concentration-time profile is unusable (length mismatch, unordered times, missing values)."""


class DataError(ValueError):
    """Dataset is missing required columns or holds unexpected values."""


class SimulationError(RuntimeError):
    """ODE integration did not complete."""
