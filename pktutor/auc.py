"""Trapezoidal area under a concentration-time curve.

The area is accumulated as a strict left-to-right fold so that results are
reproducible bit-for-bit for a given input pair.
"""

from functools import partial, reduce
from itertools import accumulate
from typing import List, Sequence
import math

import numpy as np

from .errors import ProfileError


def trapezoid_step(
    accumulated: float,
    i: int,
    times: Sequence[float],
    observations: Sequence[float],
) -> float:
    """Add the trapezoid between samples ``i`` and ``i + 1`` to ``accumulated``."""
    area = (observations[i] + observations[i + 1]) * (times[i + 1] - times[i]) / 2
    return accumulated + area


def _check_lengths(times: Sequence[float], observations: Sequence[float]) -> None:
    if len(times) != len(observations):
        raise ProfileError(
            f"times and observations differ in length ({len(times)} != {len(observations)})"
        )


def _as_arrays(times, observations):
    # positional float arrays; a pandas index must not leak into indexing
    return np.asarray(times, dtype=float), np.asarray(observations, dtype=float)


def trapezoid_auc(times: Sequence[float], observations: Sequence[float]) -> float:
    """Total area under the piecewise-linear curve through the samples.

    Precondition: ``times`` is strictly increasing and neither sequence holds
    missing values. These are not checked here; an unordered time axis yields
    negative area for the offending intervals and NaN propagates into the
    result. Use :func:`profile_auc` when the input has not been validated.

    Fewer than two samples give ``0.0``. Sequences of different length raise
    :class:`ProfileError` before any accumulation.
    """
    _check_lengths(times, observations)
    times, observations = _as_arrays(times, observations)
    step = partial(trapezoid_step, times=times, observations=observations)
    return reduce(step, range(len(times) - 1), 0.0)


def cumulative_auc(times: Sequence[float], observations: Sequence[float]) -> List[float]:
    """Running area after each sample, starting at ``0.0`` for the first one."""
    _check_lengths(times, observations)
    times, observations = _as_arrays(times, observations)
    if len(times) == 0:
        return []
    step = partial(trapezoid_step, times=times, observations=observations)
    return list(accumulate(range(len(times) - 1), step, initial=0.0))


def validate_profile(times: Sequence[float], observations: Sequence[float]) -> None:
    """Reject profiles the reducer cannot integrate meaningfully."""
    _check_lengths(times, observations)
    times, observations = _as_arrays(times, observations)
    for i, (t, obs) in enumerate(zip(times, observations)):
        if math.isnan(t) or math.isnan(obs):
            raise ProfileError(f"missing value at sample {i}")
    for i in range(len(times) - 1):
        if times[i + 1] <= times[i]:
            raise ProfileError(
                f"times must be strictly increasing (t[{i}]={times[i]}, t[{i + 1}]={times[i + 1]})"
            )


def profile_auc(times: Sequence[float], observations: Sequence[float]) -> float:
    validate_profile(times, observations)
    return trapezoid_auc(times, observations)
