import math

import pandas as pd
import pytest

from pktutor.auc import cumulative_auc, profile_auc, trapezoid_auc, trapezoid_step, validate_profile
from pktutor.errors import ProfileError

TIMES = [0, 1, 2, 4, 8, 12, 24]
OBS = [0.01, 112, 224, 220, 143, 109, 57]


def test_fewer_than_two_samples_give_zero():
    assert trapezoid_auc([], []) == 0.0
    assert trapezoid_auc([3.0], [42.0]) == 0.0


def test_two_point_trapezoid():
    assert trapezoid_auc([0, 2], [10, 20]) == 30.0


def test_reference_profile():
    assert abs(trapezoid_auc(TIMES, OBS) - 2894.005) < 1e-6


def test_left_fold_order_is_exact():
    expected = 0.0
    for i in range(len(TIMES) - 1):
        expected = expected + (OBS[i] + OBS[i + 1]) * (TIMES[i + 1] - TIMES[i]) / 2
    assert trapezoid_auc(TIMES, OBS) == expected


def test_step_adds_single_trapezoid():
    assert trapezoid_step(5.0, 1, TIMES, OBS) == 5.0 + (112 + 224) * 1 / 2


def test_reversed_profile_gives_negative_area():
    area = trapezoid_auc(TIMES, OBS)
    reversed_area = trapezoid_auc(TIMES[::-1], OBS[::-1])
    assert reversed_area < 0
    assert abs(reversed_area + area) < 1e-9


def test_scaling_observations_scales_area():
    k = 3.5
    scaled = trapezoid_auc(TIMES, [k * o for o in OBS])
    assert abs(scaled - k * trapezoid_auc(TIMES, OBS)) < 1e-9


def test_nan_propagates():
    assert math.isnan(trapezoid_auc([0, 1, 2], [1.0, float("nan"), 2.0]))


def test_length_mismatch_fails_fast():
    with pytest.raises(ProfileError):
        trapezoid_auc([0, 1, 2], [1.0, 2.0])
    with pytest.raises(ValueError):
        cumulative_auc([0, 1], [1.0])


def test_cumulative_auc_ends_at_total():
    running = cumulative_auc(TIMES, OBS)
    assert len(running) == len(TIMES)
    assert running[0] == 0.0
    assert running[-1] == trapezoid_auc(TIMES, OBS)
    assert all(b >= a for a, b in zip(running, running[1:]))
    assert cumulative_auc([], []) == []


def test_validate_profile_rejects_unordered_and_missing():
    with pytest.raises(ProfileError):
        validate_profile([0, 2, 1], [1, 2, 3])
    with pytest.raises(ProfileError):
        validate_profile([0, 1, 1], [1, 2, 3])
    with pytest.raises(ProfileError):
        validate_profile([0, 1, 2], [1, float("nan"), 3])
    validate_profile(TIMES, OBS)


def test_profile_auc_validates_then_integrates():
    assert abs(profile_auc(TIMES, OBS) - 2894.005) < 1e-6
    with pytest.raises(ProfileError):
        profile_auc(TIMES[::-1], OBS[::-1])


def test_series_with_non_default_index_is_read_positionally():
    times = pd.Series([0.0, 2.0], index=[5, 6])
    obs = pd.Series([10.0, 20.0], index=[5, 6])
    assert trapezoid_auc(times, obs) == 30.0
    assert cumulative_auc(times, obs) == [0.0, 30.0]


def test_sorted_frame_columns_integrate_in_time_order():
    df = pd.DataFrame({"TIME": [4.0, 0.0, 2.0], "conc": [1.0, 5.0, 3.0]}).sort_values("TIME")
    # sorted index is [1, 2, 0]; label lookup would integrate the wrong samples
    assert trapezoid_auc(df["TIME"], df["conc"]) == 12.0
    assert profile_auc(df["TIME"], df["conc"]) == 12.0
