import math

import pytest

from pktutor.data import handle_blq, read_warfarin, wrangle
from pktutor.errors import ProfileError
from pktutor.nca import nca_by_subject, summarize_profile, terminal_elimination_rate


def test_terminal_rate_on_log_linear_decline():
    times = [0, 0.5, 1, 2, 4, 8, 12]
    concs = [100.0, 85.2, 72.5, 52.4, 27.5, 7.6, 2.1]
    k_el = terminal_elimination_rate(times, concs)
    assert k_el > 0

    exact = terminal_elimination_rate([24, 48, 72], [8.0, 4.0, 2.0])
    assert abs(exact - math.log(2) / 24) < 1e-12


def test_terminal_rate_respects_lloq():
    with pytest.raises(ProfileError):
        terminal_elimination_rate([1, 2, 3], [5.0, 0.5, 0.2], lloq=1.0)


def test_summarize_profile():
    s = summarize_profile([1, 2, 24, 48, 72], [9.0, 12.0, 8.0, 4.0, 2.0], dose=100.0)
    assert s.cmax == 12.0
    assert s.tmax == 2.0
    assert s.tlast == 72.0
    assert abs(s.auc_last - 446.5) < 1e-9
    assert abs(s.half_life - 24.0) < 1e-9
    assert abs(s.auc_inf - (446.5 + 48.0 / math.log(2))) < 1e-9
    assert abs(s.clearance - 100.0 / s.auc_inf) < 1e-12


def test_summarize_profile_without_terminal_phase():
    s = summarize_profile([0, 1, 2], [1.0, 2.0, 3.0])
    assert math.isnan(s.lambda_z)
    assert math.isnan(s.auc_inf)
    assert math.isnan(s.clearance)
    assert s.auc_last == 4.0


def test_summarize_profile_rejects_bad_input():
    with pytest.raises(ProfileError):
        summarize_profile([0, 1], [1.0])
    with pytest.raises(ProfileError):
        summarize_profile([], [])


def test_nca_by_subject(warfarin_csv):
    wide = handle_blq(wrangle(read_warfarin(str(warfarin_csv))), "discard", lloq=1.0)
    table = nca_by_subject(wide)
    assert table["ID"].tolist() == ["1", "2"]
    subj1 = table.iloc[0]
    assert subj1["dose"] == 100.0
    assert abs(subj1["auc_last"] - 446.5) < 1e-9
    assert table.iloc[1]["dose"] == 150.0
    assert table.iloc[1]["auc_last"] > 0
