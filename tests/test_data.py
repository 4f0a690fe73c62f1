import io

import numpy as np
import pandas as pd
import pytest

from pktutor.data import (
    add_derived_columns,
    concentration_profiles,
    deduplicate_times,
    describe_dataset,
    drop_invalid_subjects,
    flag_blq,
    handle_blq,
    read_warfarin,
    wrangle,
)
from pktutor.errors import DataError
from pktutor.regimen import Regimen


def test_read_warfarin_treats_dot_as_missing(warfarin_csv):
    df = read_warfarin(str(warfarin_csv))
    assert len(df) == 17
    assert df["AMOUNT"].notna().sum() == 3
    info = describe_dataset(df)
    assert info["rows"] == 17
    assert info["missing"]["AMOUNT"] == 14
    assert info["missing"]["DVID"] == 3
    assert "WEIGHT" not in info["missing"]


def test_read_warfarin_requires_columns(tmp_path):
    path = tmp_path / "bad.csv"
    pd.DataFrame({"ID": [1], "TIME": [0.0]}).to_csv(path, index=False)
    with pytest.raises(DataError):
        read_warfarin(str(path))


def test_deduplicate_times_makes_triples_unique(warfarin_csv):
    df = read_warfarin(str(warfarin_csv))
    out = deduplicate_times(df, offset=1e-6)
    assert not out.duplicated(["ID", "TIME", "DVID"]).any()
    subj2 = out[(out["ID"] == "2") & (out["DVID"] == 1)]["TIME"].tolist()
    assert subj2[:2] == [1.0, 1.0 + 1e-6]
    assert len(out) == len(df)


def test_derived_columns():
    df = pd.DataFrame({
        "ID": ["1", "1"],
        "TIME": [0.0, 1.0],
        "WEIGHT": [140.0, 140.0],
        "AMOUNT": [100.0, np.nan],
        "DVID": [np.nan, 1.0],
        "DV": [np.nan, 3.0],
    })
    out = add_derived_columns(df)
    assert out["FSZV"].tolist() == [2.0, 2.0]
    assert abs(out["FSZCL"].iloc[0] - 2 ** 0.75) < 1e-12
    assert out["EVID"].tolist() == [1, 0]
    assert out["CMT"].iloc[0] == 1
    assert pd.isna(out["CMT"].iloc[1])
    assert out["DVNAME"].iloc[1] == "DV1"


def test_drop_invalid_subjects(warfarin_csv):
    df = read_warfarin(str(warfarin_csv))
    out = drop_invalid_subjects(df)
    assert set(out["ID"]) == {"1", "2"}
    assert len(out) == 15


def test_wrangle_to_wide(warfarin_csv):
    wide = wrangle(read_warfarin(str(warfarin_csv)))
    assert {"conc", "pca", "FSZV", "FSZCL", "CMT", "EVID"} <= set(wide.columns)
    assert "DV" not in wide.columns
    assert len(wide) == 14
    subj1 = wide[wide["ID"] == "1"]
    assert subj1["EVID"].iloc[0] == 1
    row24 = subj1[subj1["TIME"] == 24.0].iloc[0]
    assert row24["conc"] == 8.0
    assert row24["pca"] == 40.0


def test_blq_strategies(warfarin_csv):
    wide = wrangle(read_warfarin(str(warfarin_csv)))
    flagged = flag_blq(wide, lloq=1.0)
    assert int(flagged["BLQ"].sum()) == 1

    discarded = handle_blq(wide, "discard", lloq=1.0)
    assert len(discarded) == len(wide)
    assert discarded["conc"].notna().sum() == wide["conc"].notna().sum() - 1

    dropped = handle_blq(wide, "drop", lloq=1.0)
    assert len(dropped) == len(wide) - 1

    imputed = handle_blq(wide, "lloq", lloq=1.0)
    assert imputed.loc[imputed["BLQ"], "conc"].tolist() == [1.0]

    with pytest.raises(ValueError):
        handle_blq(wide, "m7")


def test_handle_blq_reflags_at_the_requested_limit():
    df = pd.DataFrame({"ID": ["1", "1", "1"], "TIME": [1.0, 2.0, 3.0], "EVID": [0, 0, 0], "conc": [8.0, 3.0, 0.5]})
    flagged = flag_blq(df, lloq=1.0)
    out = handle_blq(flagged, "discard", lloq=5.0)
    assert out["BLQ"].tolist() == [False, True, True]
    assert out["conc"].isna().tolist() == [False, True, True]
    assert out["conc"].iloc[0] == 8.0
    assert flagged["conc"].tolist() == [8.0, 3.0, 0.5]


def test_read_warfarin_accepts_file_like(warfarin_csv):
    from_buffer = read_warfarin(io.StringIO(warfarin_csv.read_text()))
    from_path = read_warfarin(str(warfarin_csv))
    pd.testing.assert_frame_equal(from_buffer, from_path)


def test_concentration_profiles_are_clean_and_sorted(warfarin_csv):
    wide = handle_blq(wrangle(read_warfarin(str(warfarin_csv))), "discard", lloq=1.0)
    profiles = {sid: (t, c) for sid, t, c in concentration_profiles(wide)}
    assert list(profiles) == ["1", "2"]
    times, conc = profiles["1"]
    assert times.tolist() == [1.0, 2.0, 24.0, 48.0, 72.0]
    assert conc.tolist() == [9.0, 12.0, 8.0, 4.0, 2.0]
    assert np.all(np.diff(profiles["2"][0]) > 0)


def test_regimen_from_dataset_events(warfarin_csv):
    wide = wrangle(read_warfarin(str(warfarin_csv)))
    regimen = Regimen.from_events(wide[wide["ID"] == "2"])
    assert regimen.times == [0.0]
    assert regimen.total_amount() == 150.0
