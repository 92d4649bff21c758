import logging

import numpy as np
import pandas as pd
import pytest

from maf_survgroup.clinical import coerce_status, harmonize_clinical
from maf_survgroup.errors import MissingColumnError


@pytest.fixture
def messy():
    return pd.DataFrame(
        {
            "Tumor_Sample_Barcode": ["S1", "S2", "S3", "S4", "S5", "S6"],
            "days": [10, "abc", np.inf, " 5.5 ", None, 20],
            "vital": [1, 0, 1, "TRUE", 1, "unknown"],
        }
    )


def test_harmonize_drops_invalid_records(messy, caplog):
    with caplog.at_level(logging.INFO, logger="maf_survgroup.clinical"):
        out = harmonize_clinical(messy, time_col="days", status_col="vital")
    assert out["Tumor_Sample_Barcode"].tolist() == ["S1", "S4"]
    assert out["Time"].tolist() == [10.0, 5.5]
    assert out["Status"].tolist() == [1, 1]
    assert f"Removed {len(messy) - len(out)} samples with NA's" in caplog.text


def test_harmonize_canonical_columns(harmonized):
    assert list(harmonized.columns) == ["Tumor_Sample_Barcode", "Time", "Status"]
    assert harmonized["Time"].dtype == float
    assert str(harmonized["Status"].dtype) == "Int64"
    assert len(harmonized) == 10


def test_harmonize_does_not_touch_input(messy):
    before = messy.copy()
    harmonize_clinical(messy, time_col="days", status_col="vital")
    pd.testing.assert_frame_equal(messy, before)


def test_harmonize_no_log_when_nothing_dropped(harmonized, clinical_df, caplog):
    with caplog.at_level(logging.INFO, logger="maf_survgroup.clinical"):
        harmonize_clinical(clinical_df, time_col="days_to_last_followup", status_col="Overall_Survival_Status")
    assert "Removed" not in caplog.text


def test_negative_infinity_dropped():
    df = pd.DataFrame({"Tumor_Sample_Barcode": ["a", "b"], "Time": [-np.inf, 3.0], "Status": [1, 0]})
    out = harmonize_clinical(df)
    assert out["Tumor_Sample_Barcode"].tolist() == ["b"]


def test_status_coercion():
    assert coerce_status(pd.Series([True, False])).tolist() == [1, 0]
    s = coerce_status(pd.Series(["1", "FALSE", 1.0, "dead", None]))
    assert s.iloc[:3].tolist() == [1, 0, 1]
    assert s.iloc[3:].isna().all()


@pytest.mark.parametrize(
    "drop,time_col,status_col,missing",
    [
        ("Tumor_Sample_Barcode", "days", "vital", "Tumor_Sample_Barcode"),
        (None, "os_days", "vital", "os_days"),
        (None, "days", "os_status", "os_status"),
    ],
)
def test_missing_columns(messy, drop, time_col, status_col, missing):
    df = messy.drop(columns=[drop]) if drop else messy
    with pytest.raises(MissingColumnError) as exc:
        harmonize_clinical(df, time_col=time_col, status_col=status_col)
    assert exc.value.column == missing
    assert exc.value.available == list(df.columns)
    for col in df.columns:
        assert col in str(exc.value)
