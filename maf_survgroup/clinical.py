from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from maf_survgroup.config import MafColumns, SurvGroupDefaults
from maf_survgroup.errors import MissingColumnError

_BOOL_STRINGS = {"TRUE": 1, "FALSE": 0, "True": 1, "False": 0, "true": 1, "false": 0}


def _to_numeric(s: pd.Series) -> pd.Series:
    return pd.to_numeric(s, errors="coerce")


def coerce_time(s: pd.Series) -> pd.Series:
    if pd.api.types.is_object_dtype(s) or pd.api.types.is_string_dtype(s):
        s = s.map(lambda v: v.strip() if isinstance(v, str) else v)
    t = _to_numeric(s).astype(float)
    return t.where(np.isfinite(t))


def _status_value(v: object) -> object:
    if isinstance(v, (bool, np.bool_)):
        return int(v)
    if isinstance(v, str):
        return _BOOL_STRINGS.get(v.strip(), v)
    return v


def coerce_status(s: pd.Series) -> pd.Series:
    if pd.api.types.is_bool_dtype(s):
        return s.astype("Int64")
    s = s.map(_status_value)
    x = _to_numeric(s).astype(float)
    x = x.where(np.isfinite(x))
    return np.trunc(x).astype("Int64")


def validate_clinical_columns(clinical: pd.DataFrame, *, time_col: str, status_col: str) -> None:
    available = list(clinical.columns)
    if MafColumns.SAMPLE not in clinical.columns:
        raise MissingColumnError(
            MafColumns.SAMPLE,
            available,
            hint=f"Rename the sample identifier column to {MafColumns.SAMPLE}.",
        )
    if time_col not in clinical.columns:
        raise MissingColumnError(
            time_col, available, hint="Use argument time to provide the column containing time to event."
        )
    if status_col not in clinical.columns:
        raise MissingColumnError(
            status_col, available, hint="Use argument status to provide the column containing events (dead or alive)."
        )


def harmonize_clinical(
    clinical: pd.DataFrame,
    *,
    time_col: str = SurvGroupDefaults.TIME,
    status_col: str = SurvGroupDefaults.STATUS,
) -> pd.DataFrame:
    """
    Returns a new table with columns Tumor_Sample_Barcode, Time (float), Status (Int64).
    Records with a missing/infinite time or a missing status are dropped.
    """
    logger = logging.getLogger(__name__)
    validate_clinical_columns(clinical, time_col=time_col, status_col=status_col)

    out = pd.DataFrame(
        {
            MafColumns.SAMPLE: clinical[MafColumns.SAMPLE].astype(str),
            "Time": coerce_time(clinical[time_col]),
            "Status": coerce_status(clinical[status_col]),
        }
    ).reset_index(drop=True)

    n_in = int(out.shape[0])
    out = out.dropna(subset=["Time", "Status"]).reset_index(drop=True)
    n_dropped = n_in - int(out.shape[0])
    if n_dropped > 0:
        logger.info("Removed %d samples with NA's", n_dropped)
    return out
