from __future__ import annotations

import logging
import warnings

import numpy as np
import pandas as pd
from lifelines import CoxPHFitter, KaplanMeierFitter
from lifelines.exceptions import ConvergenceWarning
from lifelines.statistics import logrank_test

from maf_survgroup.config import GroupEncoding, MafColumns
from maf_survgroup.errors import CombinationFitFailure
from maf_survgroup.stats import chisq_p, signif


def _to_numeric(s: pd.Series) -> pd.Series:
    return pd.to_numeric(s, errors="coerce")


def label_groups(clinical: pd.DataFrame, mutant_samples: list[str]) -> pd.DataFrame:
    """
    Copy of the harmonized clinical table with a Group column (Mutant/WT).
    WT is everyone in the clinical cohort who is not a mutant.
    """
    cd = clinical.copy()
    is_mut = cd[MafColumns.SAMPLE].astype(str).isin(set(mutant_samples))
    cd["Group"] = np.where(is_mut, GroupEncoding.MUTANT, GroupEncoding.WT)
    return cd


def km_median_time(time: pd.Series, event: pd.Series) -> float | None:
    df = pd.DataFrame({"time": _to_numeric(time), "event": _to_numeric(event)})
    df = df.dropna()
    if df.empty:
        return None
    km = KaplanMeierFitter()
    km.fit(df["time"], event_observed=df["event"])
    median = km.median_survival_time_
    if median is None or (isinstance(median, float) and np.isnan(median)):
        return None
    return float(median)


def fit_group_km(cd: pd.DataFrame) -> dict[str, KaplanMeierFitter]:
    """
    One Kaplan-Meier fit per group (Mutant first). Requires a labelled table from label_groups.
    """
    kmfs: dict[str, KaplanMeierFitter] = {}
    for g in (GroupEncoding.MUTANT, GroupEncoding.WT):
        sub = cd[cd["Group"] == g]
        if sub.empty:
            continue
        kmf = KaplanMeierFitter()
        kmf.fit(sub["Time"].astype(float), event_observed=sub["Status"].astype(int), label=g)
        kmfs[g] = kmf
    return kmfs


def km_curve_table(clinical: pd.DataFrame, mutant_samples: list[str]) -> pd.DataFrame:
    """
    Survival estimates at observed event times, per group, with log-log 95% bounds.
    """
    cd = label_groups(clinical, mutant_samples)
    parts: list[pd.DataFrame] = []
    for g, kmf in fit_group_km(cd).items():
        et = kmf.event_table
        times = et.index[et["observed"] > 0]
        if len(times) == 0:
            continue
        sf = kmf.survival_function_.loc[times].iloc[:, 0]
        ci = kmf.confidence_interval_survival_function_.loc[times]
        parts.append(
            pd.DataFrame(
                {
                    "Group": g,
                    "Time": np.asarray(times, dtype=float),
                    "survProb": sf.to_numpy(dtype=float),
                    "survUp": ci.iloc[:, 1].to_numpy(dtype=float),
                    "survLower": ci.iloc[:, 0].to_numpy(dtype=float),
                }
            )
        )
    if not parts:
        return pd.DataFrame(columns=["Group", "Time", "survProb", "survUp", "survLower"])
    return pd.concat(parts, axis=0, ignore_index=True)


def logrank_p(cd: pd.DataFrame) -> float:
    a = cd[cd["Group"] == GroupEncoding.MUTANT]
    b = cd[cd["Group"] == GroupEncoding.WT]
    res = logrank_test(
        a["Time"].astype(float),
        b["Time"].astype(float),
        event_observed_A=a["Status"].astype(int),
        event_observed_B=b["Status"].astype(int),
    )
    stat = float(np.ravel(res.test_statistic)[0])
    if not np.isfinite(stat):
        return float("nan")
    return chisq_p(stat, dof=cd["Group"].nunique() - 1)


def cox_hazard_ratio(cd: pd.DataFrame) -> float:
    """
    HR of Mutant vs WT from a single-covariate Cox model (Mutant=1, WT=0).
    """
    model_df = pd.DataFrame(
        {
            "Time": cd["Time"].astype(float).to_numpy(),
            "Status": cd["Status"].astype(int).to_numpy(),
            GroupEncoding.COVARIATE: np.where(
                cd["Group"] == GroupEncoding.MUTANT, GroupEncoding.MUTANT_CODE, GroupEncoding.WT_CODE
            ),
        }
    )
    cph = CoxPHFitter()
    cph.fit(model_df, duration_col="Time", event_col="Status")
    return float(np.exp(cph.params_[GroupEncoding.COVARIATE]))


def run_surv(clinical: pd.DataFrame, mutant_samples: list[str], *, combination: str = "") -> dict[str, object]:
    """
    Log-rank p-value and Cox HR for Mutant vs WT.

    Raises CombinationFitFailure when the two-group model is undefined
    (an empty group, no events) or a fit does not produce a finite value.
    """
    cd = label_groups(clinical, mutant_samples)
    n_mut = int((cd["Group"] == GroupEncoding.MUTANT).sum())
    n_wt = int((cd["Group"] == GroupEncoding.WT).sum())
    if n_mut == 0 or n_wt == 0:
        raise CombinationFitFailure(combination, f"only one group present (Mutant={n_mut}, WT={n_wt})")
    if int(cd["Status"].astype(int).sum()) == 0:
        raise CombinationFitFailure(combination, "no events")

    kmfs = fit_group_km(cd)
    if len(kmfs) != 2:
        raise CombinationFitFailure(combination, "Kaplan-Meier fit needs both groups")

    try:
        p = logrank_p(cd)
    except Exception as e:
        raise CombinationFitFailure(combination, f"log-rank test failed: {e}") from e
    if not np.isfinite(p):
        raise CombinationFitFailure(combination, "log-rank statistic is not finite")

    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", ConvergenceWarning)
            hr = cox_hazard_ratio(cd)
    except Exception as e:
        raise CombinationFitFailure(combination, f"Cox fit failed: {e}") from e
    if not np.isfinite(hr):
        raise CombinationFitFailure(combination, "hazard ratio is not finite")

    # The row is still emitted; the HR is degenerate under separation.
    events = cd.groupby("Group")["Status"].apply(lambda s: int(s.astype(int).sum()))
    no_event_groups = [g for g, n in events.items() if n == 0]
    converged = not any(issubclass(w.category, ConvergenceWarning) for w in caught)
    if no_event_groups or not converged:
        logging.getLogger(__name__).warning(
            "%s: unreliable hazard ratio %.3g (no events in %s; converged=%s)",
            combination,
            hr,
            ", ".join(no_event_groups) or "-",
            converged,
        )

    return {
        "P_value": signif(p, 3),
        "hr": signif(hr, 3),
        "WT": n_wt,
        "Mutant": n_mut,
    }
