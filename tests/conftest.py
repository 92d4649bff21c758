import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from maf_survgroup.maf import read_maf

SAMPLES = [f"S{i:02d}" for i in range(1, 11)]


def _variant(gene, sample, vc="Missense_Mutation"):
    return {"Hugo_Symbol": gene, "Variant_Classification": vc, "Tumor_Sample_Barcode": sample}


@pytest.fixture
def maf_df():
    rows = []
    # A: S01-S05 (two hits in S01)
    rows += [_variant("A", s) for s in SAMPLES[:5]]
    rows.append(_variant("A", "S01", "Nonsense_Mutation"))
    # B: every sample
    rows += [_variant("B", s, "Frame_Shift_Del") for s in SAMPLES]
    # C: S02, S09; D: S09 only
    rows += [_variant("C", "S02"), _variant("C", "S09"), _variant("D", "S09")]
    # silent-only sample
    rows.append(_variant("E", "S11", "Silent"))
    return pd.DataFrame(rows)


@pytest.fixture
def clinical_df():
    # Mutants of A (S01-S05) die early; 6 deaths, 4 censored.
    return pd.DataFrame(
        {
            "Tumor_Sample_Barcode": SAMPLES,
            "days_to_last_followup": [5, 8, 10, 12, 15, 7, 40, 45, 50, 60],
            "Overall_Survival_Status": [1, 1, 1, 1, 0, 1, 0, 1, 0, 0],
            "age": np.arange(50, 60),
        }
    )


@pytest.fixture
def store(maf_df, clinical_df):
    return read_maf(maf_df, clinical_data=clinical_df)


@pytest.fixture
def harmonized(clinical_df):
    from maf_survgroup.clinical import harmonize_clinical

    return harmonize_clinical(
        clinical_df, time_col="days_to_last_followup", status_col="Overall_Survival_Status"
    )
