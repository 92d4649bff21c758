from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from maf_survgroup.config import VC_NON_SYN, MafColumns
from maf_survgroup.errors import MissingColumnError
from maf_survgroup.io import read_table


def _require_columns(df: pd.DataFrame, columns: tuple[str, ...] | list[str], *, what: str) -> None:
    for col in columns:
        if col not in df.columns:
            raise MissingColumnError(col, list(df.columns), hint=f"Required in {what}.")


@dataclass
class MafStore:
    """
    Read-only view over a MAF.

    data: non-synonymous variants (one row per variant)
    silent: variants outside the non-synonymous classes; their samples stay in the cohort
    """

    data: pd.DataFrame
    silent: pd.DataFrame = field(default_factory=pd.DataFrame)
    clinical: pd.DataFrame | None = None

    def gene_summary(self) -> pd.DataFrame:
        g, vc, s = MafColumns.GENE, MafColumns.VARIANT_CLASS, MafColumns.SAMPLE
        if self.data.empty:
            return pd.DataFrame(columns=[g, "total", "MutatedSamples"])
        counts = pd.crosstab(self.data[g], self.data[vc])
        counts.columns.name = None
        counts["total"] = counts.sum(axis=1)
        counts["MutatedSamples"] = self.data.groupby(g)[s].nunique()
        # First-seen order is the tie-breaker.
        counts = counts.reindex(pd.unique(self.data[g]))
        counts = counts.sort_values(["MutatedSamples", "total"], ascending=[False, False], kind="mergesort")
        counts.index.name = g
        return counts.reset_index()

    def sample_summary(self) -> pd.DataFrame:
        vc, s = MafColumns.VARIANT_CLASS, MafColumns.SAMPLE
        empty = pd.Series(dtype=str)
        all_samples = pd.unique(pd.concat([self.data.get(s, empty), self.silent.get(s, empty)]))
        if self.data.empty:
            counts = pd.DataFrame(index=all_samples)
        else:
            counts = pd.crosstab(self.data[s], self.data[vc])
            counts.columns.name = None
        counts = counts.reindex(all_samples, fill_value=0)
        counts["total"] = counts.sum(axis=1)
        counts = counts.sort_values("total", ascending=False, kind="mergesort")
        counts.index.name = s
        return counts.reset_index()

    def samples(self) -> list[str]:
        return self.sample_summary()[MafColumns.SAMPLE].astype(str).tolist()

    def oncomatrix(self, genes: list[str]) -> pd.DataFrame:
        """
        Mutation counts, rows=samples mutated in at least one of `genes`, cols=genes found in the MAF.
        """
        g, s = MafColumns.GENE, MafColumns.SAMPLE
        d = self.data[self.data[g].isin(genes)] if not self.data.empty else self.data
        if d.empty:
            return pd.DataFrame(index=pd.Index([], name=s, dtype=str))
        m = pd.crosstab(d[s], d[g])
        m.columns.name = None
        m.index.name = s
        return m[[x for x in genes if x in m.columns]]

    def clinical_data(self) -> pd.DataFrame:
        if self.clinical is None:
            return pd.DataFrame({MafColumns.SAMPLE: self.samples()})
        return self.clinical.copy()


def read_maf(
    maf: Path | str | pd.DataFrame,
    *,
    clinical_data: Path | str | pd.DataFrame | None = None,
    vc_non_syn: tuple[str, ...] | list[str] | None = None,
) -> MafStore:
    logger = logging.getLogger(__name__)
    df = maf.copy() if isinstance(maf, pd.DataFrame) else read_table(Path(maf))
    _require_columns(df, MafColumns.REQUIRED, what="MAF")

    df[MafColumns.GENE] = df[MafColumns.GENE].astype(str)
    df[MafColumns.SAMPLE] = df[MafColumns.SAMPLE].astype(str)
    df[MafColumns.VARIANT_CLASS] = df[MafColumns.VARIANT_CLASS].astype(str)

    classes = set(vc_non_syn if vc_non_syn is not None else VC_NON_SYN)
    keep = df[MafColumns.VARIANT_CLASS].isin(classes)
    data = df[keep].reset_index(drop=True)
    silent = df[~keep].reset_index(drop=True)
    logger.info(
        "loaded MAF: %d variants (%d non-synonymous, %d silent) across %d samples",
        df.shape[0],
        data.shape[0],
        silent.shape[0],
        df[MafColumns.SAMPLE].nunique(),
    )

    clinical: pd.DataFrame | None = None
    if clinical_data is not None:
        clinical = clinical_data.copy() if isinstance(clinical_data, pd.DataFrame) else read_table(Path(clinical_data))
        _require_columns(clinical, [MafColumns.SAMPLE], what="clinical data")
        clinical[MafColumns.SAMPLE] = clinical[MafColumns.SAMPLE].astype(str)
        logger.info("attached clinical data: %d rows x %d cols", clinical.shape[0], clinical.shape[1])

    return MafStore(data=data, silent=silent, clinical=clinical)
