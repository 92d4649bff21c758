from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd

from maf_survgroup.errors import InsufficientGenesError
from maf_survgroup.maf import MafStore


@dataclass(frozen=True)
class MutationMatrix:
    """
    matrix: rows=samples with >=1 mutation in the gene universe, cols=genes (0/1)
    missing_samples: cohort samples without a row (no mutation in any of the genes)
    """

    matrix: pd.DataFrame
    genes: list[str]
    missing_samples: list[str]

    @property
    def samples(self) -> list[str]:
        return self.matrix.index.astype(str).tolist()

    def mutant_samples(self, combo: tuple[str, ...] | list[str]) -> list[str]:
        # Logical AND: mutated in every gene of the combination.
        mm = self.matrix.loc[:, list(combo)]
        hits = mm.sum(axis=1) == len(combo)
        return mm.index[hits].astype(str).tolist()


def _binarize(df: pd.DataFrame) -> pd.DataFrame:
    return (df > 0).astype("int8")


def build_mutation_matrix(store: MafStore, genes: list[str]) -> MutationMatrix:
    logger = logging.getLogger(__name__)
    om = store.oncomatrix(genes)
    resolved = [g for g in genes if g in om.columns]
    if len(resolved) < 2:
        raise InsufficientGenesError(len(resolved), where="mutation matrix build")
    unresolved = [g for g in genes if g not in om.columns]
    if unresolved:
        logger.warning("no mutations found for %d genes: %s", len(unresolved), ", ".join(unresolved))

    mat = _binarize(om.reindex(columns=genes, fill_value=0))
    present = set(mat.index.astype(str))
    missing = [s for s in store.samples() if s not in present]
    logger.info(
        "mutation matrix: %d samples x %d genes (%d cohort samples without mutations in these genes)",
        mat.shape[0],
        mat.shape[1],
        len(missing),
    )
    return MutationMatrix(matrix=mat, genes=list(genes), missing_samples=missing)
