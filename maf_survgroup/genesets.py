from __future__ import annotations

import logging
from itertools import combinations

from maf_survgroup.config import MafColumns, SurvGroupDefaults
from maf_survgroup.errors import InsufficientGenesError
from maf_survgroup.maf import MafStore


def select_genes(
    store: MafStore,
    *,
    top: int = SurvGroupDefaults.TOP,
    genes: list[str] | None = None,
) -> list[str]:
    """
    Gene universe: explicit `genes` as given, else the `top` most frequently mutated genes.
    """
    logger = logging.getLogger(__name__)
    if genes is not None:
        selected = list(dict.fromkeys(str(g) for g in genes))
        if len(selected) < len(genes):
            logger.warning("dropped %d duplicated genes from the gene list", len(genes) - len(selected))
    else:
        if top < 1:
            raise ValueError(f"top must be at least 1, got {top}")
        summary = store.gene_summary()
        selected = summary[MafColumns.GENE].head(top).astype(str).tolist()
        logger.debug("top %d genes by mutated samples: %s", top, ", ".join(selected))
    if len(selected) < 2:
        raise InsufficientGenesError(len(selected), where="gene selection")
    return selected


def gene_combinations(genes: list[str], k: int) -> list[tuple[str, ...]]:
    if k < 1 or k > len(genes):
        raise ValueError(f"gene set size must be between 1 and {len(genes)}, got {k}")
    return list(combinations(genes, k))


def combination_name(combo: tuple[str, ...]) -> str:
    return "_".join(combo)
